from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Sequence

import pytest

from samplebank.config import BuildConfig
from samplebank.errors import ExternalToolError
from samplebank.render import ToolPaths


class FakeRunner:
    """Stands in for fluidsynth and lame by writing the files they would produce."""

    def __init__(self, fail_when: Callable[[list[str]], bool] | None = None) -> None:
        self.commands: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self._fail_when = fail_when
        self._lock = threading.Lock()

    def __call__(self, command: Sequence[str], *, timeout: float | None = None) -> None:
        args = [str(part) for part in command]
        with self._lock:
            self.commands.append(args)
            self.timeouts.append(timeout)
        if self._fail_when is not None and self._fail_when(args):
            raise ExternalToolError(f"Exit status 1: {' '.join(args)}", command=args, returncode=1)
        if "-F" in args:
            Path(args[args.index("-F") + 1]).write_bytes(b"RIFF")
        else:
            Path(args[-1]).with_suffix(".mp3").write_bytes(b"ID3")


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture(autouse=True)
def _isolated_log_dir(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SAMPLEBANK_LOG_DIR", str(tmp_path_factory.mktemp("logs")))
    monkeypatch.delenv("SAMPLEBANK_DEBUG", raising=False)


@pytest.fixture
def soundfont(tmp_path: Path) -> Path:
    path = tmp_path / "bank.sf2"
    path.write_bytes(b"sfbk")
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def tools() -> ToolPaths:
    return ToolPaths(fluidsynth="/usr/bin/fluidsynth", lame="/usr/bin/lame")


@pytest.fixture
def make_config(soundfont: Path, output_dir: Path) -> Callable[..., BuildConfig]:
    def _make(**overrides: object) -> BuildConfig:
        values: dict[str, object] = {"soundfont": soundfont, "output_dir": output_dir}
        values.update(overrides)
        return BuildConfig.model_validate(values)

    return _make

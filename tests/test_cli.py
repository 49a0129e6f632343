from __future__ import annotations

import argparse
import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from samplebank import cli
from samplebank.logging_utils import configure_logging


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=120, force_terminal=False), buffer


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch, make_runner: type) -> object:
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    return make_runner()


def test_program_spec_parses_ranges() -> None:
    assert cli.program_spec("3") == [3]
    assert cli.program_spec("0-3") == [0, 1, 2, 3]
    with pytest.raises(argparse.ArgumentTypeError):
        cli.program_spec("7-2")
    with pytest.raises(argparse.ArgumentTypeError):
        cli.program_spec("piano")


def test_config_from_args_applies_defaults(soundfont: Path, output_dir: Path) -> None:
    args = cli.build_parser().parse_args(
        ["build", "--soundfont", str(soundfont), "--output-dir", str(output_dir), "--programs", "0-2", "40"]
    )
    config = cli.config_from_args(args)
    assert config.programs == (0, 1, 2, 40)
    assert config.velocities == (85,)
    assert config.percussion is True
    assert config.workers == 10


def test_no_percussion_flag(soundfont: Path, output_dir: Path) -> None:
    args = cli.build_parser().parse_args(
        ["build", "--soundfont", str(soundfont), "--output-dir", str(output_dir), "--no-percussion"]
    )
    assert cli.config_from_args(args).percussion is False


def test_build_end_to_end(soundfont: Path, output_dir: Path, fake_tools: object) -> None:
    console, buffer = _console()
    code = cli.main(
        [
            "build",
            "--soundfont",
            str(soundfont),
            "--output-dir",
            str(output_dir),
            "--programs",
            "0",
            "--no-percussion",
            "--yes",
        ],
        console=console,
        runner=fake_tools,
    )
    assert code == 0
    assert len(list((output_dir / "acoustic_grand_piano").glob("*.mp3"))) == 88
    catalog = json.loads((output_dir / "soundfont.json").read_text())
    assert catalog["instruments"] == {"0": "acoustic_grand_piano"}
    output = buffer.getvalue()
    assert "acoustic_grand_piano" in output
    assert "Wrote 88 samples" in output


def test_build_declined_at_prompt(
    soundfont: Path, output_dir: Path, fake_tools: object, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli.Confirm, "ask", classmethod(lambda cls, *args, **kwargs: False))
    console, _ = _console()
    code = cli.main(
        ["build", "--soundfont", str(soundfont), "--output-dir", str(output_dir), "--programs", "0"],
        console=console,
        runner=fake_tools,
    )
    assert code == 1
    assert list(output_dir.iterdir()) == []


def test_missing_output_dir_exits_non_zero(
    soundfont: Path, tmp_path: Path, fake_tools: object, capsys: pytest.CaptureFixture[str]
) -> None:
    console, _ = _console()
    code = cli.main(
        ["build", "--soundfont", str(soundfont), "--output-dir", str(tmp_path / "missing"), "--yes"],
        console=console,
        runner=fake_tools,
    )
    assert code == 1
    assert "Output directory does not exist" in capsys.readouterr().err
    assert not (tmp_path / "missing").exists()


def test_invalid_velocity_exits_non_zero(soundfont: Path, output_dir: Path, fake_tools: object) -> None:
    console, _ = _console()
    code = cli.main(
        ["build", "--soundfont", str(soundfont), "--output-dir", str(output_dir), "--velocities", "300", "--yes"],
        console=console,
        runner=fake_tools,
    )
    assert code == 1


def test_list_prints_every_program() -> None:
    console, buffer = _console()
    assert cli.main(["list"], console=console) == 0
    output = buffer.getvalue()
    assert "acoustic_grand_piano" in output
    assert "gunshot" in output


def test_note_conversions() -> None:
    console, buffer = _console()
    assert cli.main(["note", "A", "0"], console=console) == 0
    assert cli.main(["note", "--number", "108"], console=console) == 0
    output = buffer.getvalue()
    assert "A0 = 21" in output
    assert "108 = C8" in output


def test_note_rejects_unknown_name() -> None:
    console, _ = _console()
    assert cli.main(["note", "H", "2"], console=console) == 1


def test_note_requires_arguments() -> None:
    console, _ = _console()
    with pytest.raises(SystemExit) as info:
        cli.main(["note"], console=console)
    assert info.value.code == 2


def test_failed_build_logs_traceback_once(
    soundfont: Path,
    output_dir: Path,
    make_runner: type,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    log_path = configure_logging(force=True)
    assert log_path is not None
    console, _ = _console()
    code = cli.main(
        [
            "build",
            "--soundfont",
            str(soundfont),
            "--output-dir",
            str(output_dir),
            "--programs",
            "0",
            "--no-percussion",
            "--yes",
        ],
        console=console,
        runner=make_runner(fail_when=lambda args: "-F" in args),
    )
    assert code == 1
    text = log_path.read_text(encoding="utf-8")
    assert text.count("samplebank build failed") == 1
    assert "Traceback" in text
    assert f"(logs: {log_path})" in capsys.readouterr().err

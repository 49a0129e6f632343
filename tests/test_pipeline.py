from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from samplebank.config import BuildConfig
from samplebank.errors import PrerequisiteMissingError, RenderFailedError
from samplebank.pipeline import (
    build_samples,
    check_output_dir,
    check_prerequisites,
    find_tool,
)
from samplebank.pitch import note_to_number
from samplebank.render import ToolPaths

ConfigFactory = Callable[..., BuildConfig]


def _which(available: dict[str, str]) -> Callable[[str], str | None]:
    return available.get


def test_check_prerequisites_resolves_tools(make_config: ConfigFactory) -> None:
    config = make_config()
    tools = check_prerequisites(
        config,
        _which({"fluidsynth": "/opt/bin/fluidsynth", "lame": "/opt/bin/lame"}),
    )
    assert tools == ToolPaths(fluidsynth="/opt/bin/fluidsynth", lame="/opt/bin/lame")


def test_missing_soundfont(make_config: ConfigFactory, tmp_path: Path) -> None:
    config = make_config(soundfont=tmp_path / "missing.sf2")
    with pytest.raises(PrerequisiteMissingError, match="soundfont"):
        check_prerequisites(config, _which({"fluidsynth": "f", "lame": "l"}))


@pytest.mark.parametrize("missing", ["fluidsynth", "lame"])
def test_missing_tool(make_config: ConfigFactory, missing: str) -> None:
    available = {"fluidsynth": "/bin/fluidsynth", "lame": "/bin/lame"}
    del available[missing]
    with pytest.raises(PrerequisiteMissingError, match=missing):
        check_prerequisites(make_config(), _which(available))


def test_missing_output_root_is_not_created(make_config: ConfigFactory, tmp_path: Path) -> None:
    target = tmp_path / "nowhere"
    config = make_config(output_dir=target)
    with pytest.raises(PrerequisiteMissingError, match="Output directory"):
        check_prerequisites(config, _which({"fluidsynth": "f", "lame": "l"}))
    assert not target.exists()


def test_check_output_dir_rejects_files(tmp_path: Path) -> None:
    path = tmp_path / "file"
    path.write_text("x")
    with pytest.raises(PrerequisiteMissingError):
        check_output_dir(path)


def test_find_tool_uses_path_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/local/bin/{name}")
    assert find_tool("lame") == "/usr/local/bin/lame"


def test_end_to_end_single_piano(make_config: ConfigFactory, tools: ToolPaths, make_runner: type) -> None:
    config = make_config(programs=(0,), percussion=False, velocities=(85,))
    runner = make_runner()

    result = build_samples(config, tools=tools, runner=runner)

    expected = note_to_number("C", 8) - note_to_number("A", 0) + 1
    piano_dir = config.output_dir / "acoustic_grand_piano"
    assert len(list(piano_dir.glob("*.mp3"))) == expected
    assert result.sample_count == expected
    descriptor = json.loads((piano_dir / "instrument.json").read_text())
    assert descriptor["minPitch"] == note_to_number("A", 0)
    assert descriptor["maxPitch"] == note_to_number("C", 8)
    assert "velocities" not in descriptor
    catalog = json.loads(result.catalog.read_text())
    assert catalog["instruments"] == {"0": "acoustic_grand_piano"}
    assert len(runner.commands) == expected * 2
    assert sorted(path.name for path in config.output_dir.iterdir()) == ["acoustic_grand_piano", "soundfont.json"]


def test_end_to_end_with_drums_and_layers(make_config: ConfigFactory, tools: ToolPaths, make_runner: type) -> None:
    config = make_config(programs=(40, 0), percussion=True, velocities=(60, 100), workers=2)

    result = build_samples(config, tools=tools, runner=make_runner())

    assert [group.output_key for group in result.groups] == ["violin", "acoustic_grand_piano", "percussion"]
    assert (config.output_dir / "percussion" / "p35_v60.mp3").exists()
    assert (config.output_dir / "violin" / "p108_v100.mp3").exists()
    kit = json.loads((config.output_dir / "percussion" / "instrument.json").read_text())
    assert kit["velocities"] == [60, 100]
    catalog = json.loads(result.catalog.read_text())
    assert list(catalog["instruments"].items()) == [
        ("40", "violin"),
        ("0", "acoustic_grand_piano"),
        ("drums", "percussion"),
    ]


def test_failed_build_writes_no_catalog(make_config: ConfigFactory, tools: ToolPaths, make_runner: type) -> None:
    config = make_config(programs=(0, 1), percussion=False)
    runner = make_runner(fail_when=lambda args: "bright_acoustic_piano_p50" in args[-1])

    with pytest.raises(RenderFailedError) as info:
        build_samples(config, tools=tools, runner=runner)

    assert list(info.value.failures) == ["bright_acoustic_piano"]
    assert not (config.output_dir / "soundfont.json").exists()


def test_build_checks_prerequisites_before_rendering(
    make_config: ConfigFactory, make_runner: type, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("shutil.which", lambda name: None)
    runner = make_runner()
    with pytest.raises(PrerequisiteMissingError):
        build_samples(make_config(programs=(0,)), runner=runner)
    assert runner.commands == []

"""Prerequisite checks and the end-to-end build."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import BuildConfig
from .dispatch import dispatch_groups
from .errors import PrerequisiteMissingError
from .jobs import InstrumentGroup, enumerate_groups
from .metadata import write_catalog
from .pitch import validate_pitch_table
from .render import GroupResult, SampleRenderer, ToolPaths
from .runner import CommandRunner

_LOGGER = logging.getLogger("samplebank.pipeline")

Which = Callable[[str], Optional[str]]


@dataclass(frozen=True, slots=True)
class BuildResult:
    groups: tuple[GroupResult, ...]
    catalog: Path

    @property
    def sample_count(self) -> int:
        return sum(len(group.samples) for group in self.groups)


def check_output_dir(output_dir: Path) -> None:
    # The root is never created here, so a mistyped path fails instead of
    # scattering samples somewhere new.
    if not output_dir.is_dir():
        raise PrerequisiteMissingError(f"Output directory does not exist: {output_dir}")


def check_soundfont(soundfont: Path) -> None:
    if not soundfont.is_file():
        raise PrerequisiteMissingError(f"Can't find soundfont: {soundfont}")


def find_tool(name: str, which: Which | None = None) -> str:
    path = (which or shutil.which)(name)
    if not path:
        raise PrerequisiteMissingError(f"Can't find '{name}' command")
    return path


def check_prerequisites(config: BuildConfig, which: Which | None = None) -> ToolPaths:
    """Fail fast before any rendering; returns the resolved tool paths."""
    check_soundfont(config.soundfont)
    tools = ToolPaths(
        fluidsynth=find_tool(config.fluidsynth, which),
        lame=find_tool(config.lame, which),
    )
    check_output_dir(config.output_dir)
    return tools


def build_samples(
    config: BuildConfig,
    *,
    tools: ToolPaths | None = None,
    runner: CommandRunner | None = None,
    groups: list[InstrumentGroup] | None = None,
) -> BuildResult:
    validate_pitch_table()
    if tools is None:
        tools = check_prerequisites(config)
    else:
        check_soundfont(config.soundfont)
        check_output_dir(config.output_dir)
    if groups is None:
        groups = enumerate_groups(config)

    renderer = SampleRenderer(config, tools, runner)
    _LOGGER.info(
        "Rendering %d instrument(s) into %s with %d worker(s)",
        len(groups),
        config.output_dir,
        config.workers,
    )
    results = dispatch_groups(groups, renderer.render_group, workers=config.workers)
    catalog = write_catalog(config.output_dir, config.name, groups)
    return BuildResult(groups=tuple(results), catalog=catalog)

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import BuildConfig
from .errors import ExternalToolError
from .jobs import InstrumentGroup, SampleJob
from .metadata import write_instrument_metadata
from .midi import write_note_file
from .runner import CommandRunner, SubprocessRunner

_LOGGER = logging.getLogger("samplebank.render")

SAMPLE_SUFFIX = ".mp3"


@dataclass(frozen=True, slots=True)
class ToolPaths:
    fluidsynth: str
    lame: str


@dataclass(frozen=True, slots=True)
class GroupResult:
    output_key: str
    samples: tuple[Path, ...]
    metadata: Path


@dataclass(frozen=True, slots=True)
class TempPaths:
    midi: Path
    wav: Path
    mp3: Path


class SampleRenderer:
    """Turns sample jobs into MP3 files with fluidsynth and lame."""

    def __init__(
        self,
        config: BuildConfig,
        tools: ToolPaths,
        runner: CommandRunner | None = None,
    ) -> None:
        self._config = config
        self._tools = tools
        self._runner: CommandRunner = runner or SubprocessRunner()

    @property
    def output_dir(self) -> Path:
        return self._config.output_dir

    def temp_paths(self, job: SampleJob) -> TempPaths:
        stem = job.temp_stem
        return TempPaths(
            midi=self.output_dir / f"{stem}.midi",
            wav=self.output_dir / f"{stem}.wav",
            mp3=self.output_dir / f"{stem}{SAMPLE_SUFFIX}",
        )

    def sample_path(self, job: SampleJob) -> Path:
        return self.output_dir / job.output_key / f"{job.output_name}{SAMPLE_SUFFIX}"

    def synth_command(self, midi_path: Path, wav_path: Path) -> list[str]:
        return [
            self._tools.fluidsynth,
            "-C",
            "no",
            "-R",
            "no",
            "-g",
            "1.0",
            "-F",
            str(wav_path),
            str(self._config.soundfont),
            str(midi_path),
        ]

    def encode_command(self, wav_path: Path) -> list[str]:
        # lame writes <stem>.mp3 next to the input when no output is given.
        return [self._tools.lame, *self._config.lame_args, str(wav_path)]

    def _run(self, command: list[str], expected: Path) -> None:
        self._runner(command, timeout=self._config.command_timeout)
        if not expected.exists():
            raise ExternalToolError(f"{Path(command[0]).name} did not produce {expected}", command=command)

    def render_job(self, job: SampleJob) -> Path:
        temp = self.temp_paths(job)
        target = self.sample_path(job)
        _LOGGER.debug("Generating: %s (%s) for %s", job.output_name, job.pitch, job.output_key)
        try:
            write_note_file(
                job,
                temp.midi,
                duration_ms=self._config.duration_ms,
                release_ms=self._config.release_ms,
            )
            self._run(self.synth_command(temp.midi, temp.wav), temp.wav)
            self._run(self.encode_command(temp.wav), temp.mp3)
            shutil.move(str(temp.mp3), str(target))
        finally:
            temp.wav.unlink(missing_ok=True)
            temp.midi.unlink(missing_ok=True)
            temp.mp3.unlink(missing_ok=True)
        return target

    def render_group(self, group: InstrumentGroup) -> GroupResult:
        """Render every job in order, then write the instrument descriptor.

        The first failing job aborts the rest of the group.
        """
        _LOGGER.info("Generating audio for: %s (%s)", group.instrument, group.output_key)
        (self.output_dir / group.output_key).mkdir(parents=True, exist_ok=True)
        samples = tuple(self.render_job(job) for job in group.jobs)
        metadata = write_instrument_metadata(self.output_dir, group, self._config)
        return GroupResult(output_key=group.output_key, samples=samples, metadata=metadata)

"""Expansion of a build config into per-instrument groups of sample jobs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .config import BuildConfig
from .gm import (
    MAX_DRUM,
    MELODIC_CHANNEL,
    MIN_DRUM,
    PERCUSSION_CATALOG_TOKEN,
    PERCUSSION_CHANNEL,
    PERCUSSION_KEY,
    PERCUSSION_NAME,
    instrument_key,
    patch_name,
)
from .pitch import Pitch, note_to_number, pitch_range

MELODIC_LOW = ("A", 0)
MELODIC_HIGH = ("C", 8)


@dataclass(frozen=True, slots=True)
class SampleJob:
    channel: int
    program: int
    midi_number: int
    velocity: int
    output_key: str
    output_name: str

    @property
    def pitch(self) -> Pitch:
        return Pitch.from_number(self.midi_number)

    @property
    def temp_stem(self) -> str:
        # Unique across instruments so parallel groups never share temp files.
        return f"{self.output_key}_{self.output_name}"


@dataclass(frozen=True, slots=True)
class InstrumentGroup:
    instrument: str
    output_key: str
    channel: int
    program: int
    min_pitch: int
    max_pitch: int
    jobs: tuple[SampleJob, ...]

    @property
    def is_percussion(self) -> bool:
        return self.channel == PERCUSSION_CHANNEL

    @property
    def catalog_key(self) -> str:
        """Key of this group in the soundfont catalog."""
        return PERCUSSION_CATALOG_TOKEN if self.is_percussion else str(self.program)


def melodic_range() -> tuple[int, int]:
    return note_to_number(*MELODIC_LOW), note_to_number(*MELODIC_HIGH)


def percussion_range() -> tuple[int, int]:
    return MIN_DRUM, MAX_DRUM


def sample_name(midi_number: int, velocity: int, *, multiple_velocities: bool) -> str:
    name = f"p{midi_number}"
    if multiple_velocities:
        name += f"_v{velocity}"
    return name


def build_group(
    *,
    instrument: str,
    output_key: str,
    channel: int,
    program: int,
    low: int,
    high: int,
    velocities: Sequence[int],
) -> InstrumentGroup:
    multiple = len(velocities) > 1
    jobs = tuple(
        SampleJob(
            channel=channel,
            program=program,
            midi_number=pitch.number,
            velocity=velocity,
            output_key=output_key,
            output_name=sample_name(pitch.number, velocity, multiple_velocities=multiple),
        )
        for pitch in pitch_range(low, high)
        for velocity in velocities
    )
    return InstrumentGroup(
        instrument=instrument,
        output_key=output_key,
        channel=channel,
        program=program,
        min_pitch=low,
        max_pitch=high,
        jobs=jobs,
    )


def enumerate_groups(config: BuildConfig) -> list[InstrumentGroup]:
    """One group per program in config order, then the drum kit if enabled."""
    groups: list[InstrumentGroup] = []
    low, high = melodic_range()
    for program in config.programs:
        name = patch_name(program)
        groups.append(
            build_group(
                instrument=name,
                output_key=instrument_key(name),
                channel=MELODIC_CHANNEL,
                program=program,
                low=low,
                high=high,
                velocities=config.velocities,
            )
        )
    if config.percussion:
        drum_low, drum_high = percussion_range()
        # The kit is selected by channel; program 0 is still sent.
        groups.append(
            build_group(
                instrument=PERCUSSION_NAME,
                output_key=PERCUSSION_KEY,
                channel=PERCUSSION_CHANNEL,
                program=0,
                low=drum_low,
                high=drum_high,
                velocities=config.velocities,
            )
        )
    return groups

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidConfigError

_LOGGER = logging.getLogger("samplebank.config")

DEFAULT_NAME = "sgm_v85_piano_drums"
DEFAULT_VELOCITIES: tuple[int, ...] = (85,)
DEFAULT_DURATION_MS = 3000
DEFAULT_RELEASE_MS = 1000
DEFAULT_WORKERS = 10
DEFAULT_LAME_ARGS: tuple[str, ...] = ("-v", "-b", "8", "-B", "64", "--replaygain-accurate")
ALL_PROGRAMS: tuple[int, ...] = tuple(range(128))


class BuildConfig(BaseModel):
    """Immutable settings for one sample-bank build."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(default=DEFAULT_NAME, min_length=1)
    soundfont: Path
    output_dir: Path
    programs: tuple[int, ...] = ALL_PROGRAMS
    percussion: bool = True
    velocities: tuple[int, ...] = DEFAULT_VELOCITIES
    duration_ms: int = Field(default=DEFAULT_DURATION_MS, gt=0)
    release_ms: int = Field(default=DEFAULT_RELEASE_MS, ge=0)
    workers: int = Field(default=DEFAULT_WORKERS, ge=1)
    command_timeout: float | None = Field(default=None, gt=0)
    fluidsynth: str = "fluidsynth"
    lame: str = "lame"
    lame_args: tuple[str, ...] = DEFAULT_LAME_ARGS

    @field_validator("programs")
    @classmethod
    def _check_programs(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        for program in value:
            if not 0 <= program <= 127:
                raise ValueError(f"program {program} is outside 0..127")
        if len(set(value)) != len(value):
            raise ValueError("programs must not repeat")
        return value

    @field_validator("velocities")
    @classmethod
    def _check_velocities(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("at least one velocity is required")
        for velocity in value:
            if not 0 <= velocity <= 127:
                raise ValueError(f"velocity {velocity} is outside 0..127")
        if len(set(value)) != len(value):
            raise ValueError("velocities must not repeat")
        return value

    @property
    def multiple_velocities(self) -> bool:
        return len(self.velocities) > 1

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000.0

    @property
    def release_seconds(self) -> float:
        return self.release_ms / 1000.0

    @classmethod
    def build(cls, **values: Any) -> "BuildConfig":
        """Validate ``values``; unset (None) options fall back to defaults."""
        payload = {key: value for key, value in values.items() if value is not None}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            _LOGGER.debug("Rejected build options: %s", payload)
            raise InvalidConfigError(str(exc)) from exc

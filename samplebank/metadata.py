"""JSON descriptors read by the browser sampler."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from .config import BuildConfig
from .jobs import InstrumentGroup

_LOGGER = logging.getLogger("samplebank.metadata")

INSTRUMENT_FILENAME = "instrument.json"
CATALOG_FILENAME = "soundfont.json"


class InstrumentMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    min_pitch: int = Field(alias="minPitch")
    max_pitch: int = Field(alias="maxPitch")
    duration_seconds: float = Field(alias="durationSeconds")
    release_seconds: float = Field(alias="releaseSeconds")
    # Only present when more than one velocity layer was rendered.
    velocities: list[int] | None = None


class SoundfontCatalog(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    instruments: dict[str, str]


def instrument_metadata(group: InstrumentGroup, config: BuildConfig) -> InstrumentMetadata:
    return InstrumentMetadata(
        name=group.output_key,
        min_pitch=group.min_pitch,
        max_pitch=group.max_pitch,
        duration_seconds=config.duration_seconds,
        release_seconds=config.release_seconds,
        velocities=list(config.velocities) if config.multiple_velocities else None,
    )


def build_catalog(name: str, groups: Sequence[InstrumentGroup]) -> SoundfontCatalog:
    return SoundfontCatalog(
        name=name,
        instruments={group.catalog_key: group.output_key for group in groups},
    )


def _write_json(path: Path, model: BaseModel) -> Path:
    payload = model.model_dump(by_alias=True, exclude_none=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return path


def write_instrument_metadata(output_dir: Path, group: InstrumentGroup, config: BuildConfig) -> Path:
    path = _write_json(output_dir / group.output_key / INSTRUMENT_FILENAME, instrument_metadata(group, config))
    _LOGGER.info("Wrote %s", path)
    return path


def write_catalog(output_dir: Path, name: str, groups: Sequence[InstrumentGroup]) -> Path:
    path = _write_json(output_dir / CATALOG_FILENAME, build_catalog(name, groups))
    _LOGGER.info("Wrote catalog %s (%d instruments)", path, len(groups))
    return path

from __future__ import annotations

from .config import BuildConfig
from .errors import (
    ExternalToolError,
    InvalidConfigError,
    InvalidNoteNameError,
    OutOfRangeError,
    PrerequisiteMissingError,
    RenderFailedError,
    SampleBankError,
)
from .gm import GM_PATCH_NAMES, instrument_key
from .jobs import InstrumentGroup, SampleJob, enumerate_groups
from .pipeline import BuildResult, build_samples, check_prerequisites
from .pitch import Pitch, note_to_number, number_to_pitch

__all__ = [
    "BuildConfig",
    "BuildResult",
    "ExternalToolError",
    "GM_PATCH_NAMES",
    "InstrumentGroup",
    "InvalidConfigError",
    "InvalidNoteNameError",
    "OutOfRangeError",
    "Pitch",
    "PrerequisiteMissingError",
    "RenderFailedError",
    "SampleBankError",
    "SampleJob",
    "build_samples",
    "check_prerequisites",
    "enumerate_groups",
    "instrument_key",
    "note_to_number",
    "number_to_pitch",
]

__version__ = "0.1.0"

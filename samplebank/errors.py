from __future__ import annotations

from typing import Mapping, Sequence


class SampleBankError(Exception):
    """Base error for the samplebank builder."""


class InvalidConfigError(SampleBankError):
    """Raised when build options cannot be parsed or validated."""


class PrerequisiteMissingError(SampleBankError):
    """Raised before rendering when a soundfont, tool or output root is missing."""


class InvalidNoteNameError(SampleBankError, ValueError):
    """Raised when a note name is not one of the twelve recognised names."""


class OutOfRangeError(SampleBankError, ValueError):
    """Raised when a MIDI number falls outside the pitch model."""


class ExternalToolError(SampleBankError):
    """Raised when fluidsynth or lame fails, or leaves no output behind."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


class RenderFailedError(SampleBankError):
    """Raised after the worker pool joins if any instrument failed."""

    def __init__(self, failures: Mapping[str, BaseException]) -> None:
        self.failures = dict(failures)
        keys = ", ".join(self.failures)
        super().__init__(f"{len(self.failures)} instrument(s) failed to render: {keys}")

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Protocol, Sequence

from .errors import ExternalToolError

_LOGGER = logging.getLogger("samplebank.runner")


class CommandRunner(Protocol):
    def __call__(self, command: Sequence[str], *, timeout: float | None = None) -> None: ...


def format_command(command: Sequence[str]) -> str:
    return shlex.join(str(part) for part in command)


class SubprocessRunner:
    """Runs an argument list without a shell; any failure raises ExternalToolError."""

    def __call__(self, command: Sequence[str], *, timeout: float | None = None) -> None:
        args = [str(part) for part in command]
        line = format_command(args)
        _LOGGER.debug("Running: %s", line)
        try:
            proc = subprocess.run(args, capture_output=True, check=False, timeout=timeout)
        except FileNotFoundError as exc:
            raise ExternalToolError(f"Command not found: {args[0]}", command=args) from exc
        except subprocess.TimeoutExpired as exc:
            raise ExternalToolError(f"Timed out after {timeout}s: {line}", command=args) from exc
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="ignore").strip()
            _LOGGER.debug("stderr from %s: %s", args[0], stderr)
            raise ExternalToolError(
                f"Exit status {proc.returncode}: {line}",
                command=args,
                returncode=proc.returncode,
                stderr=stderr,
            )

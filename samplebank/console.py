from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import IO, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.traceback import Traceback

from .config import BuildConfig
from .jobs import InstrumentGroup
from .logging_utils import debug_enabled, get_log_path
from .render import ToolPaths


def plan_table(groups: Sequence[InstrumentGroup]) -> Table:
    table = Table(title="Instruments", show_lines=False)
    table.add_column("Program", justify="right")
    table.add_column("Name")
    table.add_column("Key", style="cyan")
    table.add_column("Range", justify="right")
    table.add_column("Samples", justify="right")
    for group in groups:
        program = "drums" if group.is_percussion else str(group.program)
        table.add_row(
            program,
            group.instrument,
            group.output_key,
            f"{group.min_pitch}-{group.max_pitch}",
            str(len(group.jobs)),
        )
    return table


def print_plan(
    console: Console,
    config: BuildConfig,
    groups: Sequence[InstrumentGroup],
    tools: ToolPaths,
) -> None:
    console.print(f"Building [bold]{config.name}[/bold] using font: {config.soundfont}")
    console.print(plan_table(groups))
    console.print(f"Using MP3 encoder: {tools.lame}")
    console.print(f"Using FluidSynth: {tools.fluidsynth}")
    console.print(f"Velocities: {', '.join(str(v) for v in config.velocities)}")
    console.print(f"Sending output to: {config.output_dir}")
    total = sum(len(group.jobs) for group in groups)
    console.print(f"{total} samples across {len(groups)} instrument(s), {config.workers} worker(s)")


def render_error(
    context: str,
    exc: BaseException,
    *,
    stream: IO[str] | None = None,
    log_path: Path | None = None,
) -> None:
    """Show a failure on stderr: a rich panel on terminals, one line otherwise.

    The full traceback is printed only under SAMPLEBANK_DEBUG.
    """
    target = stream or sys.stderr
    debug = debug_enabled()
    log_path = log_path or get_log_path()
    if target.isatty():
        console = Console(file=target)
        body = Text.assemble(
            ("samplebank error while ", "bold"),
            (context, "bold"),
            (":\n\n", "bold"),
            Text(type(exc).__name__, style="bold red"),
            (": ", "bold"),
            Text(str(exc)),
            (f"\nLogs: {log_path}", "dim"),
            ("\n\nSet SAMPLEBANK_DEBUG=1 for console trace.", "dim"),
        )
        console.print(Panel(body, title="Error", border_style="red"))
        if debug:
            console.print(Traceback.from_exception(type(exc), exc, exc.__traceback__))
    else:
        target.write(f"{context} failed: {type(exc).__name__}: {exc} (logs: {log_path})\n")
        if debug:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=target)

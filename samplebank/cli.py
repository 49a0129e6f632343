from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from .config import BuildConfig
from .console import print_plan, render_error
from .gm import GM_PATCH_NAMES, instrument_key
from .jobs import enumerate_groups
from .logging_utils import configure_logging
from .pipeline import build_samples, check_prerequisites
from .pitch import Pitch, note_to_number, number_to_pitch
from .runner import CommandRunner

_LOGGER = logging.getLogger("samplebank.cli")
_CONSOLE = Console()


def program_spec(value: str) -> list[int]:
    """Parse ``"40"`` or ``"0-7"`` into program numbers."""
    try:
        if "-" in value:
            start_text, end_text = value.split("-", 1)
            start, end = int(start_text), int(end_text)
            if end < start:
                raise argparse.ArgumentTypeError(f"empty program range: {value}")
            return list(range(start, end + 1))
        return [int(value)]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid program spec: {value}") from exc


def _flatten(specs: Sequence[list[int]] | None) -> list[int] | None:
    if specs is None:
        return None
    return [program for spec in specs for program in spec]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="samplebank",
        description="Render General MIDI instruments into MP3 sample banks.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser(
        "build",
        help="Render samples and metadata.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    build.add_argument("--soundfont", type=Path, required=True, help="SF2 sound bank to render with.")
    build.add_argument("--output-dir", type=Path, required=True, help="Existing output directory.")
    build.add_argument("--name", type=str, default=None, help="Sound bank name written to the catalog.")
    build.add_argument(
        "--programs",
        type=program_spec,
        nargs="+",
        default=None,
        help="GM programs to render, e.g. '0-7 40' (default: all 128).",
    )
    build.add_argument(
        "--percussion",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Render the percussion kit.",
    )
    build.add_argument("--velocities", type=int, nargs="+", default=None, help="Velocity layers (default: 85).")
    build.add_argument("--duration-ms", type=int, default=None, help="Note hold time (default: 3000).")
    build.add_argument("--release-ms", type=int, default=None, help="Release tail (default: 1000).")
    build.add_argument("--workers", type=int, default=None, help="Parallel instruments (default: 10).")
    build.add_argument("--command-timeout", type=float, default=None, help="Per-command timeout in seconds.")
    build.add_argument("--fluidsynth", type=str, default=None, help="fluidsynth command or path.")
    build.add_argument("--lame", type=str, default=None, help="lame command or path.")
    build.add_argument("-y", "--yes", action="store_true", help="Start without asking for confirmation.")

    sub.add_parser("list", help="List GM programs and their output keys.")

    note = sub.add_parser("note", help="Convert between note names and MIDI numbers.")
    note.add_argument("name", nargs="?", help="Note name, e.g. C or Eb.")
    note.add_argument("octave", nargs="?", type=int, help="Octave, C0 = MIDI 12.")
    note.add_argument("--number", type=int, default=None, help="MIDI number to name.")
    return parser


def config_from_args(args: argparse.Namespace) -> BuildConfig:
    programs = _flatten(args.programs)
    return BuildConfig.build(
        name=args.name,
        soundfont=args.soundfont.expanduser(),
        output_dir=args.output_dir.expanduser(),
        programs=tuple(programs) if programs is not None else None,
        percussion=args.percussion,
        velocities=tuple(args.velocities) if args.velocities is not None else None,
        duration_ms=args.duration_ms,
        release_ms=args.release_ms,
        workers=args.workers,
        command_timeout=args.command_timeout,
        fluidsynth=args.fluidsynth,
        lame=args.lame,
    )


def _run_build(args: argparse.Namespace, console: Console, runner: CommandRunner | None) -> int:
    config = config_from_args(args)
    tools = check_prerequisites(config)
    groups = enumerate_groups(config)
    print_plan(console, config, groups, tools)
    if not args.yes and not Confirm.ask("Begin rendering?", console=console, default=True):
        console.print("Aborted.")
        return 1
    result = build_samples(config, tools=tools, runner=runner, groups=groups)
    console.print(
        f"Wrote {result.sample_count} samples for {len(result.groups)} instrument(s); catalog: {result.catalog}"
    )
    return 0


def _run_list(console: Console) -> int:
    table = Table(title="General MIDI programs")
    table.add_column("Program", justify="right")
    table.add_column("Name")
    table.add_column("Key", style="cyan")
    for program, name in enumerate(GM_PATCH_NAMES):
        table.add_row(str(program), name, instrument_key(name))
    console.print(table)
    return 0


def _run_note(args: argparse.Namespace, parser: argparse.ArgumentParser, console: Console) -> int:
    if args.number is not None:
        pitch = number_to_pitch(args.number)
        console.print(f"{args.number} = {pitch}")
        return 0
    if args.name is None or args.octave is None:
        parser.error("note requires NAME OCTAVE or --number")
    number = note_to_number(args.name, args.octave)
    console.print(f"{Pitch(args.name, args.octave)} = {number}")
    return 0


def main(
    argv: list[str] | None = None,
    *,
    console: Console | None = None,
    runner: CommandRunner | None = None,
) -> int:
    log_path = configure_logging()
    console = console or _CONSOLE
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "build":
            return _run_build(args, console, runner)
        if args.command == "list":
            return _run_list(console)
        if args.command == "note":
            return _run_note(args, parser, console)
        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.error("samplebank %s failed: %s", args.command, exc, exc_info=exc)
        render_error(f"samplebank {args.command}", exc, log_path=log_path)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

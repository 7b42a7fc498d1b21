"""Command line interface for the preset builder."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, Mapping
import os
import sys

from core.command_runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner
from core.console import Console

from .build import DEFAULT_CMAKE, BuildDriver
from .catalog import eligible_presets, load_catalog
from .errors import (
    CatalogFormatError,
    CatalogReadError,
    SelectionCancelled,
    SelectionWriteError,
    SelectorUnavailableError,
)
from .selection_store import read_selection, selection_path, write_selection
from .selector import CursesChecklistSelector, PresetSelector


CMAKE_ENV_VAR = "PRESET_BUILDER_CMAKE"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(
        prog="preset-builder",
        description="Pick CMake configure presets interactively, then configure and build each one",
    )
    parser.add_argument("presets", type=Path, help="Path to CMakePresets.json (or a compatible file)")
    parser.add_argument(
        "--cmake",
        default=None,
        help=f"CMake executable to run (default: ${CMAKE_ENV_VAR} or '{DEFAULT_CMAKE}')",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print commands without executing them")
    parser.add_argument(
        "--log",
        "-l",
        choices=sorted(Console.LEVELS, key=Console.LEVELS.__getitem__),
        default="error",
        help="Set log level (default: error)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output (maps to debug)")
    return parser.parse_args(list(argv))


def resolve_cmake(explicit: str | None, environ: Mapping[str, str] | None = None) -> str:
    """Pick the CMake executable: command line, then environment, then default."""

    if explicit:
        return explicit
    env = os.environ if environ is None else environ
    return env.get(CMAKE_ENV_VAR) or DEFAULT_CMAKE


def run_presets(
    presets_file: Path,
    *,
    selector: PresetSelector,
    runner: CommandRunner,
    console: Console,
    cmake: str = DEFAULT_CMAKE,
    dry_run: bool = False,
) -> int:
    """Select, build and remember presets from ``presets_file``; return an exit status."""

    try:
        catalog = load_catalog(presets_file)
    except (CatalogReadError, CatalogFormatError) as exc:
        console.fatal(str(exc))
        return EXIT_FAILURE

    for name in catalog.duplicates:
        console.error(f"Preset '{name}' is declared more than once; using the first declaration")

    eligible = eligible_presets(catalog)
    console.debug(f"Eligible presets: {', '.join(preset.name for preset in eligible) or '<none>'}")
    if not eligible:
        print(f"No buildable presets found in '{catalog.path}'")
        return EXIT_OK

    state_file = selection_path(catalog.working_directory)
    previous = read_selection(state_file, console=console)

    try:
        chosen = selector.select(eligible, previous.selected_names)
    except SelectionCancelled as exc:
        console.fatal(str(exc))
        return EXIT_CANCELLED
    except SelectorUnavailableError as exc:
        console.fatal(str(exc))
        return EXIT_FAILURE

    if not chosen:
        print("No presets selected")

    driver = BuildDriver(runner, catalog.working_directory, cmake=cmake, console=console)
    report = driver.run(chosen)

    # Only a run whose builds all succeeded replaces the remembered selection.
    if report.failure is not None:
        console.fatal(str(report.failure.to_error()))
        return EXIT_FAILURE

    if dry_run:
        console.dry(f"Would save selection to {state_file}")
        return EXIT_OK

    try:
        write_selection(state_file, [preset.name for preset in chosen])
    except SelectionWriteError as exc:
        console.fatal(str(exc))
        return EXIT_FAILURE
    console.debug(f"Saved selection to {state_file}")
    return EXIT_OK


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    log_level = "debug" if args.verbose else args.log
    console = Console(level=log_level, dry_run=args.dry_run)

    runner: SubprocessCommandRunner | RecordingCommandRunner
    if args.dry_run:
        runner = RecordingCommandRunner()
    else:
        runner = SubprocessCommandRunner()

    status = run_presets(
        args.presets,
        selector=CursesChecklistSelector(),
        runner=runner,
        console=console,
        cmake=resolve_cmake(args.cmake),
        dry_run=args.dry_run,
    )

    if args.dry_run and isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted():
            print(line)
    return status


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

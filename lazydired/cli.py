"""Command-line front door for lazydired.

Prints the editable listing for a directory, or edits/applies a listing and
reports the resulting renames, or keeps reprinting it as the directory
changes.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path

from .config import load_settings
from .editor import edit_listing
from .engine import DiredEngine
from .reconcile import RenameResult


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show a directory as an editable listing and apply filename edits as renames."
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to list. Defaults to current directory.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--edit", action="store_true", help="Edit the listing in $EDITOR and apply renames.")
    mode.add_argument("--apply", metavar="FILE", help="Apply renames from an edited listing saved in FILE.")
    mode.add_argument("--watch", action="store_true", help="Reprint the listing whenever the directory changes.")
    parser.add_argument("--hide-dotfiles", action="store_true", help="Hide entries starting with '.'.")
    parser.add_argument("--hide-meta-files", action="store_true", help="Hide entries ending in '.meta'.")
    parser.add_argument("--max-entries", type=_positive_int, default=None, help="Maximum rows per listing.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more detail to stderr.")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _report_results(results: list[RenameResult]) -> int:
    """Print one line per rename and return the process exit status."""
    if not results:
        print("No renames.")
        return 0
    failed = 0
    for result in results:
        if result.ok:
            print(result.describe())
        else:
            failed += 1
            print(result.describe(), file=sys.stderr)
    return 1 if failed else 0


def _watch_forever(engine: DiredEngine, directory: Path) -> int:
    print(engine.render(directory), flush=True)

    def on_refresh(_directory: str, text: str) -> None:
        print(text, flush=True)

    if not engine.watch(directory, on_refresh):
        print(f"Cannot watch {directory}; automatic refresh disabled.", file=sys.stderr)
        return 1
    stop = threading.Event()
    try:
        while not stop.wait(0.5):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        engine.close()
    return 0


def main(default_path: Path | None = None, argv: list[str] | None = None) -> int:
    """Parse CLI arguments and run the requested listing operation.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    settings = load_settings().with_overrides(
        show_dotfiles=False if args.hide_dotfiles else None,
        show_meta_files=False if args.hide_meta_files else None,
        max_entries=args.max_entries,
    )

    if default_path is None:
        default_path = Path.cwd()
    directory = Path(args.path or default_path).resolve()
    if not directory.is_dir():
        raise SystemExit(f"Not a directory: {directory}")

    engine = DiredEngine(settings)

    if args.watch:
        return _watch_forever(engine, directory)

    if args.edit:
        results, error = edit_listing(engine, directory)
        if error is not None:
            raise SystemExit(error)
        return _report_results(results)

    if args.apply is not None:
        edited_path = Path(args.apply)
        try:
            new_text = edited_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SystemExit(f"Cannot read {edited_path}: {exc}") from exc
        return _report_results(engine.apply_edit(directory, new_text.rstrip("\n")))

    snapshot = engine.snapshot(directory)
    for warning in snapshot.warnings:
        print(f"warning: {warning.path}: {warning.message}", file=sys.stderr)
    print(engine.render(directory))
    return 0

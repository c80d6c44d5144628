"""Entry point for ``python -m screencal``.

Provides a CLI that runs the extraction pipeline on text or an image and
optionally commits the result to a calendar.  Uses stdlib
:mod:`argparse` for argument parsing.

Subcommands:
    text   -- Default. Extract an event from a text file or stdin.
    image  -- Recognize the text in an image, then extract an event.
    models -- List the models installed on the local model host.

Exit codes:
    0 -- Event extracted (and committed, with ``--commit``).
    1 -- A pipeline, commit or configuration error occurred.
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from screencal.calendar.google_store import GoogleCalendarStore
from screencal.calendar.store import CalendarInfo, CalendarStore, InMemoryCalendarStore
from screencal.config import ConfigError, Settings, load_settings
from screencal.exceptions import ScreenCalError
from screencal.log import setup_logging
from screencal.output import print_pipeline_result
from screencal.pipeline import ExtractionOrchestrator, PipelineResult
from screencal.providers.ollama import OllamaClient

DRY_RUN_CALENDAR = CalendarInfo(identifier="dry-run", title="Dry run")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands.

    Returns:
        Configured :class:`argparse.ArgumentParser` with ``text``,
        ``image`` and ``models`` subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="screencal",
        description="Extract a calendar event from text or a screenshot.",
    )

    # Flags shared by every subcommand.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    # Flags shared by the extraction subcommands.
    extract = argparse.ArgumentParser(add_help=False)
    extract.add_argument(
        "--commit",
        action="store_true",
        default=False,
        help="Save the extracted event to the calendar.",
    )
    extract.add_argument(
        "--calendar",
        type=str,
        default=None,
        metavar="ID",
        help="Destination calendar (defaults to DEFAULT_CALENDAR_ID).",
    )
    extract.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="With --commit, save to an in-memory calendar instead.",
    )

    subparsers = parser.add_subparsers(dest="command")

    text_parser = subparsers.add_parser(
        "text",
        parents=[common, extract],
        help="Extract an event from a text file or stdin.",
    )
    text_parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="Text file to read, or '-' for stdin (default).",
    )

    image_parser = subparsers.add_parser(
        "image",
        parents=[common, extract],
        help="Extract an event from an image.",
    )
    image_parser.add_argument("path", type=str, help="Path to the image file.")

    subparsers.add_parser(
        "models",
        parents=[common],
        help="List models installed on the local model host.",
    )

    return parser


_SUBCOMMANDS = ("text", "image", "models")
_VALUE_OPTIONS = ("--calendar",)


def _subcommand_index(argv: list[str]) -> int | None:
    """Return the position of the subcommand name in *argv*, if any.

    Leading option flags (and the value of ``--calendar``) are skipped;
    the first positional token decides.
    """
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg == "--":
            return None
        if arg == "-" or not arg.startswith("-"):
            return index if arg in _SUBCOMMANDS else None
        index += 2 if arg in _VALUE_OPTIONS else 1
    return None


def _resolve_command(
    parser: argparse.ArgumentParser,
    argv: list[str],
) -> argparse.Namespace:
    """Parse *argv*, routing to ``text`` when no subcommand is named.

    ``python -m screencal < invite.txt`` and
    ``python -m screencal --commit invite.txt`` both run ``text``.
    Options given before the subcommand (``screencal -v image shot.png``)
    are moved after it.
    """
    if argv and argv[0] in {"-h", "--help"}:
        return parser.parse_args(argv)

    index = _subcommand_index(argv)
    if index is None:
        argv = ["text", *argv]
    elif index > 0:
        argv = [argv[index], *argv[:index], *argv[index + 1 :]]

    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


def _handle_text(args: argparse.Namespace, settings: Settings) -> int:
    if args.file == "-":
        text = sys.stdin.read()
    else:
        path = Path(args.file)
        if not path.is_file():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Error: Cannot read {path}: {exc}", file=sys.stderr)
            return 1

    orchestrator = _build_orchestrator(args, settings)
    result = orchestrator.process_text(lambda: text)
    return _finish(orchestrator, result, args)


def _handle_image(args: argparse.Namespace, settings: Settings) -> int:
    path = Path(args.path)
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    try:
        with Image.open(path) as opened:
            image = opened.copy()
    except (OSError, UnidentifiedImageError) as exc:
        print(f"Error: Cannot open image {path}: {exc}", file=sys.stderr)
        return 1

    orchestrator = _build_orchestrator(args, settings)
    result = orchestrator.process_image(lambda: image)
    return _finish(orchestrator, result, args)


def _handle_models(settings: Settings) -> int:
    client = OllamaClient(settings.ollama_host)
    try:
        models = client.list_models()
    except ScreenCalError as exc:
        print(f"Error: {exc.user_message}", file=sys.stderr)
        return 1

    if not models:
        print(f"No models installed on {client.host}.")
        return 0

    for name in models:
        marker = "*" if name == settings.ollama_model else " "
        print(f"{marker} {name}")
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_orchestrator(
    args: argparse.Namespace,
    settings: Settings,
) -> ExtractionOrchestrator:
    """Wire an orchestrator to the store selected by the flags."""
    store: CalendarStore
    if args.dry_run:
        store = InMemoryCalendarStore(
            calendars=[DRY_RUN_CALENDAR],
            default=DRY_RUN_CALENDAR.identifier,
        )
    else:
        store = GoogleCalendarStore(
            settings.google_credentials_path,
            settings.google_token_path,
        )
    return ExtractionOrchestrator(store, settings_loader=lambda: settings)


def _finish(
    orchestrator: ExtractionOrchestrator,
    result: PipelineResult | None,
    args: argparse.Namespace,
) -> int:
    """Commit or discard the ready event, print the report, pick the exit code."""
    if result is None:
        print("Error: Extraction already in progress", file=sys.stderr)
        return 1

    commit = None
    if result.succeeded:
        record = result.record
        if args.calendar:
            record.calendar_id = args.calendar
        if args.commit:
            commit = orchestrator.accept(record)
        else:
            orchestrator.discard()

    print_pipeline_result(result, commit)

    if not result.succeeded:
        return 1
    if commit is not None and not commit.success:
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the screencal CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``
            when ``None`` (the normal case).

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = _resolve_command(parser, argv if argv is not None else sys.argv[1:])

    try:
        settings = load_settings()
    except ConfigError as exc:
        setup_logging("INFO")
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Configure logging --------------------------------------------
    try:
        setup_logging("DEBUG" if args.verbose else settings.log_level)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Dispatch to subcommand handler -------------------------------
    if args.command == "models":
        return _handle_models(settings)
    if args.command == "image":
        return _handle_image(args, settings)
    return _handle_text(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from .commands import notes as cmd_notes
from .commands import process as cmd_process
from .commands import read as cmd_read
from .config import Settings, load_settings
from .errors import InvalidFormat, InvalidNote
from .format import FormatString
from .midi import Note
from .processor import BatchOptions, BatchProcessor, DryRunRecorder
from .scanner import InputScanner

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ShortPathFormatter(logging.Formatter):
    """Strips the working directory from logged paths."""

    def __init__(self, fmt: str, roots: list[Path]) -> None:
        super().__init__(fmt)
        self.roots = [str(root) for root in roots if root]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for root in self.roots:
            message = message.replace(f"{root}/", "")
        return message


class ColorFormatter(ShortPathFormatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def configure_logging(level_name: str, warnings_log: Optional[Path]) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    display_roots = [Path.cwd()]

    color_handler = logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        color_handler.setFormatter(ColorFormatter(LOG_FORMAT, display_roots))
    else:
        color_handler.setFormatter(ShortPathFormatter(LOG_FORMAT, display_roots))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(ShortPathFormatter(LOG_FORMAT, display_roots))
    root_logger.addHandler(warn_buffer)

    if warnings_log:
        warnings_log.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(warnings_log, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(ShortPathFormatter(LOG_FORMAT, display_roots))
        root_logger.addHandler(file_handler)
    return warn_buffer


def _note_arg(value: str) -> Note:
    try:
        return Note.parse(value)
    except InvalidNote as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="+", type=Path, help="WAV files or directories")
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        default=None,
        help="Descend into subdirectories of directory inputs",
    )


def _add_write_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report the changes that would be made",
    )
    parser.add_argument(
        "--dry-run-output",
        type=Path,
        help="Record planned changes to this file (JSON Lines)",
    )
    parser.add_argument(
        "--permissive-format",
        action="store_true",
        help="Keep unknown %%-sequences in rename templates as literal text",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smplinfo", description="Inspect and edit the root note of WAV samples"
    )
    parser.add_argument("--config", type=Path, help="Path to smplinfo.yaml")
    parser.add_argument("--log-level", default=None, help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    read_parser = subparsers.add_parser("read", help="Show the root note of each file")
    _add_input_arguments(read_parser)
    read_parser.add_argument(
        "--details", action="store_true", help="Also show the audio stream format"
    )
    read_parser.add_argument(
        "--json", action="store_true", help="Emit one JSON object per file"
    )

    set_parser = subparsers.add_parser("set", help="Set the root note of each file")
    _add_input_arguments(set_parser)
    source = set_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--note", type=_note_arg, help="Note name (C3) or number (60)")
    source.add_argument(
        "--from-filename",
        action="store_true",
        help="Use the single note name found in each filename",
    )
    set_parser.add_argument(
        "--rename", metavar="FORMAT", help="Also rename files using this template (%%n, %%m, %%%%)"
    )
    set_parser.add_argument(
        "--atomic",
        action="store_true",
        default=None,
        help="Edit a temporary copy and replace the original when done",
    )
    _add_write_arguments(set_parser)

    rename_parser = subparsers.add_parser("rename", help="Rename files from their root note")
    _add_input_arguments(rename_parser)
    rename_parser.add_argument(
        "--format", dest="template", metavar="FORMAT", help="Filename template (%%n, %%m, %%%%)"
    )
    _add_write_arguments(rename_parser)

    notes_parser = subparsers.add_parser("notes", help="Print the note name table")
    notes_parser.add_argument("--low", type=int, default=0)
    notes_parser.add_argument("--high", type=int, default=127)
    return parser


def _parse_template(
    parser: argparse.ArgumentParser, text: Optional[str], strict: bool
) -> Optional[FormatString]:
    if text is None:
        return None
    try:
        return FormatString.parse(text, strict=strict)
    except InvalidFormat as exc:
        parser.error(str(exc))
    return None


def _build_processor(
    parser: argparse.ArgumentParser, args: argparse.Namespace, settings: Settings
) -> BatchProcessor:
    strict = settings.format.strict and not args.permissive_format
    if args.command == "rename":
        template_text = args.template or settings.format.default_template
        if template_text is None:
            parser.error("rename needs --format or format.default_template in the config")
        options = BatchOptions(template=_parse_template(parser, template_text, strict))
    else:
        atomic = settings.write.atomic if args.atomic is None else args.atomic
        options = BatchOptions(
            note=args.note,
            note_from_filename=args.from_filename,
            template=_parse_template(parser, args.rename, strict),
            atomic=atomic,
        )
    options.dry_run = args.dry_run
    recorder = DryRunRecorder(args.dry_run_output) if args.dry_run_output else None
    return BatchProcessor(options, scanner=InputScanner(settings.scan), recorder=recorder)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except (OSError, ValidationError) as exc:
        parser.exit(2, f"smplinfo: failed to load config: {exc}\n")

    warn_buffer = configure_logging(
        args.log_level or settings.logging.level, settings.logging.warnings_log
    )
    recursive = getattr(args, "recursive", None)
    if recursive is None:
        recursive = settings.scan.recursive

    ok = True
    try:
        match args.command:
            case "read":
                ok = cmd_read.run(
                    InputScanner(settings.scan),
                    args.paths,
                    recursive=recursive,
                    details=args.details,
                    json_output=args.json,
                )
            case "set" | "rename":
                processor = _build_processor(parser, args, settings)
                report = cmd_process.run(processor, args.paths, recursive=recursive)
                ok = report.ok
            case "notes":
                cmd_notes.run(low=max(0, args.low), high=min(255, args.high))
            case _:
                parser.error("Unknown command")
    finally:
        if warn_buffer.records:
            print("\nWarnings/Errors summary:", file=sys.stderr)
            for record in warn_buffer.records:
                print(f" - {record}", file=sys.stderr)
    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main()

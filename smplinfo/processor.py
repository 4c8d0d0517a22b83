from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import ScanSettings
from .errors import SmplInfoError, error_kind
from .format import FormatString
from .fs_utils import renamed_path, safe_rename
from .heuristics import extract_note_from_filename
from .midi import Note
from .sampler import SamplerChunk
from .scanner import InputScanner
from .wav import WavFile, update_file

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchOptions:
    note: Optional[Note] = None
    note_from_filename: bool = False
    template: Optional[FormatString] = None
    dry_run: bool = False
    atomic: bool = False


@dataclass(slots=True)
class FileResult:
    path: Path
    old_note: Optional[Note] = None
    new_note: Optional[Note] = None
    renamed_to: Optional[Path] = None
    dry_run: bool = False
    error: Optional[str] = None
    error_kind: Optional[str] = None
    notes: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def note_changed(self) -> bool:
        return self.new_note is not None

    @property
    def status(self) -> str:
        if not self.ok:
            return "FAILED"
        if not self.note_changed and self.renamed_to is None:
            return "UNCHANGED"
        return "PLANNED" if self.dry_run else "UPDATED"

    def to_record(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "path": str(self.path),
            "status": self.status.lower(),
            "old_note": _note_record(self.old_note),
            "new_note": _note_record(self.new_note),
            "renamed_to": str(self.renamed_to) if self.renamed_to else None,
            "dry_run": self.dry_run,
        }
        if self.error:
            payload["error"] = self.error
            payload["error_kind"] = self.error_kind
        if self.notes:
            payload["notes"] = list(self.notes)
        return payload


@dataclass(slots=True)
class BatchReport:
    results: List[FileResult] = field(default_factory=list)

    @property
    def failures(self) -> List[FileResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failures


class DryRunRecorder:
    """Writes one JSON object per processed file to ``output_path``."""

    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("", encoding="utf-8")

    def record(self, result: FileResult) -> None:
        line = json.dumps(result.to_record(), sort_keys=True)
        with self.output_path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


class BatchProcessor:
    """Reads, re-notes and renames sample files one at a time.

    Each file goes through open, inspect, an optional note update and an
    optional rename. A failure is recorded on that file's result and the
    batch carries on with the next one.
    """

    def __init__(
        self,
        options: BatchOptions,
        *,
        scanner: Optional[InputScanner] = None,
        recorder: Optional[DryRunRecorder] = None,
    ) -> None:
        self.options = options
        self.scanner = scanner or InputScanner(ScanSettings())
        self.recorder = recorder

    def run(self, inputs: Iterable[Path], *, recursive: bool = False) -> BatchReport:
        report = BatchReport()
        for item in inputs:
            try:
                paths = self.scanner.expand_input(item, recursive=recursive)
            except OSError as exc:
                report.results.append(self._listing_failed(item, exc))
                continue
            for path in paths:
                report.results.append(self.process_path(path))
        failed = len(report.failures)
        logger.info(
            "Processed %d file(s), %d failed%s",
            len(report.results),
            failed,
            " (dry-run)" if self.options.dry_run else "",
        )
        return report

    def process_path(self, path: Path) -> FileResult:
        result = FileResult(path=path, dry_run=self.options.dry_run)
        try:
            self._process(path, result)
        except (SmplInfoError, OSError) as exc:
            result.error = str(exc)
            result.error_kind = error_kind(exc)
            logger.warning("Failed to process %s: %s", path, exc)
        if self.recorder:
            self.recorder.record(result)
        return result

    def _listing_failed(self, directory: Path, exc: OSError) -> FileResult:
        result = FileResult(
            path=directory,
            dry_run=self.options.dry_run,
            error=str(exc),
            error_kind=error_kind(exc),
        )
        logger.warning("Cannot list %s: %s", directory, exc)
        if self.recorder:
            self.recorder.record(result)
        return result

    def _process(self, path: Path, result: FileResult) -> None:
        target = self._target_note(path, result)
        with path.open("rb") as fh:
            chunk = WavFile(fh).get_sampler_chunk()
        result.old_note = chunk.unity_note if chunk is not None else None
        if target is not None and target == result.old_note:
            result.notes.append(f"note already {target.name}")
            target = None
        if target is not None:
            result.new_note = target
            if self.options.dry_run:
                logger.info("Dry-run would set root note of %s to %s", path, target.name)
            else:
                # Opened for writing only when the note differs.
                update_file(path, _set_unity_note(target), atomic=self.options.atomic)
                logger.info(
                    "Set root note of %s: %s -> %s",
                    path,
                    result.old_note.name if result.old_note is not None else "none",
                    target.name,
                )
        if self.options.template is not None:
            self._rename(path, result)

    def _target_note(self, path: Path, result: FileResult) -> Optional[Note]:
        if self.options.note is not None:
            return self.options.note
        if not self.options.note_from_filename:
            return None
        note = extract_note_from_filename(path.name)
        if note is None:
            result.notes.append("no unambiguous note in filename")
            logger.info("No unambiguous note found in filename %s", path.name)
        return note

    def _rename(self, path: Path, result: FileResult) -> None:
        note = result.new_note if result.new_note is not None else result.old_note
        if note is None and self.options.template.uses_note:
            result.notes.append("no root note to render")
            logger.warning("No root note for %s, note fields in the name are left empty", path)
        destination = renamed_path(path, self.options.template.render(note))
        if destination == path:
            result.notes.append("name unchanged")
            return
        if self.options.dry_run:
            logger.info("Dry-run would rename %s -> %s", path, destination.name)
        else:
            safe_rename(path, destination)
            logger.info("Renamed %s -> %s", path, destination.name)
        result.renamed_to = destination


def _set_unity_note(note: Note):
    def mutate(chunk: SamplerChunk) -> SamplerChunk:
        return chunk.with_unity_note(note)

    return mutate


def _note_record(note: Optional[Note]) -> Optional[Dict[str, object]]:
    if note is None:
        return None
    return {"value": int(note), "name": note.name}

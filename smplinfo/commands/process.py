from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..processor import BatchProcessor, BatchReport, FileResult
from .output import failed, line


def run(processor: BatchProcessor, inputs: Iterable[Path], *, recursive: bool = False) -> BatchReport:
    report = processor.run(inputs, recursive=recursive)
    for result in report.results:
        print(_describe(result))
    suffix = " (dry-run)" if processor.options.dry_run else ""
    changed = sum(1 for result in report.results if result.ok and result.status != "UNCHANGED")
    print(
        f"Done{suffix}: {len(report.results)} file(s), {changed} changed, {len(report.failures)} failed."
    )
    return report


def _describe(result: FileResult) -> str:
    label = str(result.path)
    if not result.ok:
        return failed(label, f"{result.error_kind}: {result.error}")
    changes = []
    if result.new_note is not None:
        old = result.old_note.name if result.old_note is not None else "none"
        changes.append(f"note {old} -> {result.new_note.name}")
    if result.renamed_to is not None:
        changes.append(f"-> {result.renamed_to.name}")
    changes.extend(result.notes)
    return line(label, result.status, "; ".join(changes) or None)

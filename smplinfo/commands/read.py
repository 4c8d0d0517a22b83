from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from ..audio_info import read_stream_info
from ..errors import SmplInfoError, error_kind
from ..models import read_sample
from ..scanner import InputScanner
from .output import failed, line

logger = logging.getLogger(__name__)


def run(
    scanner: InputScanner,
    inputs: Iterable[Path],
    *,
    recursive: bool = False,
    details: bool = False,
    json_output: bool = False,
) -> bool:
    """Print the root note of every input file. Returns False if any file failed."""
    ok = True
    for item in inputs:
        try:
            paths = scanner.expand_input(item, recursive=recursive)
        except OSError as exc:
            ok = False
            logger.warning("Cannot list %s: %s", item, exc)
            _print_failure(item, exc, json_output)
            continue
        for path in paths:
            ok = _print_sample(path, details=details, json_output=json_output) and ok
    return ok


def _print_sample(path: Path, *, details: bool, json_output: bool) -> bool:
    try:
        sample = read_sample(path)
    except (SmplInfoError, OSError) as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        _print_failure(path, exc, json_output)
        return False
    info = read_stream_info(path) if details else None
    if json_output:
        payload = sample.to_record()
        if details:
            payload["stream"] = info.to_record() if info else None
        print(json.dumps(payload, sort_keys=True))
        return True
    if sample.note is None:
        status = "no root note"
    else:
        status = f"{sample.note.name} ({int(sample.note)})"
    print(line(str(path), status, info.describe() if info else None))
    return True


def _print_failure(path: Path, exc: Exception, json_output: bool) -> None:
    if json_output:
        print(json.dumps({"path": str(path), "error": str(exc), "error_kind": error_kind(exc)}))
    else:
        print(failed(str(path), f"{error_kind(exc)}: {exc}"))

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from .errors import InvalidNote
from .midi import Note

# A note token must be delimited by the string edges or one of "-", "_", "." and whitespace.
NOTE_TOKEN_PATTERN = re.compile(r"(?<![^\s._-])(?P<token>[A-G]#?[-+]?\d+)(?![^\s._-])")


def note_candidates(filename: str) -> list[Note]:
    candidates: list[Note] = []
    for match in NOTE_TOKEN_PATTERN.finditer(filename):
        try:
            candidates.append(Note.parse(match.group("token")))
        except InvalidNote:
            continue
    return candidates


def extract_note_from_filename(filename: str | Path) -> Optional[Note]:
    """Return the note named in ``filename`` when exactly one note token appears in it."""
    name = filename.name if isinstance(filename, Path) else filename
    candidates = note_candidates(name)
    if len(candidates) != 1:
        return None
    return candidates[0]

from __future__ import annotations

from ..midi import NOTE_NAMES, Note


def run(*, low: int = 0, high: int = 127) -> None:
    """Print the note numbers with their names, one octave per row."""
    for start in range(low - low % len(NOTE_NAMES), high + 1, len(NOTE_NAMES)):
        cells = []
        for value in range(start, start + len(NOTE_NAMES)):
            if value < low or value > high:
                continue
            cells.append(f"{value:03d}={Note(value).name:<4}")
        print("  ".join(cells))

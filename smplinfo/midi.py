from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidNote

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
# Note 0 is displayed as C-2, so note 60 is C3.
OCTAVE_OFFSET = 2
MAX_NOTE = 0xFF

NUMBER_PATTERN = re.compile(r"^\d+$")
NAME_PATTERN = re.compile(r"^(?P<name>[A-G]#?)(?P<octave>[-+]?\d+)$")


@dataclass(frozen=True, order=True, slots=True)
class Note:
    """A MIDI note number stored as a single byte."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise InvalidNote(f"note value must be an integer, got {self.value!r}")
        if not 0 <= self.value <= MAX_NOTE:
            raise InvalidNote(f"note value out of range: {self.value}")

    @classmethod
    def parse(cls, text: str) -> "Note":
        """Parse either a decimal note number (``"60"``) or a note name (``"C3"``)."""
        cleaned = text.strip()
        if NUMBER_PATTERN.match(cleaned):
            return cls(int(cleaned))
        match = NAME_PATTERN.match(cleaned)
        if not match:
            raise InvalidNote(f"invalid MIDI note: {text!r}")
        return cls.from_name(match.group("name"), int(match.group("octave")))

    @classmethod
    def from_name(cls, name: str, octave: int) -> "Note":
        try:
            index = NOTE_NAMES.index(name)
        except ValueError:
            raise InvalidNote(f"unknown note name: {name!r}") from None
        value = (octave + OCTAVE_OFFSET) * len(NOTE_NAMES) + index
        if not 0 <= value <= MAX_NOTE:
            raise InvalidNote(f"note {name}{octave} is out of range")
        return cls(value)

    @property
    def pitch_class(self) -> str:
        return NOTE_NAMES[self.value % len(NOTE_NAMES)]

    @property
    def octave(self) -> int:
        return self.value // len(NOTE_NAMES) - OCTAVE_OFFSET

    @property
    def name(self) -> str:
        return f"{self.pitch_class}{self.octave}"

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.name

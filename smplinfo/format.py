from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidFormat
from .midi import Note

TOKEN_PATTERN = re.compile(r"%.|%$|[^%]+", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Literal:
    text: str


@dataclass(frozen=True, slots=True)
class MidiNote:
    """``%m``: the note number, zero padded to three digits."""


@dataclass(frozen=True, slots=True)
class NoteName:
    """``%n``: the note name with octave, e.g. ``C3``."""


FormatPart = Union[Literal, MidiNote, NoteName]


@dataclass(frozen=True, slots=True)
class FormatString:
    """A parsed filename template.

    ``%m`` and ``%n`` render to nothing when no note is known and ``%%`` is a
    literal percent sign. Any other ``%`` sequence is rejected when ``strict``
    is set and kept verbatim otherwise.
    """

    parts: tuple[FormatPart, ...]

    @classmethod
    def parse(cls, text: str, *, strict: bool = True) -> "FormatString":
        parts: list[FormatPart] = []
        for match in TOKEN_PATTERN.finditer(text):
            token = match.group(0)
            if token == "%%":
                _append_literal(parts, "%")
            elif token == "%m":
                parts.append(MidiNote())
            elif token == "%n":
                parts.append(NoteName())
            elif token.startswith("%"):
                if strict:
                    raise InvalidFormat(f"invalid format specifier: {token}")
                _append_literal(parts, token)
            else:
                _append_literal(parts, token)
        return cls(tuple(parts))

    def render(self, note: Optional[Note] = None) -> str:
        out: list[str] = []
        for part in self.parts:
            if isinstance(part, Literal):
                out.append(part.text)
            elif note is None:
                continue
            elif isinstance(part, MidiNote):
                out.append(f"{int(note):03d}")
            else:
                out.append(note.name)
        return "".join(out)

    @property
    def uses_note(self) -> bool:
        return any(not isinstance(part, Literal) for part in self.parts)


def _append_literal(parts: list[FormatPart], text: str) -> None:
    if parts and isinstance(parts[-1], Literal):
        parts[-1] = Literal(parts[-1].text + text)
    else:
        parts.append(Literal(text))

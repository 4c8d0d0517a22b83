from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .midi import Note
from .wav import read_sampler_chunk


@dataclass(frozen=True, slots=True)
class Sample:
    """A WAV file along with the sampler attributes read from it."""

    path: Path
    note: Optional[Note] = None

    @property
    def name(self) -> str:
        return self.path.name or "<unknown>"

    def to_record(self) -> Dict[str, object]:
        return {
            "path": str(self.path),
            "note": int(self.note) if self.note is not None else None,
            "note_name": self.note.name if self.note is not None else None,
        }


def read_sample(path: Path | str) -> Sample:
    """Read a sample from a file.

    Validates the RIFF/WAVE header and reads the sampler chunk when there is
    one, without loading the audio data. The file is closed before returning.
    """
    path = Path(path)
    chunk = read_sampler_chunk(path)
    note = chunk.unity_note if chunk is not None else None
    return Sample(path=path, note=note)

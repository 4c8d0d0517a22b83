from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .errors import InvalidRecord
from .midi import Note

SMPL_ID = b"smpl"
SMPL_RECORD_SIZE = 44
# Payload size of a sampler chunk without any loop records.
SMPL_PAYLOAD_SIZE = SMPL_RECORD_SIZE - 8
UNITY_NOTE_OFFSET = 0x14


@dataclass(frozen=True, slots=True)
class SamplerChunk:
    """The fixed 44-byte head of a ``smpl`` chunk: chunk header plus sampler fields.

    Loop records that may follow in the file are never read or touched.
    """

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != SMPL_RECORD_SIZE:
            raise InvalidRecord(
                f"sampler record must be {SMPL_RECORD_SIZE} bytes, got {len(self.raw)}"
            )
        if self.raw[:4] != SMPL_ID:
            raise InvalidRecord(f"invalid smpl chunk id {self.raw[:4]!r}")

    @classmethod
    def default(cls) -> "SamplerChunk":
        raw = bytearray(SMPL_RECORD_SIZE)
        raw[:4] = SMPL_ID
        raw[4:8] = SMPL_PAYLOAD_SIZE.to_bytes(4, "little")
        return cls(bytes(raw))

    @classmethod
    def from_bytes(cls, data: bytes) -> "SamplerChunk":
        return cls(bytes(data))

    @classmethod
    def read(cls, stream: BinaryIO) -> "SamplerChunk":
        data = stream.read(SMPL_RECORD_SIZE)
        if len(data) < SMPL_RECORD_SIZE:
            raise InvalidRecord(
                f"short sampler record ({len(data)} bytes, need {SMPL_RECORD_SIZE})"
            )
        return cls.from_bytes(data)

    def to_bytes(self) -> bytes:
        return self.raw

    @property
    def unity_note(self) -> Note:
        return Note(self.raw[UNITY_NOTE_OFFSET])

    def with_unity_note(self, note: Note) -> "SamplerChunk":
        raw = bytearray(self.raw)
        raw[UNITY_NOTE_OFFSET] = int(note)
        return SamplerChunk(bytes(raw))


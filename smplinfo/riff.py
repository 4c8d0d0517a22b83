from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .errors import Malformed, NotAContainer, Truncated

logger = logging.getLogger(__name__)

RIFF_ID = b"RIFF"
WAVE_TYPE = b"WAVE"
HEADER_SIZE = 12  # id + size + form type
CHUNK_HEADER_SIZE = 8
SIZE_FIELD_OFFSET = 4


@dataclass(frozen=True, slots=True)
class RiffHeader:
    chunk_id: bytes
    size: int
    form_type: bytes

    @property
    def end(self) -> int:
        """Absolute offset just past the last byte covered by the declared size."""
        return CHUNK_HEADER_SIZE + self.size

    @classmethod
    def from_bytes(cls, data: bytes) -> "RiffHeader":
        if len(data) < HEADER_SIZE:
            raise NotAContainer(
                f"file too short for RIFF header ({len(data)} bytes, need {HEADER_SIZE})"
            )
        if data[:4] != RIFF_ID:
            raise NotAContainer(f"bad magic: {data[:4]!r}")
        if data[8:12] != WAVE_TYPE:
            raise NotAContainer(f"not a WAV file (form type {data[8:12]!r})")
        size = int.from_bytes(data[4:8], "little")
        return cls(chunk_id=data[:4], size=size, form_type=data[8:12])


@dataclass(frozen=True, slots=True)
class ChunkLocation:
    """A top-level chunk: its id, the absolute offset of its header and its payload size."""

    chunk_id: bytes
    offset: int
    size: int


class RiffContainer:
    """A seekable stream holding a RIFF/WAVE file.

    The container only ever holds the parsed header; chunk offsets are found
    by walking from the top on every lookup, since an edit may change the
    layout after the edited chunk.
    """

    def __init__(self, stream: BinaryIO, header: RiffHeader) -> None:
        self.stream = stream
        self.header = header

    @classmethod
    def open(cls, stream: BinaryIO) -> "RiffContainer":
        stream.seek(0)
        header = RiffHeader.from_bytes(stream.read(HEADER_SIZE))
        return cls(stream, header)

    def chunks(self) -> Iterator[ChunkLocation]:
        end = self.header.end
        offset = HEADER_SIZE
        while offset < end:
            if end - offset < CHUNK_HEADER_SIZE:
                raise Truncated(
                    f"{end - offset} trailing bytes at offset {offset} are too short for a chunk header"
                )
            self.stream.seek(offset)
            raw = self.stream.read(CHUNK_HEADER_SIZE)
            if len(raw) < CHUNK_HEADER_SIZE:
                raise Truncated(
                    f"stream ends inside chunk header at offset {offset} (declared end {end})"
                )
            size = int.from_bytes(raw[4:8], "little")
            if offset + CHUNK_HEADER_SIZE + size > end:
                raise Malformed(
                    f"chunk {raw[:4]!r} at offset {offset} declares {size} bytes past the container end {end}"
                )
            yield ChunkLocation(chunk_id=raw[:4], offset=offset, size=size)
            # RIFF payloads are padded to an even length.
            offset += CHUNK_HEADER_SIZE + size + (size & 1)

    def locate(self, chunk_id: bytes) -> Optional[ChunkLocation]:
        for chunk in self.chunks():
            if chunk.chunk_id == chunk_id:
                logger.debug("Found %r chunk at offset %d", chunk_id, chunk.offset)
                return chunk
        return None

from __future__ import annotations

import io
import logging
import os
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import InvalidRecord
from .riff import SIZE_FIELD_OFFSET, ChunkLocation, RiffContainer, RiffHeader
from .sampler import SMPL_ID, SMPL_PAYLOAD_SIZE, SMPL_RECORD_SIZE, SamplerChunk

logger = logging.getLogger(__name__)

ChunkUpdate = Callable[[SamplerChunk], SamplerChunk]


class WavFile:
    """Sampler chunk access on top of an open RIFF/WAVE stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.container = RiffContainer.open(stream)

    @property
    def stream(self) -> BinaryIO:
        return self.container.stream

    @property
    def header(self) -> RiffHeader:
        return self.container.header

    def _locate_sampler(self) -> Optional[ChunkLocation]:
        location = self.container.locate(SMPL_ID)
        if location is not None and location.size < SMPL_PAYLOAD_SIZE:
            raise InvalidRecord(
                f"smpl chunk at offset {location.offset} declares {location.size} bytes, "
                f"need at least {SMPL_PAYLOAD_SIZE}"
            )
        return location

    def get_sampler_chunk(self) -> Optional[SamplerChunk]:
        location = self._locate_sampler()
        if location is None:
            return None
        self.stream.seek(location.offset)
        return SamplerChunk.read(self.stream)

    def update_sampler_chunk(self, mutate: ChunkUpdate) -> SamplerChunk:
        """Rewrite the sampler chunk in place, or append a new one when none exists.

        There is no rollback: an OSError half way through may leave the chunk
        written but the RIFF size not yet patched.
        """
        location = self._locate_sampler()
        if location is not None:
            self.stream.seek(location.offset)
            chunk = mutate(SamplerChunk.read(self.stream))
            self.stream.seek(location.offset)
            self.stream.write(chunk.to_bytes())
            logger.debug("Rewrote smpl chunk at offset %d", location.offset)
            return chunk

        chunk = mutate(SamplerChunk.default())
        old_size = self.header.size
        end = self.stream.seek(0, io.SEEK_END)
        self.stream.write(chunk.to_bytes())
        # Patch from the size parsed at open time, not from the stream length.
        new_size = old_size + SMPL_RECORD_SIZE
        self.stream.seek(SIZE_FIELD_OFFSET)
        self.stream.write(new_size.to_bytes(4, "little"))
        self.container.header = RiffHeader(
            chunk_id=self.header.chunk_id, size=new_size, form_type=self.header.form_type
        )
        logger.debug("Appended smpl chunk at offset %d (RIFF size %d -> %d)", end, old_size, new_size)
        return chunk


def read_sampler_chunk(path: Path) -> Optional[SamplerChunk]:
    with path.open("rb") as fh:
        return WavFile(fh).get_sampler_chunk()


def update_file(path: Path, mutate: ChunkUpdate, *, atomic: bool = False) -> SamplerChunk:
    """Apply ``mutate`` to the sampler chunk of the file at ``path``.

    With ``atomic`` the edit is made on a copy in the same directory that then
    replaces the original, so a failure never leaves a half-written file.
    """
    if not atomic:
        with path.open("r+b") as fh:
            chunk = WavFile(fh).update_sampler_chunk(mutate)
            fh.flush()
        return chunk

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        shutil.copyfile(path, tmp_path)
        shutil.copymode(path, tmp_path)
        with tmp_path.open("r+b") as fh:
            chunk = WavFile(fh).update_sampler_chunk(mutate)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return chunk

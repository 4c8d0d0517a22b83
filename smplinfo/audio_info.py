from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from mutagen.wave import WAVE

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreamInfo:
    sample_rate: int
    channels: int
    bits_per_sample: int
    length_seconds: float

    def describe(self) -> str:
        return (
            f"{self.sample_rate} Hz, {self.channels} ch, "
            f"{self.bits_per_sample} bit, {self.length_seconds:.2f}s"
        )

    def to_record(self) -> Dict[str, object]:
        return {
            "sample_rate": self.sample_rate,
            "channels": self.channels,
            "bits_per_sample": self.bits_per_sample,
            "length_seconds": round(self.length_seconds, 3),
        }


def read_stream_info(path: Path) -> Optional[StreamInfo]:
    """Read the format of the audio stream, or ``None`` when mutagen cannot parse it."""
    try:
        info = WAVE(path).info
    except Exception as exc:  # mutagen raises both MutagenError and parser internals
        logger.debug("Failed to read stream info for %s: %s", path, exc)
        return None
    return StreamInfo(
        sample_rate=int(getattr(info, "sample_rate", 0) or 0),
        channels=int(getattr(info, "channels", 0) or 0),
        bits_per_sample=int(getattr(info, "bits_per_sample", 0) or 0),
        length_seconds=float(getattr(info, "length", 0.0) or 0.0),
    )

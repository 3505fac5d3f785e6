"""Data models for decoded and resampled audio."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

TARGET_RATE = 16000
CHUNK_SECONDS = 30
CHUNK_SAMPLES = CHUNK_SECONDS * TARGET_RATE


@dataclass(frozen=True)
class AudioBuffer:
    """Single-channel float32 samples tagged with their sample rate (Hz).

    The samples are copied and made read-only on construction.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        samples = np.array(self.samples, dtype=np.float32)
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self.samples) / self.sample_rate if self.sample_rate > 0 else 0.0


@dataclass(frozen=True)
class Chunk:
    """A ``[start, end)`` slice of a resampled buffer."""

    index: int
    start: int
    end: int

    @property
    def start_seconds(self) -> float:
        return self.start / TARGET_RATE

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class TranscriptLine:
    """One transcribed chunk: its start offset and trimmed text."""

    timestamp_seconds: float
    text: str

"""Nearest-neighbour resampling to the fixed 16 kHz ASR input rate."""

from __future__ import annotations

import numpy as np

from src.audio.models import TARGET_RATE, AudioBuffer
from src.errors import InvalidAudioInput


def resampled_length(source_length: int, source_rate: int) -> int:
    """Return ``floor(source_length * TARGET_RATE / source_rate)``."""
    return int((source_length * TARGET_RATE) // source_rate)


def resample(buffer: AudioBuffer) -> AudioBuffer:
    """Convert *buffer* to ``TARGET_RATE`` by nearest-neighbour index mapping.

    Output sample ``i`` takes source sample ``floor(i / ratio)`` where
    ``ratio = TARGET_RATE / sample_rate``. No anti-aliasing filter is applied.
    Index arithmetic is done in integers so the mapping is exact for any
    integral source rate.

    Args:
        buffer: Mono source audio.

    Returns:
        A new buffer whose ``sample_rate`` is ``TARGET_RATE``.

    Raises:
        InvalidAudioInput: If the buffer is empty or its rate is not positive.
    """
    if buffer.sample_rate <= 0:
        raise InvalidAudioInput(f"Sample rate must be positive, got {buffer.sample_rate}")
    if len(buffer) == 0:
        raise InvalidAudioInput("Audio buffer is empty")

    if buffer.sample_rate == TARGET_RATE:
        return AudioBuffer(samples=buffer.samples, sample_rate=TARGET_RATE)

    out_length = resampled_length(len(buffer), buffer.sample_rate)
    # floor(i / (TARGET_RATE / rate)) == floor(i * rate / TARGET_RATE)
    indices = ((np.arange(out_length, dtype=np.int64) * buffer.sample_rate) // TARGET_RATE).astype(np.int64)
    return AudioBuffer(samples=buffer.samples[indices], sample_rate=TARGET_RATE)

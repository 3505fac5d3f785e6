"""Chunked, strictly sequential transcription of a resampled buffer."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable

from src.audio.models import CHUNK_SAMPLES, TARGET_RATE, AudioBuffer, Chunk, TranscriptLine
from src.errors import EngineNotReady, InvalidAudioInput, TranscriptionFailed
from src.transcription.engine import AsrEngine, AsrOptions, EngineHandle

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
PartialLineCallback = Callable[[str], None]

DEFAULT_OPTIONS = AsrOptions()


def chunk_bounds(length: int, chunk_samples: int = CHUNK_SAMPLES) -> list[Chunk]:
    """Partition ``[0, length)`` into consecutive chunks of at most *chunk_samples*.

    The last chunk may be shorter. Returns ``ceil(length / chunk_samples)`` chunks.
    """
    total = math.ceil(length / chunk_samples)
    return [
        Chunk(index=i, start=i * chunk_samples, end=min((i + 1) * chunk_samples, length))
        for i in range(total)
    ]


def format_timestamp(seconds: float) -> str:
    """Format *seconds* as ``[HH:MM:SS]``, truncating to whole seconds.

    Hours are not wrapped, so 100 hours renders as ``[100:00:00]``.
    """
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"[{hours:02d}:{minutes:02d}:{secs:02d}]"


def format_line(line: TranscriptLine) -> str:
    return f"{format_timestamp(line.timestamp_seconds)} {line.text}"


async def transcribe(
    buffer: AudioBuffer,
    engine: AsrEngine | EngineHandle,
    on_progress: ProgressCallback | None = None,
    on_partial_line: PartialLineCallback | None = None,
    options: AsrOptions = DEFAULT_OPTIONS,
    chunk_timeout: float | None = None,
) -> str:
    """Transcribe a 16 kHz buffer chunk by chunk and return the full transcript.

    Chunks are sent to the engine one at a time; chunk ``i + 1`` is not started
    until chunk ``i`` has returned. Each result becomes a line
    ``[HH:MM:SS] text`` stamped with the chunk's start offset.

    Args:
        buffer: Audio already resampled to ``TARGET_RATE``.
        engine: The ASR engine, or a handle guarding exclusive access to one.
        on_progress: Called with ``(chunks_done, total_chunks)`` after each chunk.
        on_partial_line: Called with the transcript so far after each chunk.
        options: Engine options passed unchanged to every invocation.
        chunk_timeout: Optional per-chunk limit in seconds. ``None`` waits forever.

    Returns:
        The ordered concatenation of all lines, each ending in a newline.

    Raises:
        EngineNotReady: If the engine has no model loaded.
        InvalidAudioInput: If the buffer is not at ``TARGET_RATE``.
        TranscriptionFailed: On the first failing chunk; later chunks are skipped.
    """
    handle = engine if isinstance(engine, EngineHandle) else EngineHandle(engine)
    if not handle.engine.is_loaded():
        raise EngineNotReady("ASR model not loaded")
    if buffer.sample_rate != TARGET_RATE:
        raise InvalidAudioInput(
            f"Expected {TARGET_RATE}Hz audio, got {buffer.sample_rate}Hz; resample first"
        )

    chunks = chunk_bounds(len(buffer))
    total = len(chunks)
    transcript = ""
    logger.info("Starting transcription: %d chunks", total)

    async with handle.checkout() as asr:
        for chunk in chunks:
            logger.info("Processing chunk %d/%d", chunk.index + 1, total)
            samples = buffer.samples[chunk.start : chunk.end]
            try:
                call = asr.invoke(samples, options)
                if chunk_timeout is not None:
                    result = await asyncio.wait_for(call, timeout=chunk_timeout)
                else:
                    result = await call
            except Exception as exc:
                logger.exception("Chunk %d/%d failed", chunk.index + 1, total)
                raise TranscriptionFailed(
                    exc, chunk_index=chunk.index, partial_transcript=transcript
                ) from exc

            line = TranscriptLine(timestamp_seconds=chunk.start_seconds, text=result.text.strip())
            transcript += format_line(line) + "\n"
            if on_partial_line:
                on_partial_line(transcript)
            if on_progress:
                on_progress(chunk.index + 1, total)

    logger.info("Transcription completed: %d characters", len(transcript))
    return transcript

"""Tests for chunk partitioning and sequential transcription."""

from __future__ import annotations

import asyncio
import math

import numpy as np
import pytest

from src.audio.models import CHUNK_SAMPLES, TARGET_RATE, AudioBuffer
from src.errors import EngineNotReady, InvalidAudioInput, TranscriptionFailed
from src.transcription.engine import AsrOptions, EngineHandle
from src.transcription.orchestrator import chunk_bounds, format_timestamp, transcribe


def _buffer(num_samples: int) -> AudioBuffer:
    return AudioBuffer(samples=np.zeros(num_samples, dtype=np.float32), sample_rate=TARGET_RATE)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


class TestFormatTimestamp:
    def test_zero(self) -> None:
        assert format_timestamp(0) == "[00:00:00]"

    def test_hours_minutes_seconds(self) -> None:
        assert format_timestamp(3661) == "[01:01:01]"

    def test_truncates_fraction(self) -> None:
        assert format_timestamp(59.99) == "[00:00:59]"

    def test_no_hour_rollover(self) -> None:
        assert format_timestamp(100 * 3600 + 5) == "[100:00:05]"


# ---------------------------------------------------------------------------
# Partitioning
# ---------------------------------------------------------------------------


class TestChunkBounds:
    def test_chunk_size_is_thirty_seconds(self) -> None:
        assert CHUNK_SAMPLES == 30 * 16000

    @pytest.mark.parametrize(
        "length",
        [0, 1, CHUNK_SAMPLES - 1, CHUNK_SAMPLES, CHUNK_SAMPLES + 1, 5 * CHUNK_SAMPLES - 7],
    )
    def test_covers_buffer_without_gaps(self, length: int) -> None:
        chunks = chunk_bounds(length)
        assert len(chunks) == math.ceil(length / CHUNK_SAMPLES)
        position = 0
        for i, chunk in enumerate(chunks):
            assert chunk.index == i
            assert chunk.start == position
            assert 0 < chunk.end - chunk.start <= CHUNK_SAMPLES
            position = chunk.end
        assert position == length

    def test_last_chunk_may_be_shorter(self) -> None:
        chunks = chunk_bounds(2 * CHUNK_SAMPLES + 100)
        assert [len(c) for c in chunks] == [CHUNK_SAMPLES, CHUNK_SAMPLES, 100]


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TestTranscribe:
    def test_lines_in_chunk_order_with_timestamps(self, make_engine) -> None:
        engine = make_engine()
        transcript = asyncio.run(transcribe(_buffer(3 * CHUNK_SAMPLES), engine))
        assert transcript == (
            "[00:00:00] chunk 0\n"
            "[00:00:30] chunk 1\n"
            "[00:01:00] chunk 2\n"
        )

    def test_chunk_slices_passed_to_engine(self, make_engine) -> None:
        engine = make_engine()
        samples = np.arange(CHUNK_SAMPLES + 10, dtype=np.float32)
        buf = AudioBuffer(samples=samples, sample_rate=TARGET_RATE)
        asyncio.run(transcribe(buf, engine))
        assert len(engine.calls) == 2
        np.testing.assert_array_equal(engine.calls[0][0], samples[:CHUNK_SAMPLES])
        np.testing.assert_array_equal(engine.calls[1][0], samples[CHUNK_SAMPLES:])

    def test_fixed_engine_options(self, make_engine) -> None:
        engine = make_engine()
        asyncio.run(transcribe(_buffer(100), engine))
        options = engine.calls[0][1]
        assert options == AsrOptions()
        assert options.chunk_length_s == 30
        assert options.stride_length_s == 5
        assert options.language == "english"
        assert options.task == "transcribe"
        assert options.return_timestamps is False

    def test_chunks_never_overlap_in_time(self, make_engine) -> None:
        engine = make_engine()
        asyncio.run(transcribe(_buffer(4 * CHUNK_SAMPLES), engine))
        assert engine.max_in_flight == 1

    def test_concurrent_calls_on_one_handle_are_serialized(self, make_engine) -> None:
        engine = make_engine()
        handle = EngineHandle(engine)
        busy_seen: list[bool] = []

        async def run() -> list[str]:
            return await asyncio.gather(
                transcribe(
                    _buffer(2 * CHUNK_SAMPLES),
                    handle,
                    on_progress=lambda done, total: busy_seen.append(handle.busy),
                ),
                transcribe(_buffer(2 * CHUNK_SAMPLES), handle),
            )

        first, second = asyncio.run(run())

        assert engine.max_in_flight == 1
        assert len(engine.calls) == 4
        assert busy_seen == [True, True]
        assert not handle.busy
        # Each call holds the engine for all of its chunks
        assert {first, second} == {
            "[00:00:00] chunk 0\n[00:00:30] chunk 1\n",
            "[00:00:00] chunk 2\n[00:00:30] chunk 3\n",
        }

    def test_callbacks_report_progress_and_partial_transcript(self, make_engine) -> None:
        engine = make_engine()
        progress: list[tuple[int, int]] = []
        partials: list[str] = []
        result = asyncio.run(
            transcribe(
                _buffer(2 * CHUNK_SAMPLES + 1),
                engine,
                on_progress=lambda done, total: progress.append((done, total)),
                on_partial_line=partials.append,
            )
        )
        assert progress == [(1, 3), (2, 3), (3, 3)]
        assert partials[0] == "[00:00:00] chunk 0\n"
        assert partials[-1] == result
        assert all(later.startswith(earlier) for earlier, later in zip(partials, partials[1:]))

    def test_empty_buffer_gives_empty_transcript(self, make_engine) -> None:
        engine = make_engine()
        assert asyncio.run(transcribe(_buffer(0), engine)) == ""
        assert engine.calls == []

    def test_accepts_engine_handle(self, make_engine) -> None:
        handle = EngineHandle(make_engine())
        transcript = asyncio.run(transcribe(_buffer(10), handle))
        assert transcript == "[00:00:00] chunk 0\n"


class TestTranscribeErrors:
    def test_engine_not_loaded(self, make_engine) -> None:
        engine = make_engine(loaded=False)
        with pytest.raises(EngineNotReady):
            asyncio.run(transcribe(_buffer(10), engine))
        assert engine.calls == []

    def test_rejects_wrong_sample_rate(self, make_engine) -> None:
        buf = AudioBuffer(samples=np.zeros(10, dtype=np.float32), sample_rate=44100)
        with pytest.raises(InvalidAudioInput):
            asyncio.run(transcribe(buf, make_engine()))

    def test_failure_on_chunk_two_of_five_aborts_rest(self, make_engine) -> None:
        engine = make_engine(fail_on=1)
        partials: list[str] = []
        with pytest.raises(TranscriptionFailed) as exc_info:
            asyncio.run(
                transcribe(_buffer(5 * CHUNK_SAMPLES), engine, on_partial_line=partials.append)
            )
        assert len(engine.calls) == 2
        err = exc_info.value
        assert err.chunk_index == 1
        assert isinstance(err.cause, RuntimeError)
        assert err.partial_transcript == "[00:00:00] chunk 0\n"
        assert partials == ["[00:00:00] chunk 0\n"]

    def test_chunk_timeout(self, make_engine) -> None:
        class SlowEngine(make_engine):
            async def invoke(self, samples, options):
                await asyncio.sleep(10)

        with pytest.raises(TranscriptionFailed) as exc_info:
            asyncio.run(transcribe(_buffer(10), SlowEngine(), chunk_timeout=0.01))
        assert isinstance(exc_info.value.cause, asyncio.TimeoutError)

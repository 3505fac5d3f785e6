"""TransformersAsrEngine — Whisper-style ASR via a Hugging Face pipeline.

Model loading and inference are blocking calls, so both run in a worker
thread to keep the event loop responsive.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import numpy as np

from src.audio.models import TARGET_RATE
from src.transcription.engine import AsrEngine, AsrOptions, AsrResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class TransformersAsrEngine(AsrEngine):
    def __init__(self, device: str = "cpu") -> None:
        self._device = device
        self._model_id = ""
        self._pipe: Any = None

    @classmethod
    async def load(
        cls,
        model_id: str,
        on_progress: ProgressCallback | None = None,
        device: str = "cpu",
    ) -> TransformersAsrEngine:
        """Create an engine and load *model_id* onto *device*.

        Progress is reported as a fraction in ``[0, 1]``.
        """
        engine = cls(device=device)
        if on_progress:
            on_progress(0.0)
        engine._pipe = await asyncio.to_thread(engine._build_pipeline, model_id)
        engine._model_id = model_id
        if on_progress:
            on_progress(1.0)
        logger.info("ASR model loaded: %s (device=%s)", model_id, device)
        return engine

    def _build_pipeline(self, model_id: str) -> Any:
        from transformers import pipeline  # heavy import, only when a model is requested

        logger.info("Loading ASR model %s...", model_id)
        return pipeline("automatic-speech-recognition", model=model_id, device=self._device)

    def is_loaded(self) -> bool:
        return self._pipe is not None

    def model_name(self) -> str:
        return self._model_id

    async def invoke(self, samples: np.ndarray, options: AsrOptions) -> AsrResult:
        generate_kwargs: dict[str, str] = {}
        if not self._model_id.endswith(".en"):
            # English-only checkpoints reject language/task hints
            generate_kwargs = {"language": options.language, "task": options.task}

        result = await asyncio.to_thread(
            self._pipe,
            {"raw": samples, "sampling_rate": TARGET_RATE},
            chunk_length_s=options.chunk_length_s,
            stride_length_s=options.stride_length_s,
            return_timestamps=options.return_timestamps,
            generate_kwargs=generate_kwargs,
        )
        return AsrResult(text=str(result.get("text", "")))

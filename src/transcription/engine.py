"""AsrEngine port and the exclusive checkout guard around it."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import numpy as np

from src.audio.models import CHUNK_SECONDS
from src.errors import EngineNotReady


@dataclass(frozen=True)
class AsrOptions:
    """Per-invocation engine options. Fixed for every chunk."""

    chunk_length_s: int = CHUNK_SECONDS
    stride_length_s: int = 5
    language: str = "english"
    task: str = "transcribe"
    return_timestamps: bool = False


@dataclass
class AsrResult:
    text: str


class AsrEngine(ABC):
    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether the model has been loaded and is ready for inference."""

    @abstractmethod
    async def invoke(self, samples: np.ndarray, options: AsrOptions) -> AsrResult:
        """Transcribe one chunk of 16 kHz float32 samples."""

    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier the engine was loaded with."""


class EngineHandle:
    """Holds an engine that only one in-flight call may use at a time.

    ``checkout()`` is an async context manager; a second caller waits until
    the first releases the engine.
    """

    def __init__(self, engine: AsrEngine) -> None:
        self._engine = engine
        self._lock = asyncio.Lock()

    @property
    def engine(self) -> AsrEngine:
        return self._engine

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def checkout(self) -> AsyncIterator[AsrEngine]:
        if not self._engine.is_loaded():
            raise EngineNotReady("ASR model not loaded")
        async with self._lock:
            yield self._engine

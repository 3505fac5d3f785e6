"""Shared fixtures: a scripted in-memory ASR engine."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import numpy as np
import pytest

from src.transcription.engine import AsrEngine, AsrOptions, AsrResult


class FakeAsrEngine(AsrEngine):
    """Returns ``"chunk <n>"`` per call and records every invocation.

    ``fail_on`` is the zero-based call index that raises instead.
    """

    def __init__(self, loaded: bool = True, fail_on: int | None = None, name: str = "fake") -> None:
        self.loaded = loaded
        self.fail_on = fail_on
        self.name = name
        self.calls: list[tuple[np.ndarray, AsrOptions]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def is_loaded(self) -> bool:
        return self.loaded

    def model_name(self) -> str:
        return self.name

    async def invoke(self, samples: np.ndarray, options: AsrOptions) -> AsrResult:
        index = len(self.calls)
        self.calls.append((samples, options))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.fail_on is not None and index == self.fail_on:
                raise RuntimeError(f"engine exploded on chunk {index}")
            return AsrResult(text=f"  chunk {index}  ")
        finally:
            self.in_flight -= 1


@pytest.fixture
def make_engine() -> Callable[..., FakeAsrEngine]:
    return FakeAsrEngine

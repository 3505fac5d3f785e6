"""VideoSession — per-video pipeline state passed explicitly to each stage.

A session owns the loaded ASR engine, the transcript, the topic segments and
the mind-map tree. Model loading is cancellable by replacement: starting a new
load supersedes any load in flight, whose result is then discarded. Entry
points that need the model wait for an in-flight load to settle first.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager

from src.audio.extract import extract_audio
from src.audio.models import AudioBuffer
from src.audio.resample import resample
from src.config import settings
from src.errors import EngineNotReady, TranscriptionFailed, TranscriptionInProgress
from src.topics.client import TopicAnalysisClient
from src.topics.models import MindTree, TopicSegment
from src.topics.tree_builder import build_mind_tree, empty_mind_tree
from src.transcription.engine import AsrEngine, EngineHandle
from src.transcription.orchestrator import PartialLineCallback, ProgressCallback, transcribe

logger = logging.getLogger(__name__)

LoadProgressCallback = Callable[[float], None]
EngineLoader = Callable[[str, LoadProgressCallback | None], Awaitable[AsrEngine]]


async def default_engine_loader(
    model_id: str, on_progress: LoadProgressCallback | None = None
) -> AsrEngine:
    from src.transcription.transformers_engine import TransformersAsrEngine

    return await TransformersAsrEngine.load(model_id, on_progress, device=settings.asr_device)


class VideoSession:
    def __init__(
        self,
        loader: EngineLoader = default_engine_loader,
        chunk_timeout: float | None = None,
    ) -> None:
        self._loader = loader
        self._chunk_timeout = chunk_timeout
        self._handle: EngineHandle | None = None
        self._load_generation = 0
        self._load_task: asyncio.Task[bool] | None = None
        self._transcribing = False

        self.model_id: str | None = None
        self.transcript = ""
        self.segments: list[TopicSegment] = []
        self.tree: MindTree = empty_mind_tree()

    # --------------------
    # Model lifecycle
    # --------------------

    @property
    def is_ready(self) -> bool:
        return self._handle is not None and self._handle.engine.is_loaded()

    @property
    def is_loading(self) -> bool:
        return self._load_task is not None and not self._load_task.done()

    @property
    def is_transcribing(self) -> bool:
        return self._transcribing

    async def load_model(
        self, model_id: str, on_progress: LoadProgressCallback | None = None
    ) -> bool:
        """Load *model_id*, superseding any load already in flight.

        The current engine is dropped as soon as a new load starts. Returns
        True if this load installed its engine, False if a newer load
        replaced it first.

        Raises:
            Exception: Whatever the loader raised, if this load is still current.
        """
        self._load_generation += 1
        self._handle = None
        self.model_id = None

        task = asyncio.ensure_future(self._load(self._load_generation, model_id, on_progress))
        self._load_task = task
        return await task

    async def _load(
        self, generation: int, model_id: str, on_progress: LoadProgressCallback | None
    ) -> bool:
        logger.info("Loading ASR model %s", model_id)
        try:
            engine = await self._loader(model_id, on_progress)
        except Exception:
            if generation == self._load_generation:
                logger.exception("Error loading ASR model %s", model_id)
                raise
            logger.info("Superseded load of %s failed; ignoring", model_id)
            return False

        if generation != self._load_generation:
            logger.info("Discarding superseded model %s", model_id)
            return False

        self._handle = EngineHandle(engine)
        self.model_id = model_id
        logger.info("ASR model ready: %s", model_id)
        return True

    async def _settle_loads(self) -> None:
        # A newer load may start while we wait, so loop until none is pending
        while (task := self._load_task) is not None and not task.done():
            await asyncio.wait([task])

    async def _wait_for_model(self) -> EngineHandle:
        await self._settle_loads()
        if self._handle is None or not self._handle.engine.is_loaded():
            raise EngineNotReady("Whisper model not loaded")
        return self._handle

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._transcribing:
            raise TranscriptionInProgress("A transcription is already running")
        self._transcribing = True
        try:
            yield
        finally:
            self._transcribing = False

    # --------------------
    # Media
    # --------------------

    def reset_media(self) -> None:
        """Clear per-video results when a new video is selected."""
        self.transcript = ""
        self.segments = []
        self.tree = empty_mind_tree()

    async def transcribe_audio(
        self,
        buffer: AudioBuffer,
        on_progress: ProgressCallback | None = None,
        on_partial_line: PartialLineCallback | None = None,
    ) -> str:
        """Resample *buffer* and transcribe it with the loaded engine.

        On failure the lines produced so far stay in ``self.transcript``.

        Raises:
            TranscriptionInProgress: If this session is already transcribing.
            EngineNotReady: If no model is loaded once pending loads settle.
            InvalidAudioInput: If the buffer is empty or has a bad rate.
            TranscriptionFailed: If a chunk fails.
        """
        with self._exclusive():
            handle = await self._wait_for_model()
            return await self._transcribe(handle, buffer, on_progress, on_partial_line)

    async def transcribe_video(
        self,
        video_path: str,
        on_progress: ProgressCallback | None = None,
        on_partial_line: PartialLineCallback | None = None,
    ) -> str:
        """Extract the audio track of *video_path* and transcribe it."""
        with self._exclusive():
            handle = await self._wait_for_model()
            buffer = await asyncio.to_thread(extract_audio, video_path)
            return await self._transcribe(handle, buffer, on_progress, on_partial_line)

    async def _transcribe(
        self,
        handle: EngineHandle,
        buffer: AudioBuffer,
        on_progress: ProgressCallback | None,
        on_partial_line: PartialLineCallback | None,
    ) -> str:
        resampled = resample(buffer)
        self.reset_media()

        def _partial(text: str) -> None:
            self.transcript = text
            if on_partial_line:
                on_partial_line(text)

        try:
            self.transcript = await transcribe(
                resampled,
                handle,
                on_progress=on_progress,
                on_partial_line=_partial,
                chunk_timeout=self._chunk_timeout,
            )
        except TranscriptionFailed as exc:
            self.transcript = exc.partial_transcript
            raise
        return self.transcript

    # --------------------
    # Topics
    # --------------------

    async def analyze(self, client: TopicAnalysisClient) -> MindTree:
        """Send the transcript for topic analysis and build the mind-map tree."""
        await self._settle_loads()
        self.segments = await client.analyze(self.transcript)
        self.tree = build_mind_tree(self.segments)
        return self.tree

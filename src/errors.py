"""Typed errors surfaced by the transcription and topic-map pipeline."""

from __future__ import annotations


class VideoTopicsError(Exception):
    """Base class for all pipeline errors."""


class InvalidAudioInput(VideoTopicsError):
    """Source audio is empty or has a non-positive sample rate."""


class AudioExtractionError(InvalidAudioInput):
    """The audio track could not be decoded from the media file."""


class EngineNotReady(VideoTopicsError):
    """Transcription was requested before an ASR model finished loading."""


class TranscriptionInProgress(VideoTopicsError):
    """A transcription is already running for this session."""


class TranscriptionFailed(VideoTopicsError):
    """A chunk invocation failed; the remaining chunks were not processed.

    Attributes:
        cause: The exception raised by the engine.
        chunk_index: Zero-based index of the failing chunk.
        partial_transcript: Lines produced before the failure.
    """

    def __init__(
        self,
        cause: BaseException,
        chunk_index: int | None = None,
        partial_transcript: str = "",
    ) -> None:
        super().__init__(f"Transcription failed: {cause}")
        self.cause = cause
        self.chunk_index = chunk_index
        self.partial_transcript = partial_transcript


class InvalidSegment(VideoTopicsError):
    """A topic segment from the analysis service is malformed."""


class TopicAnalysisFailed(VideoTopicsError):
    """The topic-analysis service could not be reached or returned an error."""

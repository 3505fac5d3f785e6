"""HTTP client for the topic-analysis service."""

from __future__ import annotations

import logging

import httpx

from src.errors import InvalidSegment, TopicAnalysisFailed
from src.topics.models import TopicSegment

logger = logging.getLogger(__name__)


class TopicAnalysisClient:
    """Submits a transcript to ``POST /analyze`` and returns its segments."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def analyze(self, transcript: str) -> list[TopicSegment]:
        """Return the ordered topic segments for *transcript*.

        Raises:
            TopicAnalysisFailed: On connection errors or a non-2xx response.
            InvalidSegment: If the response body is not ``{"segments": [...]}``
                or a segment is malformed.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(f"{self._base_url}/analyze", json={"transcript": transcript})
                r.raise_for_status()
        except httpx.HTTPError as e:
            raise TopicAnalysisFailed(f"Failed to analyze topics: {e}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise InvalidSegment(f"Topic service returned invalid JSON: {e}") from e

        raw_segments = data.get("segments") if isinstance(data, dict) else None
        if not isinstance(raw_segments, list):
            raise InvalidSegment("Topic service response has no 'segments' list")

        segments = [TopicSegment.from_dict(raw) for raw in raw_segments]
        logger.info("Received %d topic segments", len(segments))
        return segments

"""Pydantic request/response schemas for the topic-map API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class AnalyzeRequest(BaseModel):
    """Request body for the /analyze endpoint."""

    transcript: str


class TopicSegmentModel(BaseModel):
    """A single topic segment."""

    topic_name: str
    content: list[str] = []


class AnalyzeResponse(BaseModel):
    """Response body for the /analyze endpoint."""

    segments: list[TopicSegmentModel]


class MindmapRequest(BaseModel):
    """Request body for the /api/mindmap endpoint.

    Segments are validated by the tree builder so malformed entries surface
    as ``InvalidSegment`` rather than a generic schema error.
    """

    segments: list[dict[str, Any]] | None = None


class MindmapResponse(BaseModel):
    """jsMind ``node_tree`` document."""

    meta: dict[str, str]
    format: str
    data: dict[str, Any]

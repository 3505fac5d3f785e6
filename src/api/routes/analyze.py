"""Topic analysis endpoint — segments a transcript with Claude."""

from __future__ import annotations

import asyncio
import json

import anthropic
from fastapi import APIRouter, HTTPException

from src.api.models import AnalyzeRequest, AnalyzeResponse, TopicSegmentModel
from src.config import settings
from src.errors import InvalidSegment
from src.topics.analyzer import segment_transcript

router = APIRouter()


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest) -> AnalyzeResponse:
    """Split a timestamped transcript into ordered topic segments."""
    if not settings.anthropic_api_key:
        raise HTTPException(
            status_code=501,
            detail="Topic analysis requires ANTHROPIC_API_KEY — not configured.",
        )
    if not request.transcript.strip():
        return AnalyzeResponse(segments=[])

    # Anthropic SDK is synchronous; run it off the event loop.
    try:
        segments = await asyncio.to_thread(segment_transcript, request.transcript)
    except (InvalidSegment, json.JSONDecodeError) as e:
        raise HTTPException(
            status_code=502,
            detail=f"Claude returned malformed segments: {e}",
        ) from e
    except anthropic.APIError as e:
        raise HTTPException(
            status_code=503,
            detail=f"Topic analysis service unavailable: {e}",
        ) from e

    return AnalyzeResponse(
        segments=[TopicSegmentModel(topic_name=s.topic_name, content=s.content) for s in segments]
    )

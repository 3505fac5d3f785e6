"""Claude-powered topic segmentation of a timestamped transcript."""

from __future__ import annotations

import json
import logging
from typing import Any

from anthropic import Anthropic

from src.config import settings
from src.topics.models import TopicSegment

logger = logging.getLogger(__name__)

# Tool definition for Claude structured output
SEGMENTATION_TOOL: dict[str, Any] = {
    "name": "store_topic_segments",
    "description": (
        "Store the topic segments of a video transcript, in transcript order. "
        "Call this once with every segment."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "segments": {
                "type": "array",
                "description": "Consecutive stretches of the transcript about one topic.",
                "items": {
                    "type": "object",
                    "properties": {
                        "topic_name": {
                            "type": "string",
                            "description": (
                                "Short topic label, optionally prefixed with a "
                                "category, e.g. 'Finance: Quarterly budget'."
                            ),
                        },
                        "content": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Transcript sentences belonging to this segment.",
                        },
                    },
                    "required": ["topic_name", "content"],
                },
            },
        },
        "required": ["segments"],
    },
}

SYSTEM_PROMPT = (
    "You segment video transcripts by topic. The transcript is a list of lines "
    "prefixed with [HH:MM:SS] timestamps.\n\n"
    "Split it into consecutive segments, each about a single topic. A topic may "
    "recur later in the video; reuse the exact same topic_name when it does.\n\n"
    "Use the store_topic_segments tool to return your results."
)


def segment_transcript(transcript: str) -> list[TopicSegment]:
    """Split a transcript into ordered topic segments using Claude.

    Args:
        transcript: The timestamped transcript text.

    Returns:
        Segments in transcript order.
    """
    client = Anthropic(api_key=settings.anthropic_api_key)

    response = client.messages.create(
        model=settings.llm_model,
        max_tokens=4096,
        system=SYSTEM_PROMPT,
        tools=[SEGMENTATION_TOOL],
        tool_choice={"type": "tool", "name": "store_topic_segments"},
        messages=[
            {
                "role": "user",
                "content": f"Segment this video transcript by topic:\n\n{transcript}",
            }
        ],
    )

    segments = _parse_tool_response(response)
    logger.info("Segmented transcript into %d segments", len(segments))
    return segments


def _parse_tool_response(response: Any) -> list[TopicSegment]:
    """Parse the Claude tool_use response into TopicSegment list."""
    segments: list[TopicSegment] = []

    for block in response.content:
        if block.type != "tool_use":
            continue
        if block.name != "store_topic_segments":
            continue

        data = block.input
        if isinstance(data, str):
            data = json.loads(data)

        for raw in data.get("segments", []):
            segments.append(TopicSegment.from_dict(raw))

    return segments

"""Tests for the topic-analysis client and Claude response parsing (no external APIs)."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.errors import InvalidSegment, TopicAnalysisFailed
from src.topics.analyzer import _parse_tool_response, segment_transcript
from src.topics.client import TopicAnalysisClient

# ---------------------------------------------------------------------------
# Claude tool_use parsing
# ---------------------------------------------------------------------------


def _tool_response(payload: object) -> MagicMock:
    mock_response = MagicMock()
    tool_block = MagicMock()
    tool_block.type = "tool_use"
    tool_block.name = "store_topic_segments"
    tool_block.input = payload
    mock_response.content = [tool_block]
    return mock_response


class TestParseToolResponse:
    def test_parse_valid_response(self) -> None:
        response = _tool_response(
            {
                "segments": [
                    {"topic_name": "Intro: Welcome", "content": ["Hi all.", "Today..."]},
                    {"topic_name": "Budget", "content": ["The numbers."]},
                ]
            }
        )
        segments = _parse_tool_response(response)
        assert [s.topic_name for s in segments] == ["Intro: Welcome", "Budget"]
        assert segments[0].content == ["Hi all.", "Today..."]

    def test_parse_string_input(self) -> None:
        response = _tool_response(json.dumps({"segments": [{"topic_name": "A", "content": []}]}))
        assert len(_parse_tool_response(response)) == 1

    def test_parse_ignores_non_tool_blocks(self) -> None:
        mock_response = MagicMock()
        text_block = MagicMock()
        text_block.type = "text"
        mock_response.content = [text_block]
        assert _parse_tool_response(mock_response) == []

    def test_missing_topic_name_raises(self) -> None:
        response = _tool_response({"segments": [{"content": ["orphan"]}]})
        with pytest.raises(InvalidSegment):
            _parse_tool_response(response)


class TestSegmentTranscript:
    def test_calls_claude_with_forced_tool(self) -> None:
        response = _tool_response({"segments": [{"topic_name": "A", "content": ["x"]}]})
        with patch("src.topics.analyzer.Anthropic") as mock_cls:
            mock_cls.return_value.messages.create.return_value = response
            segments = segment_transcript("[00:00:00] x\n")

        kwargs = mock_cls.return_value.messages.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "store_topic_segments"}
        assert "[00:00:00] x" in kwargs["messages"][0]["content"]
        assert segments[0].topic_name == "A"


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


def _client(handler) -> TopicAnalysisClient:
    return TopicAnalysisClient("http://topics.test/", transport=httpx.MockTransport(handler))


class TestTopicAnalysisClient:
    def test_posts_transcript_and_parses_segments(self) -> None:
        seen: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"segments": [{"topic_name": "Cat: X", "content": ["hello"]}]}
            )

        segments = asyncio.run(_client(handler).analyze("[00:00:00] hello\n"))

        assert seen["url"] == "http://topics.test/analyze"
        assert seen["body"] == {"transcript": "[00:00:00] hello\n"}
        assert segments[0].topic_name == "Cat: X"
        assert segments[0].content == ["hello"]

    def test_http_error_raises_analysis_failed(self) -> None:
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(TopicAnalysisFailed, match="Failed to analyze topics"):
            asyncio.run(client.analyze("t"))

    def test_connection_error_raises_analysis_failed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TopicAnalysisFailed):
            asyncio.run(_client(handler).analyze("t"))

    def test_missing_segments_key_raises_invalid_segment(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"topics": []}))
        with pytest.raises(InvalidSegment):
            asyncio.run(client.analyze("t"))

    def test_malformed_segment_raises_invalid_segment(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"segments": [{"content": []}]}))
        with pytest.raises(InvalidSegment):
            asyncio.run(client.analyze("t"))

    def test_non_json_body_raises_invalid_segment(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(InvalidSegment):
            asyncio.run(client.analyze("t"))

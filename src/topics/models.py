"""Data models for topic segments and the mind-map tree."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from src.errors import InvalidSegment


class Direction(StrEnum):
    """Side of the root a node is drawn on."""

    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class TopicSegment:
    """One segment from the topic-analysis service."""

    topic_name: str
    content: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TopicSegment:
        """Validate a raw ``{topic_name, content}`` mapping.

        Raises:
            InvalidSegment: If ``topic_name`` is missing or not a string, or
                ``content`` is not a list.
        """
        if not isinstance(data, Mapping):
            raise InvalidSegment(f"Segment must be an object, got {type(data).__name__}")
        topic_name = data.get("topic_name")
        if not isinstance(topic_name, str):
            raise InvalidSegment("Segment is missing 'topic_name'")
        content = data.get("content") or []
        if not isinstance(content, list):
            raise InvalidSegment(f"Segment {topic_name!r} has non-list 'content'")
        return cls(topic_name=topic_name, content=content)


@dataclass
class MindNode:
    """A node in the jsMind ``node_tree`` format."""

    id: str
    topic: str
    direction: Direction
    expanded: bool | None = None
    children: list[MindNode] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "topic": self.topic,
            "direction": self.direction.value,
        }
        if self.expanded is not None:
            data["expanded"] = self.expanded
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class MindTree:
    """Root/topic/content tree handed to the diagram renderer."""

    root: MindNode
    meta: dict[str, str] = field(
        default_factory=lambda: {"name": "Topics", "author": "Video Analyzer", "version": "1.0"}
    )
    format: str = "node_tree"

    @property
    def topics(self) -> list[MindNode]:
        return self.root.children or []

    def to_dict(self) -> dict[str, Any]:
        return {"meta": dict(self.meta), "format": self.format, "data": self.root.to_dict()}

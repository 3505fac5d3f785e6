"""Build the two-level mind-map tree from ordered topic segments."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from src.errors import InvalidSegment
from src.topics.models import Direction, MindNode, MindTree, TopicSegment

ROOT_ID = "root"
ROOT_TITLE = "Video Topics"
PREVIEW_LENGTH = 50
ELLIPSIS = "..."


def empty_mind_tree() -> MindTree:
    """Return the tree shown before any topics exist."""
    return MindTree(root=MindNode(id=ROOT_ID, topic=ROOT_TITLE, direction=Direction.CENTER, children=[]))


def canonical_topic_name(topic_name: str) -> str:
    """Strip an optional ``"Category:"`` prefix from a topic label.

    ``"Finance: Budget"`` -> ``"Budget"``. Labels without a colon, or with
    nothing after it, are returned whole (trimmed).
    """
    _, sep, rest = topic_name.partition(":")
    if sep and rest.strip():
        return rest.strip()
    return topic_name.strip()


def direction_for(index: int, total: int) -> Direction:
    """First ``ceil(total / 2)`` topics (1-based *index*) go right, the rest left."""
    return Direction.RIGHT if index <= math.ceil(total / 2) else Direction.LEFT


def content_preview(content: Sequence[Any]) -> str:
    """First content item cut to 50 characters, always followed by ``...``."""
    first = content[0] if content else None
    if not first:
        return ELLIPSIS
    return str(first)[:PREVIEW_LENGTH] + ELLIPSIS


def _coerce(segment: TopicSegment | Mapping[str, Any]) -> TopicSegment:
    if isinstance(segment, TopicSegment):
        if not isinstance(segment.topic_name, str):
            raise InvalidSegment("Segment is missing 'topic_name'")
        return segment
    return TopicSegment.from_dict(segment)


def group_by_topic(
    segments: Sequence[TopicSegment | Mapping[str, Any]],
) -> dict[str, list[TopicSegment]]:
    """Group segments by canonical name, keeping first-seen key order."""
    groups: dict[str, list[TopicSegment]] = {}
    for raw in segments:
        segment = _coerce(raw)
        groups.setdefault(canonical_topic_name(segment.topic_name), []).append(segment)
    return groups


def build_mind_tree(segments: Sequence[TopicSegment | Mapping[str, Any]] | None) -> MindTree:
    """Build the root/topic/content tree for *segments*.

    Topic nodes appear in first-seen order of their canonical names and get
    ids ``topic_<n>`` (1-based). Each segment in a group becomes a content node
    ``content_<n>_<j>`` (0-based within the group) inheriting its topic's
    direction.

    Args:
        segments: Ordered segments from the topic-analysis service, as
            :class:`TopicSegment` instances or raw mappings.

    Returns:
        The populated tree, or :func:`empty_mind_tree` for empty input.

    Raises:
        InvalidSegment: If a segment has no ``topic_name``.
    """
    if not segments:
        return empty_mind_tree()

    groups = group_by_topic(segments)
    total = len(groups)
    topic_nodes: list[MindNode] = []

    for node_id, (name, group) in enumerate(groups.items(), start=1):
        direction = direction_for(node_id, total)
        children = [
            MindNode(
                id=f"content_{node_id}_{j}",
                topic=content_preview(segment.content),
                direction=direction,
                expanded=False,
            )
            for j, segment in enumerate(group)
        ]
        topic_nodes.append(
            MindNode(
                id=f"topic_{node_id}",
                topic=name,
                direction=direction,
                expanded=False,
                children=children,
            )
        )

    root = MindNode(
        id=ROOT_ID, topic=ROOT_TITLE, direction=Direction.CENTER, expanded=True, children=topic_nodes
    )
    return MindTree(root=root)

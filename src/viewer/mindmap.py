"""MindmapView — ties the tree builder, a diagram renderer and the viewport."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from src.topics.models import MindTree, TopicSegment
from src.topics.tree_builder import build_mind_tree, empty_mind_tree
from src.viewer.viewport import Surface, ViewportController

logger = logging.getLogger(__name__)


class DiagramRenderer(ABC):
    @abstractmethod
    def show(self, tree: MindTree) -> None:
        """Render *tree*, replacing whatever was shown before."""

    @abstractmethod
    def resize(self) -> None:
        """Re-layout after the container changed size."""


class MindmapView:
    """Shows topic trees and resets the pan/zoom view for every new tree."""

    def __init__(self, renderer: DiagramRenderer, surface: Surface | None = None) -> None:
        self._renderer = renderer
        self.viewport = ViewportController(surface)
        self.tree = empty_mind_tree()
        self._renderer.show(self.tree)

    def update(self, segments: Sequence[TopicSegment | Mapping[str, Any]] | None) -> MindTree:
        self.tree = build_mind_tree(segments)
        self._renderer.show(self.tree)
        self.reset_view()
        logger.info("Mind map updated: %d topics", len(self.tree.topics))
        return self.tree

    def reset_view(self) -> None:
        self._renderer.resize()
        self.viewport.reset()

"""Mind-map endpoint: topic segments -> jsMind node tree."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from src.api.models import MindmapRequest, MindmapResponse
from src.errors import InvalidSegment
from src.topics.tree_builder import build_mind_tree

router = APIRouter()


@router.post("/api/mindmap", response_model=MindmapResponse)
async def mindmap(request: MindmapRequest) -> MindmapResponse:
    """Build the two-level topic tree for the given segments."""
    try:
        tree = build_mind_tree(request.segments)
    except InvalidSegment as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return MindmapResponse(**tree.to_dict())

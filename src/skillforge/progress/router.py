"""Skill-tree API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from skillforge.auth.dependencies import get_current_user_id
from skillforge.dependencies import get_graph, get_tracker
from skillforge.progress.tracker import SkillProgressTracker
from skillforge.topics.graph import TopicGraph

router = APIRouter(prefix="/api/v1/skill-tree", tags=["Skill Tree"])


@router.get("")
async def get_skill_tree(
    user_id: str = Depends(get_current_user_id),
    tracker: SkillProgressTracker = Depends(get_tracker),
) -> dict:
    """Every branch and topic with the user's mastery, plus the suggested focus."""
    return await tracker.skill_tree(user_id)


@router.get("/topics/{topic_id}")
async def get_topic(
    topic_id: str,
    user_id: str = Depends(get_current_user_id),
    tracker: SkillProgressTracker = Depends(get_tracker),
    graph: TopicGraph = Depends(get_graph),
) -> dict:
    """One topic with progress, its prerequisites and the topics it unlocks."""
    topic = graph.require(topic_id)
    entry = await tracker.topic_view(user_id, topic)
    branch = graph.get_branch(topic.branch_id)
    entry["branch_name"] = branch.name if branch else ""
    entry["branch_name_he"] = branch.name_he if branch else ""
    entry["keywords"] = list(topic.keywords)
    entry["unlocks"] = [t.id for t in graph.dependents(topic.id)]
    return entry

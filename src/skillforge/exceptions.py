"""Domain exceptions."""

from __future__ import annotations


class SkillForgeError(Exception):
    """Base class for engine errors."""


class UnknownTopicError(SkillForgeError):
    """A topic id is not part of the topic graph."""

    def __init__(self, topic_id: str) -> None:
        super().__init__(f"Topic not found: {topic_id}")
        self.topic_id = topic_id


class ContentGenerationError(SkillForgeError):
    """The content generator failed or returned an unusable payload."""


class ImageAnalysisError(SkillForgeError):
    """The image analyzer failed or returned an unusable payload."""

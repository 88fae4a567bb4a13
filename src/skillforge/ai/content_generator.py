"""Content generator client.

The generator is an external service that writes a fresh problem for a
(topic, difficulty, locale) triple. Retries and fallbacks are the resolver's
job; a client only makes one attempt and raises on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from skillforge.exceptions import ContentGenerationError

logger = structlog.get_logger()


class GeneratedQuestion(BaseModel):
    question_text: str = Field(min_length=1)
    question_text_he: str = ""
    question_latex: str | None = None
    correct_answer: str = Field(min_length=1)
    answer_type: str = "expression"
    solution_steps: list[str] = Field(default_factory=list)
    solution_steps_he: list[str] = Field(default_factory=list)
    hint: str | None = None
    hint_he: str | None = None
    estimated_minutes: int = Field(default=3, ge=1, le=10)


class ContentGenerator(ABC):
    """Abstract base class for content generators."""

    @abstractmethod
    async def generate(self, topic_id: str, difficulty: str, locale: str = "en") -> GeneratedQuestion:
        """Generate one problem. Raises ContentGenerationError on failure."""
        ...


class HttpContentGenerator(ContentGenerator):
    """Calls a generation endpoint over HTTP and validates the payload."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    async def generate(self, topic_id: str, difficulty: str, locale: str = "en") -> GeneratedQuestion:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {"topic_id": topic_id, "difficulty": difficulty, "locale": locale}

        try:
            if self._client is not None:
                response = await self._client.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            question = GeneratedQuestion.model_validate(response.json())
        except httpx.HTTPError as e:
            raise ContentGenerationError(f"Generator request failed: {e}") from e
        except (ValidationError, ValueError) as e:
            raise ContentGenerationError(f"Generator returned an invalid payload: {e}") from e

        logger.debug("question_generated", topic_id=topic_id, difficulty=difficulty, locale=locale)
        return question

"""Image analyzer client for handwritten answers."""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from skillforge.exceptions import ImageAnalysisError

logger = structlog.get_logger()

UNAVAILABLE_FEEDBACK = "Image analysis not available. Please enter your answer manually."
FAILED_FEEDBACK = "Could not analyze image. Please try again or enter your answer manually."


class ImageAnalysis(BaseModel):
    extracted_answer: str | None = None
    work_shown: bool = False
    is_correct: bool | None = None
    feedback: str = ""
    steps_identified: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @classmethod
    def undetermined(cls, feedback: str) -> ImageAnalysis:
        return cls(is_correct=None, feedback=feedback)


def detailed_feedback(analysis: ImageAnalysis) -> str:
    """One-paragraph feedback built from an analysis."""
    if analysis.is_correct is True:
        parts = ["Great job! Your answer is correct."]
    elif analysis.is_correct is False:
        parts = ["Your answer isn't quite right, but keep trying!"]
    else:
        parts = ["I couldn't clearly determine your final answer."]

    if analysis.work_shown:
        parts.append("Good work showing your steps!")
    else:
        parts.append("Try to show your work - it helps catch errors.")
    if analysis.errors:
        parts.append(f"Watch out for: {analysis.errors[0]}")
    if analysis.suggestions:
        parts.append(f"Tip: {analysis.suggestions[0]}")
    return " ".join(parts)


class ImageAnalyzer(ABC):
    """Abstract base class for image analyzers."""

    @abstractmethod
    async def analyze(
        self,
        image_ref: str,
        question_text: str,
        correct_answer: str,
        locale: str = "en",
    ) -> ImageAnalysis:
        """Analyze an uploaded answer. Raises ImageAnalysisError on failure."""
        ...


class HttpImageAnalyzer(ImageAnalyzer):
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

    async def analyze(
        self,
        image_ref: str,
        question_text: str,
        correct_answer: str,
        locale: str = "en",
    ) -> ImageAnalysis:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {
            "image_url": image_ref,
            "question_text": question_text,
            "correct_answer": correct_answer,
            "locale": locale,
        }

        try:
            if self._client is not None:
                response = await self._client.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return ImageAnalysis.model_validate(response.json())
        except httpx.HTTPError as e:
            raise ImageAnalysisError(f"Image analyzer request failed: {e}") from e
        except (ValidationError, ValueError) as e:
            raise ImageAnalysisError(f"Image analyzer returned an invalid payload: {e}") from e


async def analyze_image_answer(
    analyzer: ImageAnalyzer | None,
    image_ref: str,
    question_text: str,
    correct_answer: str,
    locale: str = "en",
) -> ImageAnalysis:
    """Analyze an image answer, degrading to an undetermined result."""
    if analyzer is None:
        return ImageAnalysis.undetermined(UNAVAILABLE_FEEDBACK)
    try:
        analysis = await analyzer.analyze(image_ref, question_text, correct_answer, locale)
    except ImageAnalysisError:
        logger.warning("image_analysis_failed", image_ref=image_ref, exc_info=True)
        return ImageAnalysis.undetermined(FAILED_FEEDBACK)
    if not analysis.feedback:
        analysis = analysis.model_copy(update={"feedback": detailed_feedback(analysis)})
    return analysis

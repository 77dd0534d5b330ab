import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests

from appraze.core.config import settings
from appraze.core.exceptions import GenerationError
from appraze.core.prompts import (
    REVIEW_ADDITIONAL_CONTEXT_TEMPLATE,
    REVIEW_RATING_LINE_TEMPLATE,
    REVIEW_WRITER_SYSTEM,
    REVIEW_WRITER_USER_TEMPLATE,
    get_prompt,
)

logger = logging.getLogger(__name__)

RATING_LABELS = {
    "1": "Unsatisfactory",
    "2": "Needs Improvement",
    "3": "Meets Expectations",
    "4": "Exceeds Expectations",
    "5": "Exceptional",
}


def rating_label(code: Optional[str]) -> str:
    """Map a rating code to its label; anything unmapped yields ''."""
    if code is None:
        return ""
    return RATING_LABELS.get(str(code).strip(), "")


def format_bullets(text: Optional[str]) -> List[str]:
    """One '- ' bullet per non-blank line."""
    return [f"- {line.strip()}" for line in (text or "").split("\n") if line.strip()]


@dataclass
class EmployeeSnapshot:
    name: str
    position: Optional[str] = None
    department: Optional[str] = None


@dataclass
class ReviewGenerationParams:
    employee: EmployeeSnapshot
    review_period: str
    reviewer_name: str
    strengths: str
    improvements: str
    tone_preference: str
    overall_rating: Optional[str] = None
    additional_comments: Optional[str] = None


def build_review_messages(params: ReviewGenerationParams) -> List[Dict[str, str]]:
    label = rating_label(params.overall_rating)
    user_prompt = get_prompt(
        REVIEW_WRITER_USER_TEMPLATE,
        employee_name=params.employee.name,
        position=params.employee.position or "",
        department=params.employee.department or "",
        review_period=params.review_period,
        reviewer_name=params.reviewer_name,
        strengths="\n".join(format_bullets(params.strengths)),
        improvements="\n".join(format_bullets(params.improvements)),
        tone_preference=params.tone_preference,
        rating_line=get_prompt(REVIEW_RATING_LINE_TEMPLATE, rating_label=label) if label else "",
        additional_context=(
            get_prompt(REVIEW_ADDITIONAL_CONTEXT_TEMPLATE, additional_comments=params.additional_comments)
            if params.additional_comments else ""
        ),
    )
    return [
        {"role": "system", "content": REVIEW_WRITER_SYSTEM},
        {"role": "user", "content": user_prompt},
    ]


class GenerationClient:
    """
    Single request/response chat-completion client.
    No retry and no streaming: one POST per call.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._api_key = api_key
        self.model_name = model_name or settings.ai.model_name
        self.api_url = api_url or settings.ai.api_url
        self.timeout = timeout if timeout is not None else settings.ai.request_timeout

    @property
    def api_key(self) -> Optional[str]:
        # Resolved per call so a missing key fails the request, not startup
        return self._api_key or settings.ai.openai_api_key

    def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Call the chat-completions endpoint with the specified messages.

        Returns:
            str: content of the first returned choice

        Raises:
            GenerationError: missing API key, transport failure, or non-success
                status (the provider's raw error body is embedded in the message).
        """
        api_key = self.api_key
        if not api_key:
            raise GenerationError("OpenAI API key is not defined in environment variables")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model_name,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        logger.info(f"Calling AI Model: {self.model_name}")
        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error calling generation API: {e}")
            raise GenerationError(f"AI service error: {e}") from e

        if not response.ok:
            logger.error(f"Generation API returned {response.status_code}")
            raise GenerationError(
                f"OpenAI API error: {response.text}",
                details={"status_code": response.status_code},
            )

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected generation API response shape: {e}")
            raise GenerationError("AI service returned an unexpected response.") from e

    def generate_review(self, params: ReviewGenerationParams) -> str:
        """Generate a performance review draft in Markdown."""
        return self.complete(
            build_review_messages(params),
            temperature=settings.ai.temperature,
            max_tokens=settings.ai.max_tokens,
        )

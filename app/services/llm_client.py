"""OpenAI adapter for the AI-backed analysis stages.

Wraps the Chat Completions API in JSON mode. Every call returns an
``LLMSuccess`` or ``LLMFailure``; callers choose the heuristic path on
failure instead of catching exceptions.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    OpenAI,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Errors that are safe to retry (transient)
RETRYABLE_ERRORS = (
    RateLimitError,
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
)


@dataclass(frozen=True, slots=True)
class LLMSuccess:
    """Parsed JSON object returned by the model."""

    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LLMFailure:
    """Any call, transport or parse failure."""

    error: str


LLMResult = Union[LLMSuccess, LLMFailure]


class LLMResponseError(RuntimeError):
    """Raised internally when a response cannot be used."""

    pass


def truncate_text(text: str, max_chars: int) -> str:
    """Cut text to max_chars, marking the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


class LLMClient:
    """Lifecycle-scoped JSON completion client.

    Created once at application startup and passed to the segmenter,
    analyzer and financial extractor.
    """

    def __init__(
        self,
        client: OpenAI,
        *,
        model: str = "gpt-4o",
        temperature: float = 0.1,
        max_retries: int = 3,
        max_chars: int = 15000,
        backoff_multiplier: float = 1.0,
    ):
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_retries = max_retries
        self.max_chars = max_chars
        self._backoff_multiplier = backoff_multiplier

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["LLMClient"]:
        """Build a client from settings, or None when no API key is configured."""
        if not settings.OPENAI_API_KEY:
            return None
        return cls(
            OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.LLM_TIMEOUT_S),
            model=settings.MODEL_NAME,
            temperature=settings.LLM_TEMPERATURE,
            max_retries=settings.LLM_MAX_RETRIES,
            max_chars=settings.LLM_MAX_CHARS,
        )

    def _make_retry_decorator(self):
        return retry(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self._backoff_multiplier, min=0, max=60),
            reraise=True,
        )

    def _call(self, system: str, user: str) -> dict[str, Any]:
        response = self._client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content
        if not content:
            raise LLMResponseError("Empty response from LLM")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LLMResponseError(f"Invalid JSON response: {e}")

        if not isinstance(data, dict):
            raise LLMResponseError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def complete_json(self, system: str, user: str) -> LLMResult:
        """Send one system + user exchange and parse the JSON object reply.

        Transient API errors are retried with exponential backoff; everything
        else (including exhausted retries) becomes an LLMFailure.
        """
        retryable_call = self._make_retry_decorator()(self._call)

        try:
            return LLMSuccess(data=retryable_call(system, user))
        except RETRYABLE_ERRORS as e:
            error = f"API error after {self.max_retries} retries: {e}"
        except (AuthenticationError, BadRequestError) as e:
            error = f"Non-retryable API error: {e}"
        except LLMResponseError as e:
            error = str(e)
        except Exception as e:
            # Catch-all for unexpected errors
            error = f"Unexpected error: {e}"

        logger.warning("LLM call failed: %s", error)
        return LLMFailure(error=error)


__all__ = [
    "LLMClient",
    "LLMFailure",
    "LLMResult",
    "LLMSuccess",
    "RETRYABLE_ERRORS",
    "truncate_text",
]

"""Tests for the OpenAI JSON completion client."""

from unittest.mock import MagicMock, Mock

from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    InternalServerError,
    RateLimitError,
)

from app.core.config import Settings
from app.services.llm_client import LLMClient, LLMFailure, LLMSuccess, truncate_text


def rate_limit_error():
    return RateLimitError(message="Rate limited", response=Mock(status_code=429), body=None)


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("short", 10) == "short"

    def test_exact_length_unchanged(self):
        assert truncate_text("x" * 10, 10) == "x" * 10

    def test_long_text_marked(self):
        assert truncate_text("x" * 20, 10) == "x" * 10 + "..."


class TestFromSettings:
    def test_no_key_disables_ai(self):
        assert LLMClient.from_settings(Settings(OPENAI_API_KEY="")) is None

    def test_builds_client(self):
        llm = LLMClient.from_settings(
            Settings(OPENAI_API_KEY="sk-test", MODEL_NAME="gpt-4o-mini", LLM_MAX_CHARS=500)
        )
        assert llm is not None
        assert llm.model == "gpt-4o-mini"
        assert llm.max_chars == 500
        assert llm.max_retries == 3


class TestCompleteJson:
    def test_success(self, make_llm):
        llm, mock_client = make_llm({"clauses": ["a"]})
        result = llm.complete_json("system prompt", "user text")

        assert result == LLMSuccess(data={"clauses": ["a"]})
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.1
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [
            {"role": "system", "content": "system prompt"},
            {"role": "user", "content": "user text"},
        ]

    def test_empty_content(self, make_llm):
        llm, _ = make_llm(None)
        result = llm.complete_json("s", "u")
        assert isinstance(result, LLMFailure)
        assert result.error == "Empty response from LLM"

    def test_invalid_json(self, make_llm):
        llm, _ = make_llm("{not json")
        result = llm.complete_json("s", "u")
        assert isinstance(result, LLMFailure)
        assert result.error.startswith("Invalid JSON response")

    def test_non_object_json(self, make_llm):
        llm, _ = make_llm(["a", "b"])
        result = llm.complete_json("s", "u")
        assert isinstance(result, LLMFailure)
        assert "Expected a JSON object" in result.error

    def test_retry_then_success(self, make_llm):
        llm, mock_client = make_llm(rate_limit_error(), {"ok": True})
        result = llm.complete_json("s", "u")

        assert result == LLMSuccess(data={"ok": True})
        assert mock_client.chat.completions.create.call_count == 2

    def test_retries_exhausted(self, make_llm):
        llm, mock_client = make_llm(
            APIConnectionError(message="Connection failed", request=Mock()),
            APITimeoutError(request=Mock()),
            InternalServerError(message="Server error", response=Mock(status_code=500), body=None),
        )
        result = llm.complete_json("s", "u")

        assert isinstance(result, LLMFailure)
        assert result.error.startswith("API error after 3 retries")
        assert mock_client.chat.completions.create.call_count == 3

    def test_non_retryable_error(self, make_llm):
        llm, mock_client = make_llm(
            AuthenticationError(message="Invalid API key", response=Mock(status_code=401), body=None)
        )
        result = llm.complete_json("s", "u")

        assert isinstance(result, LLMFailure)
        assert result.error.startswith("Non-retryable API error")
        assert mock_client.chat.completions.create.call_count == 1

    def test_unexpected_error(self):
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = KeyError("choices")
        result = LLMClient(mock_client, backoff_multiplier=0).complete_json("s", "u")

        assert isinstance(result, LLMFailure)
        assert result.error.startswith("Unexpected error")
        assert mock_client.chat.completions.create.call_count == 1

"""Tests for the LLM facade and the OpenAI client retry loop."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from slideavatar.llm import provider
from slideavatar.llm.openai_client import OpenAILLMClient


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


@pytest.mark.parametrize(
    ("model", "expected"),
    [
        ("gpt-4o", ("openai", "gpt-4o")),
        ("openai/gpt-4o-mini", ("openai", "gpt-4o-mini")),
        ("OpenAI/gpt-4o", ("openai", "gpt-4o")),
    ],
)
def test_resolve_provider_and_model(model: str, expected: tuple[str, str]) -> None:
    assert provider._resolve_provider_and_model(model) == expected


def test_resolve_rejects_empty_model() -> None:
    with pytest.raises(ValueError):
        provider._resolve_provider_and_model("openai/")


def test_unsupported_provider() -> None:
    with pytest.raises(ValueError, match="Unsupported provider"):
        provider._get_llm("mystery")


def test_chat_completion_routes_to_client() -> None:
    client = MagicMock()
    client.chat_completion.return_value = "hello"
    with patch.dict(provider._llm_clients, {"openai": client}):
        result = provider.chat_completion(
            [{"role": "user", "content": "hi"}], "openai/gpt-4o", max_tokens=10
        )
    assert result == "hello"
    assert client.chat_completion.call_args.args[1] == "gpt-4o"
    assert client.chat_completion.call_args.kwargs["max_tokens"] == 10


class TestOpenAILLMClient:
    def test_returns_message_content(self):
        sdk = MagicMock()
        sdk.chat.completions.create.return_value = _completion("narration")
        client = OpenAILLMClient(client=sdk)

        result = client.chat_completion(
            [{"role": "user", "content": "hi"}], "gpt-4o", retries=1, temperature=0.5
        )

        assert result == "narration"
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.5

    def test_retries_then_succeeds(self):
        sdk = MagicMock()
        sdk.chat.completions.create.side_effect = [
            RuntimeError("overloaded"),
            _completion("second time"),
        ]
        client = OpenAILLMClient(client=sdk)

        result = client.chat_completion(
            [{"role": "user", "content": "hi"}], "gpt-4o", retries=2, backoff=0
        )

        assert result == "second time"
        assert sdk.chat.completions.create.call_count == 2

    def test_raises_after_last_attempt(self):
        sdk = MagicMock()
        sdk.chat.completions.create.side_effect = RuntimeError("down")
        client = OpenAILLMClient(client=sdk)

        with pytest.raises(RuntimeError, match="down"):
            client.chat_completion(
                [{"role": "user", "content": "hi"}], "gpt-4o", retries=2, backoff=0
            )

    def test_none_content_is_empty_string(self):
        sdk = MagicMock()
        sdk.chat.completions.create.return_value = _completion(None)
        client = OpenAILLMClient(client=sdk)
        assert client.chat_completion([], "gpt-4o", retries=1) == ""

    def test_requires_api_key(self):
        with patch("slideavatar.llm.openai_client.config") as mock_config:
            mock_config.openai_api_key = None
            with pytest.raises(ValueError, match="OPENAI_API_KEY"):
                OpenAILLMClient()

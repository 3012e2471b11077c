"""
Model routing for chat completions.

Models are named ``provider/model`` (``openai/gpt-4o``); a bare model name is
sent to OpenAI. One client per provider is built lazily and reused.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .base import ChatMessages, LLMClient
from .openai_client import OpenAILLMClient

_PROVIDERS: dict[str, Callable[[], LLMClient]] = {"openai": OpenAILLMClient}
_llm_clients: dict[str, LLMClient] = {}


def _get_llm(provider: str | None = None) -> LLMClient:
    name = (provider or "openai").lower()
    client = _llm_clients.get(name)
    if client is None:
        factory = _PROVIDERS.get(name)
        if factory is None:
            raise ValueError(f"Unsupported provider: {name}")
        client = _llm_clients[name] = factory()
    return client


def _resolve_provider_and_model(model: str) -> tuple[str, str]:
    if "/" not in model:
        return "openai", model
    provider, _, name = model.partition("/")
    if not provider or not name:
        raise ValueError(f"Invalid model specification '{model}'")
    return provider.lower(), name


def chat_completion(messages: ChatMessages, model: str, **kwargs: Any) -> str:
    """Route ``messages`` to the provider named in ``model``.

    Keyword arguments (``retries``, ``backoff``, ``timeout`` and any SDK
    options) are passed through to :meth:`LLMClient.chat_completion`.
    """
    provider, name = _resolve_provider_and_model(model)
    return _get_llm(provider).chat_completion(messages, name, **kwargs)

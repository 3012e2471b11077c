"""
OpenAI-backed LLMClient with exponential backoff between attempts.
"""

from __future__ import annotations

import time
from typing import Any

from loguru import logger
from openai import OpenAI

from slideavatar.configs.config import config

from .base import ChatMessages, LLMClient


class OpenAILLMClient(LLMClient):
    def __init__(self, client: OpenAI | None = None) -> None:
        if client is None:
            if not config.openai_api_key:
                raise ValueError("OPENAI_API_KEY is required for OpenAI client")
            # base_url=None keeps the SDK default endpoint
            client = OpenAI(
                api_key=config.openai_api_key, base_url=config.openai_base_url
            )
        self._client = client

    def _create(
        self, model: str, messages: ChatMessages, timeout: float, **kwargs: Any
    ) -> str:
        response = self._client.chat.completions.create(
            model=model,
            messages=[dict(message) for message in messages],  # type: ignore[misc]
            timeout=timeout,
            **kwargs,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def chat_completion(
        self,
        messages: ChatMessages,
        model: str,
        *,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> str:
        attempts = max(1, config.openai_retries if retries is None else retries)
        delay = config.openai_backoff if backoff is None else backoff
        request_timeout = config.openai_timeout if timeout is None else timeout

        attempt = 1
        while True:
            try:
                return self._create(model, messages, request_timeout, **kwargs)
            except Exception as e:
                if attempt >= attempts:
                    logger.error(
                        f"OpenAI request for {model} failed after {attempt} attempts: {e}"
                    )
                    raise
                logger.warning(f"OpenAI request attempt {attempt}/{attempts} failed: {e}")
                time.sleep(delay * 2 ** (attempt - 1))
                attempt += 1

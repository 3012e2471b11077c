"""
Chat-completion interface the narration generator talks to.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from typing import Any, Literal, TypedDict


class ChatMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


ChatMessages = Sequence[ChatMessage]


class LLMClient(abc.ABC):
    @abc.abstractmethod
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
        """Send one chat request and return the first choice's text ("" if none).

        ``retries``, ``backoff`` and ``timeout`` fall back to the client's
        configured defaults when omitted; extra keyword arguments go to the
        vendor SDK unchanged.
        """

"""
Provider-agnostic chat completions used to write slide narration.
"""

from .base import ChatMessage, ChatMessages, LLMClient
from .provider import chat_completion

__all__ = ["ChatMessage", "ChatMessages", "LLMClient", "chat_completion"]

"""
Word-level text helpers shared by narration generation and budget checks.
"""

import re

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str | None) -> str:
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def count_words(text: str | None) -> int:
    cleaned = collapse_whitespace(text)
    return len(cleaned.split(" ")) if cleaned else 0


def truncate_words(text: str | None, limit: int) -> str:
    """Keep at most ``limit`` whitespace-separated words."""
    cleaned = collapse_whitespace(text)
    if not cleaned:
        return ""
    words = cleaned.split(" ")
    if len(words) <= limit:
        return cleaned
    return " ".join(words[:limit])

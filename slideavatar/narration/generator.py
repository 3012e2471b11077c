"""
Narration generation module for SlideAvatar.

Produces one short, word-bounded narration per slide. A failed or empty
generation for one slide falls back to that slide's own text; it never fails
the job.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

from loguru import logger

from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.text import collapse_whitespace, truncate_words
from slideavatar.document.extractor import SlideContent
from slideavatar.llm import chat_completion

from .prompts import build_narration_messages

_QUOTES = "\"'“”‘’"


@dataclass(frozen=True)
class Narration:
    index: int
    speaker_text: str
    source: str = "llm"

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "speaker_text": self.speaker_text,
            "source": self.source,
        }


class NarrationGenerator:
    """Per-slide narration via the LLM facade, sequential unless configured otherwise."""

    def __init__(
        self,
        limits: PipelineLimits,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        max_tokens: int = 80,
        timeout: float = 60.0,
        concurrency: int = 1,
        completion: Callable[..., str] | None = None,
    ) -> None:
        self.limits = limits
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.concurrency = max(1, concurrency)
        self._completion = completion or chat_completion

    def _postprocess(self, text: str) -> str:
        cleaned = collapse_whitespace(text).strip(_QUOTES).strip()
        return truncate_words(cleaned, self.limits.narration_word_limit)

    def fallback_text(self, slide: SlideContent) -> str:
        limit = self.limits.narration_word_limit
        for candidate in (slide.body, slide.title):
            text = truncate_words(candidate, limit)
            if text:
                return text
        return f"Slide {slide.index}"

    async def _generate_one(self, slide: SlideContent, language: str | None) -> Narration:
        messages = build_narration_messages(
            slide, language, self.limits.narration_word_limit
        )
        call = partial(
            self._completion,
            messages,
            self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )
        loop = asyncio.get_running_loop()
        try:
            raw = await asyncio.wait_for(
                loop.run_in_executor(None, call), timeout=self.timeout
            )
            text = self._postprocess(raw or "")
            if text:
                return Narration(index=slide.index, speaker_text=text)
            logger.warning(f"Empty narration for slide {slide.index}, using slide text")
        except asyncio.TimeoutError:
            logger.warning(
                f"Narration for slide {slide.index} timed out after {self.timeout}s, "
                "using slide text"
            )
        except Exception as e:
            logger.warning(
                f"Narration for slide {slide.index} failed, using slide text: {e}"
            )
        return Narration(
            index=slide.index, speaker_text=self.fallback_text(slide), source="fallback"
        )

    async def generate(
        self, slides: Sequence[SlideContent], language: str | None = "en"
    ) -> list[Narration]:
        """Return narrations ordered by slide index."""
        if self.concurrency == 1:
            narrations = []
            for slide in slides:
                narrations.append(await self._generate_one(slide, language))
        else:
            semaphore = asyncio.Semaphore(self.concurrency)

            async def bounded(slide: SlideContent) -> Narration:
                async with semaphore:
                    return await self._generate_one(slide, language)

            narrations = list(await asyncio.gather(*(bounded(s) for s in slides)))

        narrations.sort(key=lambda n: n.index)
        fallbacks = sum(1 for n in narrations if n.source == "fallback")
        logger.info(
            f"Generated {len(narrations)} narrations ({fallbacks} from slide text)"
        )
        return narrations

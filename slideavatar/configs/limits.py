"""
Numeric ceilings shared by every pipeline component.

A single frozen value is built once (usually from :mod:`slideavatar.configs.config`)
and handed to each component's constructor, so tests can run the pipeline with
alternate limits without touching module state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PipelineLimits:
    max_slides: int = 9
    narration_word_limit: int = 40
    scene_seconds: float = 30.0
    words_per_minute: float = 150.0
    max_total_seconds: float = 160.0
    step_timeout: float = 900.0

    def __post_init__(self) -> None:
        if self.max_slides < 1:
            raise ValueError("max_slides must be at least 1")
        if self.narration_word_limit < 1:
            raise ValueError("narration_word_limit must be at least 1")
        if self.words_per_minute <= 0:
            raise ValueError("words_per_minute must be positive")
        if self.scene_seconds <= 0 or self.max_total_seconds <= 0:
            raise ValueError("duration ceilings must be positive")

    @property
    def scene_word_limit(self) -> int:
        """Words that fit in one fixed-length template scene (75 for 30s at 150 wpm)."""
        return math.floor(round(self.scene_seconds / 60 * self.words_per_minute, 6))

    @property
    def max_total_words(self) -> int:
        """Words that fit in the whole video (400 for 160s at 150 wpm)."""
        return math.ceil(round(self.max_total_seconds / 60 * self.words_per_minute, 6))

    def estimate_seconds(self, word_count: int) -> float:
        return word_count / self.words_per_minute * 60

    @classmethod
    def from_config(cls, cfg: Any) -> PipelineLimits:
        return cls(
            max_slides=cfg.max_slides,
            narration_word_limit=cfg.narration_word_limit,
            scene_seconds=cfg.scene_seconds,
            words_per_minute=cfg.words_per_minute,
            max_total_seconds=cfg.max_total_seconds,
            step_timeout=cfg.step_timeout,
        )

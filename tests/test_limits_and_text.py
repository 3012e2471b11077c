"""
Tests for pipeline limits and word helpers.
"""

from types import SimpleNamespace

import pytest

from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.text import collapse_whitespace, count_words, truncate_words


class TestPipelineLimits:
    def test_defaults(self):
        limits = PipelineLimits()
        assert limits.max_slides == 9
        assert limits.narration_word_limit == 40
        assert limits.scene_word_limit == 75
        assert limits.max_total_words == 400
        assert limits.estimate_seconds(150) == pytest.approx(60.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_slides": 0},
            {"narration_word_limit": 0},
            {"words_per_minute": 0},
            {"scene_seconds": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            PipelineLimits(**kwargs)

    def test_from_config(self):
        cfg = SimpleNamespace(
            max_slides=5,
            narration_word_limit=30,
            scene_seconds=20.0,
            words_per_minute=120.0,
            max_total_seconds=100.0,
            step_timeout=60.0,
        )
        limits = PipelineLimits.from_config(cfg)
        assert limits.max_slides == 5
        assert limits.scene_word_limit == 40
        assert limits.max_total_words == 200


class TestTextHelpers:
    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \n b\t\tc ") == "a b c"
        assert collapse_whitespace(None) == ""

    def test_count_words(self):
        assert count_words("one two  three") == 3
        assert count_words("   ") == 0

    def test_truncate_words(self):
        text = " ".join(str(n) for n in range(50))
        truncated = truncate_words(text, 40)
        assert count_words(truncated) == 40
        assert truncated.endswith("39")
        assert truncate_words("short text", 40) == "short text"

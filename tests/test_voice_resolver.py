"""
Unit tests for language to voice resolution.
"""

import json

import pytest

from slideavatar.voice import VoiceResolver, normalize_language_code
from slideavatar.voice.resolver import load_voices_file

SPANISH = "5fbecc8a2585441aab29ca46a5cd9356"
ENGLISH = "77a8b81df32f482f851684c5e2ebb0d2"


@pytest.mark.parametrize(
    ("language", "expected"),
    [
        ("en", "en"),
        ("en-US", "en"),
        ("English", "en"),
        ("pt_BR", "pt"),
        ("fr-CA", "fr"),
        ("xx-YY", "xx"),
        ("", None),
        (None, None),
        (42, None),
    ],
)
def test_normalize_language_code(language, expected) -> None:
    assert normalize_language_code(language) == expected


class TestVoiceResolver:
    def test_resolves_through_full_language_name(self, voice_resolver):
        assert voice_resolver.resolve("es") == SPANISH

    def test_null_short_code_falls_through_to_full_name(self, voice_resolver):
        assert voice_resolver.resolve("en-US") == ENGLISH

    @pytest.mark.parametrize("language", ["xx", "", None, 123])
    def test_unknown_language_uses_default(self, voice_resolver, language):
        assert voice_resolver.resolve(language) == "default-voice"

    def test_custom_loader(self):
        resolver = VoiceResolver(
            "default", loader=lambda: {"default_voices": {"fr": "custom-fr"}}
        )
        assert resolver.resolve("fr-CA") == "custom-fr"
        assert resolver.resolve("de") == "default"

    def test_loader_failure_uses_default(self):
        def broken():
            raise OSError("disk gone")

        resolver = VoiceResolver("default", loader=broken)
        assert resolver.resolve("es") == "default"

    def test_missing_file_uses_default(self, tmp_path):
        resolver = VoiceResolver("default", voices_path=tmp_path / "missing.json")
        assert resolver.resolve("es") == "default"

    def test_table_is_loaded_once(self):
        calls = []

        def loader():
            calls.append(1)
            return {"default_voices": {"es": "v-es"}}

        resolver = VoiceResolver("default", loader=loader)
        resolver.resolve("es")
        resolver.resolve("es-MX")
        assert len(calls) == 1

    def test_empty_default_is_rejected(self):
        with pytest.raises(ValueError):
            VoiceResolver("  ")


def test_load_voices_file_requires_default_voices(tmp_path) -> None:
    path = tmp_path / "voices.json"
    path.write_text(json.dumps({"voices": {}}))
    with pytest.raises(ValueError):
        load_voices_file(path)

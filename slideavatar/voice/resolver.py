"""
Language code to HeyGen voice id resolution.

The voice table is a JSON document of the form
``{"default_voices": {"<alias>": "<voice id>" | null}}`` whose keys may be short
codes (``"en"``) or full language names (``"english"``). A missing table or a
missing entry is never an error: the resolver falls back to its default voice
and logs a warning.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from loguru import logger

BUNDLED_VOICES_PATH = Path(__file__).parent / "heygen_voices.json"

LANGUAGE_ALIASES: dict[str, str] = {
    "en": "en", "en-us": "en", "en-gb": "en", "english": "en", "eng": "en",
    "ar": "ar", "ar-sa": "ar", "ar-eg": "ar", "arabic": "ar", "ara": "ar",
    "he": "he", "he-il": "he", "hebrew": "he", "heb": "he", "iw": "he",
    "ko": "ko", "ko-kr": "ko", "korean": "ko", "kor": "ko",
    "es": "es", "es-es": "es", "es-mx": "es", "spanish": "es", "spa": "es",
    "fr": "fr", "fr-fr": "fr", "french": "fr", "fra": "fr", "fre": "fr",
    "de": "de", "de-de": "de", "german": "de", "ger": "de", "deu": "de",
    "it": "it", "it-it": "it", "italian": "it", "ita": "it",
    "pt": "pt", "pt-pt": "pt", "pt-br": "pt", "portuguese": "pt", "por": "pt",
    "ja": "ja", "ja-jp": "ja", "japanese": "ja", "jpn": "ja",
    "zh": "zh", "zh-cn": "zh", "zh-tw": "zh", "chinese": "zh", "zho": "zh",
    "fa": "fa", "persian": "fa", "farsi": "fa", "fas": "fa",
    "ur": "ur", "urdu": "ur", "urd": "ur",
    "ru": "ru", "ru-ru": "ru", "russian": "ru", "rus": "ru",
    "tr": "tr", "tr-tr": "tr", "turkish": "tr", "tur": "tr",
    "hi": "hi", "hi-in": "hi", "hindi": "hi", "hin": "hi",
}  # fmt: skip

LANGUAGE_FULL_NAMES: dict[str, str] = {
    "en": "english",
    "ar": "arabic",
    "he": "hebrew",
    "ko": "korean",
    "es": "spanish",
    "fr": "french",
    "de": "german",
    "it": "italian",
    "pt": "portuguese",
    "ja": "japanese",
    "zh": "chinese",
    "fa": "persian",
    "ur": "urdu",
    "ru": "russian",
    "tr": "turkish",
    "hi": "hindi",
}


def normalize_language_code(language: Any) -> str | None:
    """Map ``"en-US"``, ``"English"``, ``"eng"``... to a short code.

    Returns ``None`` for non-string or blank input. Unknown languages keep their
    lowercased base code so a table entry for them still matches.
    """
    if not isinstance(language, str) or not language.strip():
        return None
    key = language.strip().lower()
    if key in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[key]
    base = key.replace("_", "-").split("-")[0]
    return LANGUAGE_ALIASES.get(base, base)


def load_voices_file(path: str | Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, Mapping) or not isinstance(
        data.get("default_voices"), Mapping
    ):
        raise ValueError(f"Voice table {path} has no 'default_voices' mapping")
    return dict(data)


class VoiceResolver:
    """Resolve a voice id for a language, falling back to a default voice."""

    def __init__(
        self,
        default_voice_id: str,
        voices_path: str | Path | None = None,
        loader: Callable[[], Mapping[str, Any]] | None = None,
    ) -> None:
        if not isinstance(default_voice_id, str) or not default_voice_id.strip():
            raise ValueError("default_voice_id must be a non-empty string")
        self.default_voice_id = default_voice_id
        self.voices_path = Path(voices_path) if voices_path else BUNDLED_VOICES_PATH
        self._loader = loader
        self._voices: dict[str, str | None] | None = None

    def _load_voices(self) -> dict[str, str | None]:
        if self._voices is not None:
            return self._voices
        try:
            data = self._loader() if self._loader else load_voices_file(self.voices_path)
            voices = data.get("default_voices") if isinstance(data, Mapping) else None
            if not isinstance(voices, Mapping):
                raise ValueError("voice table has no 'default_voices' mapping")
            self._voices = {str(k).lower(): v for k, v in voices.items()}
            logger.debug(f"Loaded {len(self._voices)} voice table entries")
        except Exception as e:
            logger.error(f"Failed to load voice table, using default voice only: {e}")
            self._voices = {}
        return self._voices

    def _lookup(self, voices: Mapping[str, Any], key: str) -> str | None:
        value = voices.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def resolve(self, language: Any) -> str:
        """Return a voice id for ``language``; never raises."""
        voices = self._load_voices()
        code = normalize_language_code(language)

        if code:
            voice_id = self._lookup(voices, code)
            if voice_id:
                logger.debug(f"Resolved voice {voice_id} for language '{language}'")
                return voice_id

            full_name = LANGUAGE_FULL_NAMES.get(code)
            if full_name:
                voice_id = self._lookup(voices, full_name)
                if voice_id:
                    logger.debug(
                        f"Resolved voice {voice_id} for language '{language}' via '{full_name}'"
                    )
                    return voice_id

        logger.warning(
            f"No voice configured for language '{language}', "
            f"using default voice {self.default_voice_id}"
        )
        return self.default_voice_id

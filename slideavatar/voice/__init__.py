"""Voice selection for templated avatar videos."""

from .resolver import LANGUAGE_ALIASES, VoiceResolver, normalize_language_code

__all__ = ["LANGUAGE_ALIASES", "VoiceResolver", "normalize_language_code"]

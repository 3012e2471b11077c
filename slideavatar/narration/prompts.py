"""
Prompt templates for per-slide narration.
"""

from __future__ import annotations

from slideavatar.document.extractor import SlideContent
from slideavatar.voice.resolver import LANGUAGE_FULL_NAMES, normalize_language_code

SYSTEM_ROLE = (
    "You are a teacher explaining one presentation slide to learners in a short "
    "video. You speak naturally and clearly, and you never read bullet points "
    "verbatim."
)

NARRATION_PROMPT = (
    "Write the spoken narration for this slide.\n\n"
    "Title: {title}\n"
    "Content: {content}\n\n"
    "Rules:\n"
    "- It will be spoken in about 15-20 seconds\n"
    "- Do NOT exceed {word_limit} words\n"
    "- Explain only the main idea of the slide\n"
    "- No introductions, greetings, or filler\n"
    "- No repetition and no extra examples\n"
    "- Do not mention the slide, the screen, or visual elements\n"
    "- Write in {language}\n"
    "- Return plain text only, without quotes or formatting"
)


def language_display_name(language: str | None) -> str:
    code = normalize_language_code(language) or "en"
    return LANGUAGE_FULL_NAMES.get(code, code).capitalize()


def build_narration_messages(
    slide: SlideContent, language: str | None, word_limit: int
) -> list[dict[str, str]]:
    user_prompt = NARRATION_PROMPT.format(
        title=slide.title or "(untitled)",
        content=slide.body or slide.title or "(no text)",
        word_limit=word_limit,
        language=language_display_name(language),
    )
    return [
        {"role": "system", "content": SYSTEM_ROLE},
        {"role": "user", "content": user_prompt},
    ]

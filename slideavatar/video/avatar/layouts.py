"""
Slot layouts: how a slide plan maps onto a video template's variables.

Templates differ in which variable keys they declare. A layout knows the keys
one template expects for a given slide count, how to fill them from slides,
and which slide counts it accepts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from slideavatar.core.errors import PayloadValidationError
from slideavatar.core.slide_plan import Slide


def image_slot(name: str, url: str) -> dict[str, Any]:
    return {"name": name, "type": "image", "properties": {"url": url}}


def text_slot(name: str, content: str) -> dict[str, Any]:
    return {"name": name, "type": "text", "properties": {"content": content}}


def voice_slot(name: str, voice_id: str, input_text: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": "voice",
        "properties": {"voice_id": voice_id, "input_text": input_text},
    }


def character_slot(name: str, avatar_id: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": "character",
        "properties": {"character_id": avatar_id, "type": "avatar"},
    }


class SlotLayout(ABC):
    name: str = "abstract"
    # Voice goes to the top-level voice_id field instead of per-slot properties
    uses_top_level_voice: bool = True

    @abstractmethod
    def required_slots(self, slide_count: int) -> dict[str, str]:
        """Map of variable key -> slot type the template requires."""

    @abstractmethod
    def build_variables(self, slides: list[Slide], voice_id: str) -> dict[str, Any]:
        """Variables for slides already sorted by index."""

    def check_slide_count(self, slide_count: int) -> None:
        """Raise when the template cannot hold ``slide_count`` slides."""


class GenericSlotLayout(SlotLayout):
    """One ``image_<n>`` / ``speech_<n>`` pair per slide."""

    name = "generic"

    def required_slots(self, slide_count: int) -> dict[str, str]:
        slots = {}
        for n in range(1, slide_count + 1):
            slots[f"image_{n}"] = "image"
            slots[f"speech_{n}"] = "text"
        return slots

    def build_variables(self, slides: list[Slide], voice_id: str) -> dict[str, Any]:
        variables: dict[str, Any] = {}
        for slide in slides:
            variables[f"image_{slide.index}"] = image_slot(f"image_{slide.index}", slide.image_url)
            variables[f"speech_{slide.index}"] = text_slot(f"speech_{slide.index}", slide.speaker_text)
        return variables


class FixedAvatarSlotLayout(SlotLayout):
    """Avatar character slot plus a fixed number of image and voice slots."""

    name = "fixed_avatar"
    uses_top_level_voice = False

    def __init__(self, avatar_id: str | None, slide_count: int = 5) -> None:
        if slide_count < 1:
            raise ValueError("slide_count must be at least 1")
        self.avatar_id = avatar_id
        self.slide_count = slide_count

    def check_slide_count(self, slide_count: int) -> None:
        if slide_count != self.slide_count:
            raise PayloadValidationError(
                f"template requires exactly {self.slide_count} slides, got {slide_count}"
            )
        if not self.avatar_id:
            raise PayloadValidationError("avatar id is required", slot="character")

    def required_slots(self, slide_count: int) -> dict[str, str]:
        slots = {"character": "character"}
        for n in range(1, self.slide_count + 1):
            slots[f"presentation_image_{n}"] = "image"
        for n in range(1, self.slide_count + 1):
            slots[f"voice_{n}"] = "voice"
        return slots

    def build_variables(self, slides: list[Slide], voice_id: str) -> dict[str, Any]:
        variables: dict[str, Any] = {
            "character": character_slot("character", self.avatar_id or ""),
        }
        for slide in slides:
            key = f"presentation_image_{slide.index}"
            variables[key] = image_slot(key, slide.image_url)
        for slide in slides:
            key = f"voice_{slide.index}"
            variables[key] = voice_slot(key, voice_id, slide.speaker_text)
        return variables


def get_slot_layout(
    name: str, *, avatar_id: str | None = None, slide_count: int = 5
) -> SlotLayout:
    if name == GenericSlotLayout.name:
        return GenericSlotLayout()
    if name == FixedAvatarSlotLayout.name:
        return FixedAvatarSlotLayout(avatar_id=avatar_id, slide_count=slide_count)
    raise ValueError(
        f"Unknown template layout: {name}. Available: "
        f"{[GenericSlotLayout.name, FixedAvatarSlotLayout.name]}"
    )

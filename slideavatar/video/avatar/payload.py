"""
Template payload construction for templated avatar videos.

:meth:`TemplatePayloadBuilder.build` either returns a complete payload or
raises :class:`~slideavatar.core.errors.PayloadValidationError`; no network call
happens here.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from loguru import logger

from slideavatar.core.errors import PayloadValidationError, SlidePlanValidationError
from slideavatar.core.slide_plan import Slide, SlidePlan, is_absolute_url
from slideavatar.voice.resolver import VoiceResolver

from .layouts import SlotLayout

DEFAULT_TITLE = "Slide Presentation"

_REQUIRED_PROPERTIES = {
    "image": ("url",),
    "text": ("content",),
    "voice": ("voice_id", "input_text"),
    "character": ("character_id",),
}


@dataclass(frozen=True)
class TemplatePayload:
    template_id: str
    title: str
    variables: Mapping[str, Any]
    caption_settings: Mapping[str, Any] | None = None
    voice_id: str | None = None
    slide_count: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "template_id": self.template_id,
            "title": self.title,
            "variables": copy.deepcopy(dict(self.variables)),
        }
        if self.caption_settings is not None:
            payload["caption_settings"] = dict(self.caption_settings)
        if self.voice_id:
            payload["voice_id"] = self.voice_id
        return payload


def _check_slot(key: str, slot: Any, expected_type: str) -> None:
    if not isinstance(slot, Mapping):
        raise PayloadValidationError("slot must be an object", slot=key)
    if slot.get("name") != key:
        raise PayloadValidationError(f"slot name must be '{key}'", slot=key)
    if slot.get("type") != expected_type:
        raise PayloadValidationError(
            f"expected type '{expected_type}', got {slot.get('type')!r}", slot=key
        )
    properties = slot.get("properties")
    if not isinstance(properties, Mapping):
        raise PayloadValidationError("slot properties must be an object", slot=key)
    for prop in _REQUIRED_PROPERTIES[expected_type]:
        value = properties.get(prop)
        if not isinstance(value, str) or not value.strip():
            raise PayloadValidationError(f"property '{prop}' must be a non-empty string", slot=key)
    if expected_type == "image" and not is_absolute_url(properties["url"]):
        raise PayloadValidationError(f"image URL is not absolute: {properties['url']!r}", slot=key)


class TemplatePayloadBuilder:
    def __init__(
        self,
        voice_resolver: VoiceResolver,
        layout: SlotLayout,
        max_slides: int,
        default_title: str = DEFAULT_TITLE,
    ) -> None:
        self.voice_resolver = voice_resolver
        self.layout = layout
        self.max_slides = max_slides
        self.default_title = default_title

    def _coerce_plan(self, slides: SlidePlan | Sequence[Slide | Mapping[str, Any]]) -> SlidePlan:
        records = slides.get_all_slides() if isinstance(slides, SlidePlan) else slides
        try:
            return SlidePlan(records, max_slides=self.max_slides)
        except SlidePlanValidationError as e:
            raise PayloadValidationError(f"invalid slides: {e}") from e

    def build(
        self,
        template_id: str,
        slides: SlidePlan | Sequence[Slide | Mapping[str, Any]],
        *,
        title: str | None = None,
        caption: bool = True,
        voice_id: str | None = None,
        language: str | None = None,
    ) -> TemplatePayload:
        if not isinstance(template_id, str) or not template_id.strip():
            raise PayloadValidationError("template id must be a non-empty string")
        if title is not None and not isinstance(title, str):
            raise PayloadValidationError("title must be a string")
        if not isinstance(caption, bool):
            raise PayloadValidationError("caption flag must be a boolean")
        if voice_id is not None and (not isinstance(voice_id, str) or not voice_id.strip()):
            raise PayloadValidationError("voice id must be a non-empty string when given")
        if language is not None and not isinstance(language, str):
            raise PayloadValidationError("language must be a string")

        plan = self._coerce_plan(slides)
        self.layout.check_slide_count(plan.slide_count)

        resolved_voice = voice_id.strip() if voice_id else self.voice_resolver.resolve(language)
        ordered = plan.get_all_slides()
        variables = self.layout.build_variables(ordered, resolved_voice)
        self._verify_variables(variables, plan.slide_count)

        payload = TemplatePayload(
            template_id=template_id.strip(),
            title=(title or "").strip() or self.default_title,
            variables=MappingProxyType(copy.deepcopy(variables)),
            caption_settings=MappingProxyType({"enabled": True}) if caption else None,
            voice_id=resolved_voice if self.layout.uses_top_level_voice else None,
            slide_count=plan.slide_count,
        )
        logger.info(
            f"Built {self.layout.name} payload for template {payload.template_id} "
            f"with {len(variables)} variables"
        )
        return payload

    def _verify_variables(self, variables: Mapping[str, Any], slide_count: int) -> None:
        required = self.layout.required_slots(slide_count)
        missing = [key for key in required if key not in variables]
        if missing:
            raise PayloadValidationError(f"missing template slots: {missing}")
        extra = [key for key in variables if key not in required]
        if extra:
            raise PayloadValidationError(f"unexpected template slots: {extra}")
        for key, slot_type in required.items():
            _check_slot(key, variables[key], slot_type)

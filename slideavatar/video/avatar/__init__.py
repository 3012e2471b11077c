"""Templated avatar video services and payloads."""

from .interface import TemplateVideoInterface
from .layouts import FixedAvatarSlotLayout, GenericSlotLayout, SlotLayout, get_slot_layout
from .payload import TemplatePayload, TemplatePayloadBuilder

__all__ = [
    "FixedAvatarSlotLayout",
    "GenericSlotLayout",
    "SlotLayout",
    "TemplatePayload",
    "TemplatePayloadBuilder",
    "TemplateVideoInterface",
    "get_slot_layout",
]

"""Per-slide narration generation."""

from .generator import Narration, NarrationGenerator

__all__ = ["Narration", "NarrationGenerator"]

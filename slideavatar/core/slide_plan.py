"""
Validated, ordered collection of slides (image + narration per page).

:class:`SlidePlan` is the only place where the shape of per-slide data is
checked. Once a plan exists, later stages rely on it being well formed: indices
are exactly ``1..N``, every narration is non-empty, every image URL is absolute.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from slideavatar.core.errors import SlidePlanValidationError
from slideavatar.core.text import collapse_whitespace, count_words

_FIELD_ALIASES = {
    "speaker_text": ("speaker_text", "speakerText"),
    "image_url": ("image_url", "imageUrl"),
}


def is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class Slide:
    index: int
    speaker_text: str
    image_url: str
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "title": self.title,
            "speaker_text": self.speaker_text,
            "image_url": self.image_url,
        }


def _field(record: Mapping[str, Any], name: str) -> Any:
    for key in _FIELD_ALIASES.get(name, (name,)):
        if key in record:
            return record[key]
    return None


def _validate_slide(raw: Any, position: int, max_slides: int) -> Slide:
    if isinstance(raw, Slide):
        record: Mapping[str, Any] = raw.to_dict()
    elif isinstance(raw, Mapping):
        record = raw
    else:
        raise SlidePlanValidationError(
            f"entry at position {position} must be a mapping, got {type(raw).__name__}",
            rule="slide_type",
        )

    index = record.get("index")
    if isinstance(index, bool) or not isinstance(index, int):
        raise SlidePlanValidationError(
            f"entry at position {position} has non-integer index {index!r}",
            rule="index_type",
        )
    if index < 1 or index > max_slides:
        raise SlidePlanValidationError(
            f"index must be between 1 and {max_slides}",
            slide_index=index,
            rule="index_range",
        )

    speaker_text = _field(record, "speaker_text")
    if not isinstance(speaker_text, str) or not collapse_whitespace(speaker_text):
        raise SlidePlanValidationError(
            "speaker text must be a non-empty string",
            slide_index=index,
            rule="speaker_text",
        )

    image_url = _field(record, "image_url")
    if not isinstance(image_url, str) or not image_url.strip():
        raise SlidePlanValidationError(
            "image URL must be a non-empty string",
            slide_index=index,
            rule="image_url",
        )
    if not is_absolute_url(image_url.strip()):
        raise SlidePlanValidationError(
            f"image URL is not an absolute URL: {image_url!r}",
            slide_index=index,
            rule="image_url",
        )

    title = record.get("title")
    if title is not None and not isinstance(title, str):
        raise SlidePlanValidationError(
            "title must be a string when present",
            slide_index=index,
            rule="title",
        )

    return Slide(
        index=index,
        speaker_text=collapse_whitespace(speaker_text),
        image_url=image_url.strip(),
        title=title.strip() if title is not None else None,
    )


class SlidePlan:
    """Immutable, invariant-checked sequence of :class:`Slide` objects."""

    __slots__ = ("_slides", "_by_index", "max_slides")

    def __init__(self, slides: Sequence[Mapping[str, Any] | Slide], *, max_slides: int) -> None:
        if isinstance(slides, (str, bytes)) or not isinstance(slides, Sequence):
            raise SlidePlanValidationError(
                f"slides must be a list, got {type(slides).__name__}",
                rule="input_type",
            )
        if not slides:
            raise SlidePlanValidationError("slide plan needs at least one slide", rule="slide_count")
        if len(slides) > max_slides:
            raise SlidePlanValidationError(
                f"slide plan has {len(slides)} slides, maximum is {max_slides}",
                rule="slide_count",
            )

        by_index: dict[int, Slide] = {}
        for position, raw in enumerate(slides):
            slide = _validate_slide(raw, position, max_slides)
            if slide.index in by_index:
                raise SlidePlanValidationError(
                    "duplicate slide index",
                    slide_index=slide.index,
                    rule="duplicate_index",
                )
            by_index[slide.index] = slide

        ordered = sorted(by_index)
        for expected, actual in enumerate(ordered, start=1):
            if actual != expected:
                raise SlidePlanValidationError(
                    f"indices must be sequential; expected index {expected}, found {actual}",
                    slide_index=actual,
                    rule="sequence",
                )

        self._slides: tuple[Slide, ...] = tuple(by_index[i] for i in ordered)
        self._by_index = by_index
        self.max_slides = max_slides

    @property
    def slide_count(self) -> int:
        return len(self._slides)

    def get_slide(self, index: int) -> Slide | None:
        return self._by_index.get(index)

    def get_all_slides(self) -> list[Slide]:
        """Slides sorted ascending by index."""
        return list(self._slides)

    def total_words(self) -> int:
        return sum(count_words(slide.speaker_text) for slide in self._slides)

    def __len__(self) -> int:
        return len(self._slides)

    def __iter__(self) -> Iterator[Slide]:
        return iter(self._slides)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlidePlan):
            return NotImplemented
        return self._slides == other._slides

    def __repr__(self) -> str:
        return f"SlidePlan(slide_count={self.slide_count})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "slides": [slide.to_dict() for slide in self._slides],
            "slide_count": self.slide_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, max_slides: int) -> SlidePlan:
        if not isinstance(data, Mapping):
            raise SlidePlanValidationError(
                f"serialized plan must be a mapping, got {type(data).__name__}",
                rule="input_type",
            )
        return cls(data.get("slides"), max_slides=max_slides)  # type: ignore[arg-type]

"""
Helpers for building storage object keys.
"""

from __future__ import annotations

import re

_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _normalize_extension(file_ext: str | None) -> str:
    if not file_ext:
        raise ValueError("File extension is required")
    return file_ext.lower().lstrip(".")


def validate_key_segment(value: str, label: str = "segment") -> str:
    """Reject values that would change the shape of an object key."""
    if not isinstance(value, str) or not _SAFE_SEGMENT.match(value) or ".." in value:
        raise ValueError(f"Invalid {label} for storage key: {value!r}")
    return value


def slide_image_object_key(
    namespace: str, job_id: str, index: int, file_ext: str
) -> str:
    """Return ``<namespace>/slides/<job_id>/slide-<NN>.<ext>``."""
    if index < 1:
        raise ValueError(f"Slide index must be 1-based, got {index}")
    namespace = namespace.strip("/")
    job_id = validate_key_segment(job_id, "job id")
    return f"{namespace}/slides/{job_id}/slide-{index:02d}.{_normalize_extension(file_ext)}"

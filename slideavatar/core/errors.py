"""
Exception types raised across the avatar video pipeline.
"""

from __future__ import annotations

from typing import Any


class ContractViolationError(RuntimeError):
    """An upstream artifact does not match the shape it was instructed to have."""


class ToolingUnavailableError(RuntimeError):
    """A required external executable is not installed."""


class RenderingError(RuntimeError):
    """The rendering toolchain ran but did not produce usable images."""


class StructuralValidationError(ValueError):
    """Base class for malformed slide plans and template payloads."""


class SlidePlanValidationError(StructuralValidationError):
    def __init__(self, message: str, *, slide_index: int | None = None, rule: str) -> None:
        self.slide_index = slide_index
        self.rule = rule
        prefix = f"Slide {slide_index}: " if slide_index is not None else ""
        super().__init__(f"{prefix}{message} [{rule}]")


class PayloadValidationError(StructuralValidationError):
    def __init__(self, message: str, *, slot: str | None = None) -> None:
        self.slot = slot
        super().__init__(f"{slot}: {message}" if slot else message)


class BudgetViolationError(RuntimeError):
    """Narration exceeds a per-scene or whole-video word budget."""

    def __init__(
        self,
        message: str,
        *,
        slide_index: int | None = None,
        total_words: int | None = None,
        estimated_seconds: float | None = None,
    ) -> None:
        self.slide_index = slide_index
        self.total_words = total_words
        self.estimated_seconds = estimated_seconds
        super().__init__(message)


class ExternalServiceError(RuntimeError):
    """A collaborating service (document generation, storage, video API) failed."""

    def __init__(
        self, service: str, message: str, *, status_code: int | None = None
    ) -> None:
        self.service = service
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{service}{status}: {message}")


class PipelineStepError(RuntimeError):
    """Raised when a pipeline step fails; the cause is chained."""

    def __init__(self, step: str, job_id: str, message: str) -> None:
        self.step = step
        self.job_id = job_id
        self.message = message
        # Set by the pipeline so callers can report partial progress
        self.job_state: Any = None
        super().__init__(f"Step '{step}' failed for job {job_id}: {message}")

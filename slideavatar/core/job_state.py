"""
Per-job record of pipeline progress.

Every step is known up front, so a fresh :class:`JobState` already lists all of
them as pending in execution order. Steps then move to completed or failed
exactly once; a failed step makes the whole job terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class PipelineStep(str, Enum):
    OBTAIN_DOCUMENT = "obtain_document"
    RENDER_SLIDE_IMAGES = "render_slide_images"
    GENERATE_NARRATIONS = "generate_narrations"
    BUILD_SLIDE_PLAN = "build_slide_plan"
    RESOLVE_VOICE = "resolve_voice"
    BUILD_PAYLOAD = "build_payload"
    VERIFY_CONSTRAINTS = "verify_constraints"
    SUBMIT_VIDEO = "submit_video"

    @property
    def display_name(self) -> str:
        return _STEP_DISPLAY_NAMES[self]


_STEP_DISPLAY_NAMES = {
    PipelineStep.OBTAIN_DOCUMENT: "Obtaining source document",
    PipelineStep.RENDER_SLIDE_IMAGES: "Rendering slide images",
    PipelineStep.GENERATE_NARRATIONS: "Generating slide narrations",
    PipelineStep.BUILD_SLIDE_PLAN: "Building slide plan",
    PipelineStep.RESOLVE_VOICE: "Resolving voice",
    PipelineStep.BUILD_PAYLOAD: "Building template payload",
    PipelineStep.VERIFY_CONSTRAINTS: "Verifying video constraints",
    PipelineStep.SUBMIT_VIDEO: "Submitting video generation",
}

STEP_ORDER: tuple[PipelineStep, ...] = tuple(PipelineStep)


class StepStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _now() -> str:
    return datetime.now().isoformat()


@dataclass
class StepSnapshot:
    step: PipelineStep
    status: StepStatus = StepStatus.PENDING
    started_at: str | None = None
    completed_at: str | None = None
    failed_at: str | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value}
        for key in ("started_at", "completed_at", "failed_at", "error"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class JobState:
    job_id: str
    status: JobStatus = JobStatus.PENDING
    steps: dict[PipelineStep, StepSnapshot] = field(default_factory=dict)
    failed_step: PipelineStep | None = None
    started_at: str | None = None
    completed_at: str | None = None
    failed_at: str | None = None
    video_id: str | None = None

    def __post_init__(self) -> None:
        if not self.steps:
            self.steps = {step: StepSnapshot(step) for step in STEP_ORDER}

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def _ensure_active(self) -> None:
        if self.is_terminal:
            raise RuntimeError(f"Job {self.job_id} is already {self.status.value}")

    def start_step(self, step: PipelineStep) -> StepSnapshot:
        self._ensure_active()
        snapshot = self.steps[step]
        if snapshot.status is not StepStatus.PENDING:
            raise RuntimeError(
                f"Step {step.value} already {snapshot.status.value} for job {self.job_id}"
            )
        if self.status is JobStatus.PENDING:
            self.status = JobStatus.PROCESSING
            self.started_at = _now()
        snapshot.started_at = _now()
        return snapshot

    def complete_step(self, step: PipelineStep, **details: Any) -> StepSnapshot:
        self._ensure_active()
        snapshot = self.steps[step]
        snapshot.status = StepStatus.COMPLETED
        snapshot.completed_at = _now()
        snapshot.details.update(details)
        return snapshot

    def fail_step(self, step: PipelineStep, error: str) -> StepSnapshot:
        self._ensure_active()
        snapshot = self.steps[step]
        snapshot.status = StepStatus.FAILED
        snapshot.failed_at = _now()
        snapshot.error = error
        self.status = JobStatus.FAILED
        self.failed_step = step
        self.failed_at = snapshot.failed_at
        return snapshot

    def mark_completed(self, video_id: str) -> None:
        self._ensure_active()
        pending = [s.value for s, snap in self.steps.items() if snap.status is not StepStatus.COMPLETED]
        if pending:
            raise RuntimeError(f"Cannot complete job {self.job_id}; steps not completed: {pending}")
        self.status = JobStatus.COMPLETED
        self.video_id = video_id
        self.completed_at = _now()

    def step_status(self, step: PipelineStep) -> StepStatus:
        return self.steps[step].status

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "failed_step": self.failed_step.value if self.failed_step else None,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "failed_at": self.failed_at,
            "video_id": self.video_id,
            "steps": {step.value: snap.to_dict() for step, snap in self.steps.items()},
        }

"""
Unit tests for per-job state tracking.
"""

import pytest

from slideavatar.core.job_state import (
    STEP_ORDER,
    JobState,
    JobStatus,
    PipelineStep,
    StepStatus,
)


class TestJobState:
    def test_all_steps_start_pending(self):
        state = JobState(job_id="job1")
        assert state.status is JobStatus.PENDING
        assert list(state.steps) == list(STEP_ORDER)
        assert all(s.status is StepStatus.PENDING for s in state.steps.values())

    def test_step_order(self):
        assert [step.value for step in STEP_ORDER] == [
            "obtain_document",
            "render_slide_images",
            "generate_narrations",
            "build_slide_plan",
            "resolve_voice",
            "build_payload",
            "verify_constraints",
            "submit_video",
        ]

    def test_complete_step_records_details(self):
        state = JobState(job_id="job1")
        state.start_step(PipelineStep.OBTAIN_DOCUMENT)
        assert state.status is JobStatus.PROCESSING

        state.complete_step(PipelineStep.OBTAIN_DOCUMENT, format="pdf")
        data = state.to_dict()["steps"]["obtain_document"]
        assert data["status"] == "completed"
        assert data["details"] == {"format": "pdf"}

    def test_fail_step_makes_job_terminal(self):
        state = JobState(job_id="job1")
        state.start_step(PipelineStep.OBTAIN_DOCUMENT)
        state.fail_step(PipelineStep.OBTAIN_DOCUMENT, "boom")

        assert state.status is JobStatus.FAILED
        assert state.failed_step is PipelineStep.OBTAIN_DOCUMENT
        assert state.is_terminal
        assert state.step_status(PipelineStep.RENDER_SLIDE_IMAGES) is StepStatus.PENDING
        with pytest.raises(RuntimeError):
            state.start_step(PipelineStep.RENDER_SLIDE_IMAGES)

    def test_step_cannot_start_twice(self):
        state = JobState(job_id="job1")
        state.start_step(PipelineStep.OBTAIN_DOCUMENT)
        state.complete_step(PipelineStep.OBTAIN_DOCUMENT)
        with pytest.raises(RuntimeError):
            state.start_step(PipelineStep.OBTAIN_DOCUMENT)

    def test_mark_completed_requires_every_step(self):
        state = JobState(job_id="job1")
        with pytest.raises(RuntimeError):
            state.mark_completed("vid")

        for step in STEP_ORDER:
            state.start_step(step)
            state.complete_step(step)
        state.mark_completed("vid")

        data = state.to_dict()
        assert data["status"] == "completed"
        assert data["video_id"] == "vid"
        assert data["failed_step"] is None

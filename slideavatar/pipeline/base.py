"""
Base pipeline for SlideAvatar processing.

Provides step execution with status bookkeeping in :class:`JobState`.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

from slideavatar.core.errors import PipelineStepError
from slideavatar.core.job_state import JobState, PipelineStep

T = TypeVar("T")


class BasePipeline(ABC):
    """Abstract base class for pipelines driven by a :class:`JobState`."""

    def __init__(self, step_timeout: float | None = None) -> None:
        self.step_timeout = step_timeout

    async def _execute_step(
        self,
        job_state: JobState,
        step: PipelineStep,
        step_func: Callable[..., Awaitable[T]],
        *args: Any,
        details: Callable[[T], dict[str, Any]] | None = None,
    ) -> T:
        """Run one step, recording completion or failure in ``job_state``.

        Any exception, including a step timeout, marks the step and the job as
        failed and is re-raised as :class:`PipelineStepError`.
        """
        job_state.start_step(step)
        logger.info(f"=== Job {job_state.job_id} - Executing: {step.display_name} ===")

        try:
            if self.step_timeout:
                result = await asyncio.wait_for(step_func(*args), timeout=self.step_timeout)
            else:
                result = await step_func(*args)
        except Exception as e:
            message = str(e) or type(e).__name__
            if isinstance(e, asyncio.TimeoutError) and not str(e):
                message = f"timed out after {self.step_timeout}s"
            logger.error(f"Job {job_state.job_id} step {step.value} failed: {message}")
            job_state.fail_step(step, f"{type(e).__name__}: {message}")
            raise PipelineStepError(step.value, job_state.job_id, message) from e

        job_state.complete_step(step, **(details(result) if details else {}))
        return result

    @abstractmethod
    async def execute(self, *args: Any, **kwargs: Any) -> Any:
        """Execute the full pipeline."""
        pass

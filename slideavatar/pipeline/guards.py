"""
Hard pre-submission checks on slide images, narrations and the slide plan.

None of these checks is advisory; each violation raises and the video is not
submitted.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.errors import BudgetViolationError, ContractViolationError
from slideavatar.core.slide_plan import SlidePlan
from slideavatar.core.text import count_words
from slideavatar.document.renderer import RenderedSlide
from slideavatar.narration import Narration


class ConstraintGuard:
    def __init__(self, limits: PipelineLimits) -> None:
        self.limits = limits

    def check_slide_correspondence(
        self, images: Sequence[RenderedSlide], narrations: Sequence[Narration]
    ) -> None:
        if len(images) != len(narrations):
            raise ContractViolationError(
                f"Slide image count ({len(images)}) does not match narration count "
                f"({len(narrations)})"
            )
        image_indices = sorted(image.index for image in images)
        narration_indices = sorted(narration.index for narration in narrations)
        if image_indices != narration_indices:
            raise ContractViolationError(
                f"Slide image indices {image_indices} do not match narration indices "
                f"{narration_indices}"
            )

    def check_instructed_count(self, slide_count: int, instructed: int | None) -> None:
        if instructed is not None and slide_count != instructed:
            raise ContractViolationError(
                f"Document generator was instructed to produce exactly {instructed} "
                f"slides but the document has {slide_count}"
            )

    def check_slide_count(self, slide_count: int) -> None:
        if not 1 <= slide_count <= self.limits.max_slides:
            raise ContractViolationError(
                f"Slide count {slide_count} is outside 1..{self.limits.max_slides}"
            )

    def check_scene_budgets(self, plan: SlidePlan) -> None:
        ceiling = self.limits.scene_word_limit
        for slide in plan:
            words = count_words(slide.speaker_text)
            if words > ceiling:
                raise BudgetViolationError(
                    f"Slide {slide.index} narration has {words} words, exceeding the "
                    f"{ceiling}-word limit for a {self.limits.scene_seconds:g}s scene",
                    slide_index=slide.index,
                    total_words=words,
                    estimated_seconds=self.limits.estimate_seconds(words),
                )

    def check_total_budget(self, plan: SlidePlan) -> None:
        total_words = plan.total_words()
        estimated = self.limits.estimate_seconds(total_words)
        if total_words > self.limits.max_total_words:
            raise BudgetViolationError(
                "Total narration exceeds maximum allowed duration. "
                f"Estimated: {estimated:.1f}s ({total_words} words). "
                f"Maximum: {self.limits.max_total_seconds:g}s",
                total_words=total_words,
                estimated_seconds=estimated,
            )
        logger.debug(f"Narration estimate {estimated:.1f}s ({total_words} words)")

    def verify(
        self,
        images: Sequence[RenderedSlide],
        narrations: Sequence[Narration],
        plan: SlidePlan,
        instructed_slide_count: int | None = None,
        document_page_count: int | None = None,
    ) -> dict[str, float | int]:
        """Run every check; return the duration estimate on success.

        When given, ``document_page_count`` (not the capped image list) is
        checked against the instructed count.
        """
        self.check_slide_correspondence(images, narrations)
        delivered = len(images) if document_page_count is None else document_page_count
        self.check_instructed_count(delivered, instructed_slide_count)
        self.check_slide_count(plan.slide_count)
        self.check_scene_budgets(plan)
        self.check_total_budget(plan)
        total_words = plan.total_words()
        return {
            "slide_count": plan.slide_count,
            "total_words": total_words,
            "estimated_seconds": round(self.limits.estimate_seconds(total_words), 1),
        }

"""
Avatar video pipeline coordinator.

Runs one job through the fixed sequence of :class:`PipelineStep` values:

1. obtain the source document (generate from text, download, or read a file)
2. render and upload one image per slide
3. extract slide text and generate narrations
4. build the validated :class:`SlidePlan`
5. resolve the narration voice
6. build the template payload
7. verify slide counts and narration budgets
8. submit the payload to the templated video service

A failing step aborts the job; nothing after it runs.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

from loguru import logger

from slideavatar.configs.config import config, get_storage_provider
from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.errors import PipelineStepError
from slideavatar.core.job_state import JobState, PipelineStep
from slideavatar.core.slide_plan import SlidePlan
from slideavatar.document.extractor import SlideContent, SlideTextExtractor
from slideavatar.document.formats import (
    DocumentFormat,
    count_document_pages,
    detect_format,
)
from slideavatar.document.generation import DocumentGenerator, GammaDocumentGenerator
from slideavatar.document.renderer import (
    FullRenderStrategy,
    RenderedSlide,
    SlideImageRenderer,
)
from slideavatar.narration import Narration, NarrationGenerator
from slideavatar.schemas.avatar_video import AvatarVideoRequest
from slideavatar.storage.paths import validate_key_segment
from slideavatar.video.avatar.factory import TemplateVideoFactory
from slideavatar.video.avatar.interface import TemplateVideoInterface
from slideavatar.video.avatar.layouts import get_slot_layout
from slideavatar.video.avatar.payload import TemplatePayload, TemplatePayloadBuilder
from slideavatar.voice.resolver import VoiceResolver

from .base import BasePipeline
from .guards import ConstraintGuard
from .helpers import download_document, job_workspace

Downloader = Callable[[str, float], Awaitable[bytes]]


@dataclass(frozen=True)
class SourceDocument:
    data: bytes
    input_format: DocumentFormat
    source: str
    # Page count the generator was told to produce, when it was told exactly
    instructed_slide_count: int | None = None
    # Pages in the document as delivered, before any cap is applied
    page_count: int | None = None


@dataclass
class PipelineResult:
    job_id: str
    video_id: str
    job_state: JobState
    slide_plan: SlidePlan
    payload: TemplatePayload

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "status": "completed",
            "video_id": self.video_id,
            "job_id": self.job_id,
            "job_state": self.job_state.to_dict(),
            "slide_plan": self.slide_plan.to_dict(),
            "payload": self.payload.to_dict(),
        }


def failure_result(error: PipelineStepError) -> dict[str, Any]:
    job_state = error.job_state.to_dict() if error.job_state is not None else None
    return {
        "success": False,
        "status": "failed",
        "error": error.message,
        "failed_step": error.step,
        "job_id": error.job_id,
        "job_state": job_state,
    }


class AvatarVideoPipeline(BasePipeline):
    """Turn a slide deck (or source text) into a submitted avatar video job."""

    def __init__(
        self,
        *,
        document_generator: DocumentGenerator | None,
        renderer: SlideImageRenderer,
        text_extractor: SlideTextExtractor,
        narration_generator: NarrationGenerator,
        voice_resolver: VoiceResolver,
        payload_builder: TemplatePayloadBuilder,
        video_service: TemplateVideoInterface,
        limits: PipelineLimits,
        template_id: str,
        exact_slide_count: bool = True,
        caption: bool = True,
        require_full_rendering: bool = True,
        download_timeout: float = 120.0,
        downloader: Downloader | None = None,
    ) -> None:
        super().__init__(step_timeout=limits.step_timeout)
        self.document_generator = document_generator
        self.renderer = renderer
        self.text_extractor = text_extractor
        self.narration_generator = narration_generator
        self.voice_resolver = voice_resolver
        self.payload_builder = payload_builder
        self.video_service = video_service
        self.limits = limits
        self.template_id = template_id
        self.exact_slide_count = exact_slide_count
        self.caption = caption
        self.require_full_rendering = require_full_rendering
        self.download_timeout = download_timeout
        self.guard = ConstraintGuard(limits)
        self._download = downloader or download_document

    async def _obtain_document(
        self, request: AvatarVideoRequest, workspace: Path
    ) -> SourceDocument:
        instructed: int | None = None
        if request.source_text:
            if self.document_generator is None:
                raise ValueError("No document generator configured for source text")
            generated = await self.document_generator.generate(
                request.source_text,
                max_slides=self.limits.max_slides,
                language=request.language,
                export_format=DocumentFormat.PPTX.value,
            )
            source = generated.file_url
            data = await self._download(source, self.download_timeout)
            if self.exact_slide_count:
                instructed = self.limits.max_slides
        elif request.document_url:
            source = request.document_url
            data = await self._download(source, self.download_timeout)
        else:
            source = str(request.document_path)
            path = Path(source)
            if not path.is_file():
                raise FileNotFoundError(f"Document not found: {source}")
            data = await asyncio.get_running_loop().run_in_executor(None, path.read_bytes)

        input_format = detect_format(data, source)
        page_count = count_document_pages(data, input_format)
        (workspace / f"source.{input_format.value}").write_bytes(data)
        return SourceDocument(
            data=data,
            input_format=input_format,
            source=source,
            instructed_slide_count=instructed,
            page_count=page_count,
        )

    async def _render_images(
        self, document: SourceDocument, job_id: str, require_full: bool, workspace: Path
    ) -> list[RenderedSlide]:
        return await self.renderer.render(
            document.data,
            job_id,
            input_format=document.input_format,
            max_slides=self.limits.max_slides,
            require_full_rendering=require_full,
            work_dir=workspace,
        )

    async def _generate_narrations(
        self, document: SourceDocument, language: str
    ) -> tuple[list[SlideContent], list[Narration]]:
        contents = await asyncio.get_running_loop().run_in_executor(
            None,
            partial(
                self.text_extractor.extract,
                document.data,
                document.input_format,
                self.limits.max_slides,
            ),
        )
        narrations = await self.narration_generator.generate(contents, language)
        return contents, narrations

    async def _build_slide_plan(
        self,
        images: list[RenderedSlide],
        contents: list[SlideContent],
        narrations: list[Narration],
    ) -> SlidePlan:
        self.guard.check_slide_correspondence(images, narrations)
        titles = {content.index: content.title for content in contents}
        speech = {narration.index: narration.speaker_text for narration in narrations}
        records = [
            {
                "index": image.index,
                "title": titles.get(image.index) or None,
                "speaker_text": speech[image.index],
                "image_url": image.image_url,
            }
            for image in images
        ]
        return SlidePlan(records, max_slides=self.limits.max_slides)

    async def _resolve_voice(self, request: AvatarVideoRequest) -> str:
        if request.voice_id:
            return request.voice_id
        return self.voice_resolver.resolve(request.language)

    async def _build_payload(
        self, plan: SlidePlan, request: AvatarVideoRequest, voice_id: str
    ) -> TemplatePayload:
        caption = self.caption if request.caption is None else request.caption
        return self.payload_builder.build(
            self.template_id,
            plan,
            title=request.title,
            caption=caption,
            voice_id=voice_id,
            language=request.language,
        )

    async def _verify_constraints(
        self,
        images: list[RenderedSlide],
        narrations: list[Narration],
        plan: SlidePlan,
        document: SourceDocument,
    ) -> dict[str, float | int]:
        return self.guard.verify(
            images,
            narrations,
            plan,
            document.instructed_slide_count,
            document_page_count=document.page_count,
        )

    async def _submit_video(self, payload: TemplatePayload) -> str:
        return await self.video_service.submit(self.template_id, payload.to_dict())

    async def execute(
        self, request: AvatarVideoRequest, job_id: str | None = None
    ) -> PipelineResult:
        """Run every step; raises :class:`PipelineStepError` on the first failure.

        An unusable ``job_id`` raises :class:`ValueError` before any step runs.
        """
        job_id = job_id or request.job_id or uuid.uuid4().hex
        validate_key_segment(job_id, "job id")
        job_state = JobState(job_id=job_id)
        require_full = (
            self.require_full_rendering
            if request.require_full_rendering is None
            else request.require_full_rendering
        )
        logger.info(f"Starting avatar video job {job_id} (language={request.language})")

        try:
            with job_workspace(job_id) as workspace:
                document = await self._execute_step(
                    job_state,
                    PipelineStep.OBTAIN_DOCUMENT,
                    self._obtain_document,
                    request,
                    workspace,
                    details=lambda d: {
                        "format": d.input_format.value,
                        "bytes": len(d.data),
                        "page_count": d.page_count,
                        "instructed_slide_count": d.instructed_slide_count,
                    },
                )
                images = await self._execute_step(
                    job_state,
                    PipelineStep.RENDER_SLIDE_IMAGES,
                    self._render_images,
                    document,
                    job_id,
                    require_full,
                    workspace,
                    details=lambda r: {"image_count": len(r)},
                )
                contents, narrations = await self._execute_step(
                    job_state,
                    PipelineStep.GENERATE_NARRATIONS,
                    self._generate_narrations,
                    document,
                    request.language,
                    details=lambda r: {
                        "narration_count": len(r[1]),
                        "fallback_count": sum(1 for n in r[1] if n.source == "fallback"),
                    },
                )
                plan = await self._execute_step(
                    job_state,
                    PipelineStep.BUILD_SLIDE_PLAN,
                    self._build_slide_plan,
                    images,
                    contents,
                    narrations,
                    details=lambda p: {"slide_count": p.slide_count},
                )
                voice_id = await self._execute_step(
                    job_state,
                    PipelineStep.RESOLVE_VOICE,
                    self._resolve_voice,
                    request,
                    details=lambda v: {"voice_id": v},
                )
                payload = await self._execute_step(
                    job_state,
                    PipelineStep.BUILD_PAYLOAD,
                    self._build_payload,
                    plan,
                    request,
                    voice_id,
                    details=lambda p: {"variable_count": len(p.variables)},
                )
                await self._execute_step(
                    job_state,
                    PipelineStep.VERIFY_CONSTRAINTS,
                    self._verify_constraints,
                    images,
                    narrations,
                    plan,
                    document,
                    details=lambda estimate: dict(estimate),
                )
                video_id = await self._execute_step(
                    job_state,
                    PipelineStep.SUBMIT_VIDEO,
                    self._submit_video,
                    payload,
                    details=lambda v: {"video_id": v},
                )
        except PipelineStepError as e:
            e.job_state = job_state
            raise

        job_state.mark_completed(video_id)
        logger.info(f"Avatar video job {job_id} submitted: video_id={video_id}")
        return PipelineResult(
            job_id=job_id,
            video_id=video_id,
            job_state=job_state,
            slide_plan=plan,
            payload=payload,
        )

    async def run(
        self, request: AvatarVideoRequest, job_id: str | None = None
    ) -> dict[str, Any]:
        """Like :meth:`execute`, but reports failures as a result dict."""
        try:
            result = await self.execute(request, job_id)
        except PipelineStepError as e:
            logger.error(f"Avatar video job {e.job_id} failed at {e.step}: {e.message}")
            return failure_result(e)
        return result.to_dict()


def build_default_pipeline() -> AvatarVideoPipeline:
    """Wire a pipeline from environment configuration."""
    limits = PipelineLimits.from_config(config)
    voice_resolver = VoiceResolver(
        config.heygen_default_voice_id, voices_path=config.heygen_voices_path
    )
    layout = get_slot_layout(
        config.heygen_template_layout,
        avatar_id=config.heygen_avatar_id,
        slide_count=config.heygen_template_slide_count,
    )
    renderer = SlideImageRenderer(
        get_storage_provider(),
        limits,
        full_strategy=FullRenderStrategy(
            soffice_binary=config.soffice_binary,
            pdftoppm_binary=config.pdftoppm_binary,
            width=config.slide_image_width,
            height=config.slide_image_height,
            timeout=config.render_timeout,
        ),
        namespace=config.storage_namespace,
    )
    document_generator = GammaDocumentGenerator(
        api_key=config.gamma_api_key,
        base_url=config.gamma_base_url,
        theme_id=config.gamma_theme_id,
        tone=config.gamma_tone,
        poll_interval=config.gamma_poll_interval,
        timeout=config.gamma_timeout,
        request_timeout=config.gamma_request_timeout,
    )
    return AvatarVideoPipeline(
        document_generator=document_generator,
        renderer=renderer,
        text_extractor=SlideTextExtractor(limits),
        narration_generator=NarrationGenerator(
            limits,
            model=config.narration_model,
            temperature=config.narration_temperature,
            max_tokens=config.narration_max_tokens,
            timeout=config.openai_timeout,
            concurrency=config.narration_concurrency,
        ),
        voice_resolver=voice_resolver,
        payload_builder=TemplatePayloadBuilder(
            voice_resolver, layout, limits.max_slides, default_title=config.video_title
        ),
        video_service=TemplateVideoFactory.create_service("heygen"),
        limits=limits,
        template_id=config.heygen_template_id,
        exact_slide_count=config.document_exact_slides,
        caption=config.heygen_captions,
        require_full_rendering=config.require_full_rendering,
        download_timeout=config.download_timeout,
    )

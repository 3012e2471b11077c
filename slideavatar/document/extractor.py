"""
Per-slide text extraction for narration prompts.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

import PyPDF2
from loguru import logger
from pptx import Presentation

from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.text import collapse_whitespace

from .formats import DocumentFormat


@dataclass(frozen=True)
class SlideContent:
    index: int
    title: str
    body: str


class SlideTextExtractor:
    """Extract title and body text from each slide of a PDF or PPTX document."""

    def __init__(self, limits: PipelineLimits, include_notes: bool = True) -> None:
        self.limits = limits
        self.include_notes = include_notes

    def extract(
        self, data: bytes, input_format: DocumentFormat, max_slides: int | None = None
    ) -> list[SlideContent]:
        ceiling = max_slides or self.limits.max_slides
        if input_format is DocumentFormat.PPTX:
            slides = self._extract_pptx_slides(data)
        else:
            slides = self._extract_pdf_slides(data)
        if len(slides) > ceiling:
            logger.info(f"Document has {len(slides)} slides, keeping first {ceiling}")
        return slides[:ceiling]

    def _extract_pdf_slides(self, data: bytes) -> list[SlideContent]:
        slides = []
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        for page_num, page in enumerate(reader.pages, start=1):
            lines = [
                line.strip()
                for line in (page.extract_text() or "").splitlines()
                if line.strip()
            ]
            title = lines[0] if lines else ""
            body = collapse_whitespace(" ".join(lines[1:]))
            slides.append(SlideContent(index=page_num, title=title, body=body))
        return slides

    def _extract_pptx_slides(self, data: bytes) -> list[SlideContent]:
        slides = []
        presentation = Presentation(io.BytesIO(data))
        for slide_num, slide in enumerate(presentation.slides, start=1):
            title_shape = slide.shapes.title
            title = collapse_whitespace(title_shape.text) if title_shape is not None else ""
            parts = []
            for shape in slide.shapes:
                if title_shape is not None and shape.shape_id == title_shape.shape_id:
                    continue
                if shape.has_text_frame and shape.text_frame.text.strip():
                    parts.append(shape.text_frame.text)
                elif getattr(shape, "has_table", False) and shape.has_table:
                    for row in shape.table.rows:
                        parts.extend(cell.text for cell in row.cells if cell.text.strip())
            if self.include_notes and slide.has_notes_slide:
                notes = slide.notes_slide.notes_text_frame
                if notes is not None and notes.text.strip():
                    parts.append(notes.text)
            slides.append(
                SlideContent(
                    index=slide_num,
                    title=title,
                    body=collapse_whitespace(" ".join(parts)),
                )
            )
        return slides

"""
Tests for per-slide text extraction.
"""

import io

from conftest import make_pdf
from pptx import Presentation

from slideavatar.document.extractor import SlideTextExtractor
from slideavatar.document.formats import DocumentFormat, detect_format


def _deck(slides: int) -> bytes:
    presentation = Presentation()
    layout = presentation.slide_layouts[1]
    for n in range(1, slides + 1):
        slide = presentation.slides.add_slide(layout)
        slide.shapes.title.text = f"Heading {n}"
        slide.placeholders[1].text = f"Point one\nPoint two for slide {n}"
        slide.notes_slide.notes_text_frame.text = f"Speaker note {n}"
    buffer = io.BytesIO()
    presentation.save(buffer)
    return buffer.getvalue()


class TestSlideTextExtractor:
    def test_pptx_titles_body_and_notes(self, limits):
        data = _deck(2)
        assert detect_format(data) is DocumentFormat.PPTX

        slides = SlideTextExtractor(limits).extract(data, DocumentFormat.PPTX)

        assert [s.index for s in slides] == [1, 2]
        assert slides[0].title == "Heading 1"
        assert "Point two for slide 1" in slides[0].body
        assert "Speaker note 1" in slides[0].body
        assert "Heading 1" not in slides[0].body

    def test_notes_can_be_excluded(self, limits):
        slides = SlideTextExtractor(limits, include_notes=False).extract(
            _deck(1), DocumentFormat.PPTX
        )
        assert "Speaker note" not in slides[0].body

    def test_capped_at_max_slides(self, limits):
        slides = SlideTextExtractor(limits).extract(
            _deck(4), DocumentFormat.PPTX, max_slides=3
        )
        assert len(slides) == 3

    def test_blank_pdf_pages(self, limits):
        slides = SlideTextExtractor(limits).extract(make_pdf(3), DocumentFormat.PDF)
        assert [s.index for s in slides] == [1, 2, 3]
        assert (slides[0].title, slides[0].body) == ("", "")

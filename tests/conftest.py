"""
Configuration file for pytest test suite.
"""

import io
import zipfile
from collections.abc import Callable

import pytest
from PIL import Image
from PyPDF2 import PdfWriter

from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.slide_plan import SlidePlan
from slideavatar.storage.local_storage import LocalStorage
from slideavatar.voice.resolver import VoiceResolver

DEFAULT_VOICE = "default-voice"


def make_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=720, height=405)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def make_png(color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (16, 9), color).save(buffer, "PNG")
    return buffer.getvalue()


def make_pptx_archive(slides: int, media: dict[str, bytes] | None = None) -> bytes:
    """Minimal zip with slide parts and media; enough for counting and image pulls."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("ppt/presentation.xml", "<presentation/>")
        for n in range(1, slides + 1):
            archive.writestr(f"ppt/slides/slide{n}.xml", "<sld/>")
        for name, blob in (media or {}).items():
            archive.writestr(f"ppt/media/{name}", blob)
    return buffer.getvalue()


def slide_records(count: int, words: int = 5) -> list[dict]:
    return [
        {
            "index": n,
            "title": f"Slide {n}",
            "speaker_text": " ".join(["word"] * words),
            "image_url": f"https://cdn.example.com/slides/slide-{n:02d}.png",
        }
        for n in range(1, count + 1)
    ]


@pytest.fixture
def limits() -> PipelineLimits:
    return PipelineLimits()


@pytest.fixture
def pdf_factory() -> Callable[[int], bytes]:
    return make_pdf


@pytest.fixture
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(base_path=tmp_path / "storage", base_url="http://localhost:8000/files")


@pytest.fixture
def voice_resolver() -> VoiceResolver:
    """Resolver backed by the bundled voice table."""
    return VoiceResolver(DEFAULT_VOICE)


@pytest.fixture
def five_slide_plan(limits) -> SlidePlan:
    return SlidePlan(slide_records(5), max_slides=limits.max_slides)

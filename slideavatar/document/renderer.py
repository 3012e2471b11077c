"""
Slide image rendering and upload.

Two strategies turn a source document into one raster per slide:

* :class:`FullRenderStrategy` converts decks to PDF with LibreOffice and
  rasterizes every page with ``pdftoppm``, keeping layout, backgrounds and text.
* :class:`EmbeddedImageStrategy` only pulls raster images already embedded in
  the document and assigns them to slides round-robin.

:class:`SlideImageRenderer` probes the toolchain, picks a strategy up front and
uploads the rasters under ``<namespace>/slides/<job_id>/slide-<NN>.<ext>``.
"""

from __future__ import annotations

import asyncio
import io
import re
import shutil
import subprocess
import tempfile
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from pathlib import Path, PurePosixPath

import PyPDF2
from loguru import logger
from PIL import Image

from slideavatar.configs.limits import PipelineLimits
from slideavatar.core.errors import (
    ExternalServiceError,
    RenderingError,
    ToolingUnavailableError,
)
from slideavatar.core.slide_plan import is_absolute_url
from slideavatar.storage import StorageProvider
from slideavatar.storage.paths import slide_image_object_key, validate_key_segment

from .formats import DocumentFormat, count_document_pages

_PAGE_SUFFIX = re.compile(r"-(\d+)\.png$")

_CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}
_EMBEDDED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "bmp", "tif", "tiff"}


@dataclass(frozen=True)
class SlideRaster:
    index: int
    data: bytes
    extension: str

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self.extension]


@dataclass(frozen=True)
class RenderedSlide:
    index: int
    image_url: str

    def to_dict(self) -> dict[str, object]:
        return {"index": self.index, "image_url": self.image_url}


class RenderStrategy(ABC):
    name: str = "abstract"

    @abstractmethod
    def is_available(self, input_format: DocumentFormat) -> bool:
        """Whether this strategy can run for the given input format."""

    @abstractmethod
    def produce(
        self,
        data: bytes,
        input_format: DocumentFormat,
        slide_count: int,
        work_dir: Path,
    ) -> list[SlideRaster]:
        """Return up to ``slide_count`` rasters, indexed from 1."""


class FullRenderStrategy(RenderStrategy):
    """LibreOffice + pdftoppm rendering of complete slides."""

    name = "full"

    def __init__(
        self,
        soffice_binary: str | None = None,
        pdftoppm_binary: str | None = None,
        width: int = 1920,
        height: int = 1080,
        timeout: float = 180.0,
    ) -> None:
        self.soffice_binary = soffice_binary
        self.pdftoppm_binary = pdftoppm_binary
        self.width = width
        self.height = height
        self.timeout = timeout

    def _find_soffice(self) -> str | None:
        if self.soffice_binary:
            return shutil.which(self.soffice_binary)
        return shutil.which("soffice") or shutil.which("libreoffice")

    def _find_pdftoppm(self) -> str | None:
        return shutil.which(self.pdftoppm_binary or "pdftoppm")

    def is_available(self, input_format: DocumentFormat) -> bool:
        if self._find_pdftoppm() is None:
            return False
        if input_format is DocumentFormat.PPTX:
            return self._find_soffice() is not None
        return True

    def _run(self, cmd: list[str], tool: str) -> None:
        logger.debug(f"Running {tool}: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise RenderingError(f"{tool} timed out after {self.timeout}s") from e
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise RenderingError(f"{tool} exited with {result.returncode}: {stderr}")

    def _convert_to_pdf(self, source: Path, work_dir: Path) -> Path:
        soffice = self._find_soffice()
        if soffice is None:
            raise ToolingUnavailableError("LibreOffice (soffice) is not installed")
        out_dir = work_dir / "pdf"
        out_dir.mkdir()
        self._run(
            [
                soffice,
                f"-env:UserInstallation=file://{work_dir / 'lo-profile'}",
                "--headless",
                "--convert-to",
                "pdf",
                "--outdir",
                str(out_dir),
                str(source),
            ],
            "soffice",
        )
        pdf_path = out_dir / f"{source.stem}.pdf"
        if not pdf_path.exists():
            raise RenderingError("LibreOffice did not produce a PDF")
        return pdf_path

    def produce(
        self,
        data: bytes,
        input_format: DocumentFormat,
        slide_count: int,
        work_dir: Path,
    ) -> list[SlideRaster]:
        pdftoppm = self._find_pdftoppm()
        if pdftoppm is None:
            raise ToolingUnavailableError("pdftoppm (poppler-utils) is not installed")

        source = work_dir / f"source.{input_format.value}"
        source.write_bytes(data)
        pdf_path = (
            self._convert_to_pdf(source, work_dir)
            if input_format is DocumentFormat.PPTX
            else source
        )

        out_dir = work_dir / "png"
        out_dir.mkdir()
        self._run(
            [
                pdftoppm,
                "-png",
                "-scale-to-x",
                str(self.width),
                "-scale-to-y",
                str(self.height),
                "-f",
                "1",
                "-l",
                str(slide_count),
                str(pdf_path),
                str(out_dir / "slide"),
            ],
            "pdftoppm",
        )

        pages = []
        for path in out_dir.glob("slide-*.png"):
            match = _PAGE_SUFFIX.search(path.name)
            if match:
                pages.append((int(match.group(1)), path))
        pages.sort()
        if not pages:
            raise RenderingError("pdftoppm produced no images")

        return [
            SlideRaster(index=i, data=path.read_bytes(), extension="png")
            for i, (_, path) in enumerate(pages[:slide_count], start=1)
        ]


class EmbeddedImageStrategy(RenderStrategy):
    """Best-effort slides made from images embedded in the document."""

    name = "embedded"

    def is_available(self, input_format: DocumentFormat) -> bool:
        return True

    def _pptx_media(self, data: bytes) -> list[tuple[str, bytes]]:
        media = []
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for name in sorted(archive.namelist()):
                path = PurePosixPath(name)
                if (
                    name.startswith("ppt/media/")
                    and path.suffix.lower().lstrip(".") in _EMBEDDED_EXTENSIONS
                ):
                    media.append((path.name, archive.read(name)))
        return media

    def _pdf_media(self, data: bytes) -> list[tuple[str, bytes]]:
        media = []
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        for page_num, page in enumerate(reader.pages, start=1):
            for image in page.images:
                media.append((f"page{page_num:03d}-{image.name}", image.data))
        return media

    def _to_raster(self, index: int, name: str, blob: bytes) -> SlideRaster:
        ext = PurePosixPath(name).suffix.lower().lstrip(".")
        if ext in _CONTENT_TYPES:
            return SlideRaster(index=index, data=blob, extension=ext)
        # Re-encode formats that video services do not accept
        with Image.open(io.BytesIO(blob)) as img:
            buffer = io.BytesIO()
            img.convert("RGB").save(buffer, "PNG")
        return SlideRaster(index=index, data=buffer.getvalue(), extension="png")

    def produce(
        self,
        data: bytes,
        input_format: DocumentFormat,
        slide_count: int,
        work_dir: Path,
    ) -> list[SlideRaster]:
        if input_format is DocumentFormat.PPTX:
            media = self._pptx_media(data)
        else:
            media = self._pdf_media(data)
        if not media:
            raise RenderingError("Document contains no embedded images to use as slides")

        logger.warning(
            f"Using {len(media)} embedded images for {slide_count} slides; "
            "slides will not show their full layout"
        )
        rasters = []
        for index in range(1, slide_count + 1):
            name, blob = media[(index - 1) % len(media)]
            rasters.append(self._to_raster(index, name, blob))
        return rasters


class SlideImageRenderer:
    """Render a document into uploaded, publicly addressable slide images."""

    def __init__(
        self,
        storage: StorageProvider,
        limits: PipelineLimits,
        full_strategy: RenderStrategy | None = None,
        embedded_strategy: RenderStrategy | None = None,
        namespace: str = "heygen",
    ) -> None:
        self.storage = storage
        self.limits = limits
        self.full_strategy = full_strategy or FullRenderStrategy()
        self.embedded_strategy = embedded_strategy or EmbeddedImageStrategy()
        self.namespace = namespace

    def select_strategy(
        self, input_format: DocumentFormat, require_full_rendering: bool
    ) -> RenderStrategy:
        if self.full_strategy.is_available(input_format):
            return self.full_strategy
        if require_full_rendering:
            raise ToolingUnavailableError(
                "Full slide rendering requires LibreOffice and pdftoppm, "
                "which are not installed"
            )
        logger.warning(
            "Rendering toolchain unavailable, falling back to embedded images"
        )
        return self.embedded_strategy

    def _upload(self, job_id: str, raster: SlideRaster) -> RenderedSlide:
        object_key = slide_image_object_key(
            self.namespace, job_id, raster.index, raster.extension
        )
        url = self.storage.upload_bytes(raster.data, object_key, raster.content_type)
        if not isinstance(url, str) or not is_absolute_url(url):
            raise ExternalServiceError(
                "storage", f"upload of {object_key} returned a non-absolute URL: {url!r}"
            )
        logger.debug(f"Uploaded slide {raster.index} to {url}")
        return RenderedSlide(index=raster.index, image_url=url)

    async def render(
        self,
        document: bytes,
        job_id: str,
        *,
        input_format: DocumentFormat,
        max_slides: int | None = None,
        require_full_rendering: bool = True,
        work_dir: Path | None = None,
    ) -> list[RenderedSlide]:
        validate_key_segment(job_id, "job id")
        ceiling = max_slides or self.limits.max_slides
        page_count = count_document_pages(document, input_format)
        slide_count = min(page_count, ceiling)
        if page_count > ceiling:
            logger.warning(
                f"Document has {page_count} pages, rendering only the first {ceiling}"
            )

        strategy = self.select_strategy(input_format, require_full_rendering)
        logger.info(
            f"Rendering {slide_count} slides for job {job_id} with {strategy.name} strategy"
        )

        loop = asyncio.get_running_loop()
        with tempfile.TemporaryDirectory(
            prefix=f"slideavatar-render-{job_id}-", dir=work_dir
        ) as tmp:
            rasters = await loop.run_in_executor(
                None,
                partial(strategy.produce, document, input_format, slide_count, Path(tmp)),
            )

        if len(rasters) != slide_count:
            logger.warning(
                f"Expected {slide_count} slide images, {strategy.name} strategy produced {len(rasters)}"
            )

        rendered = []
        for raster in sorted(rasters, key=lambda r: r.index):
            rendered.append(
                await loop.run_in_executor(None, partial(self._upload, job_id, raster))
            )
        return rendered

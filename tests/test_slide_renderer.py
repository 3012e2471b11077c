"""
Tests for slide image rendering and upload.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import make_pdf, make_png, make_pptx_archive

from slideavatar.core.errors import RenderingError, ToolingUnavailableError
from slideavatar.document.formats import DocumentFormat, count_document_pages, detect_format
from slideavatar.document.renderer import (
    EmbeddedImageStrategy,
    FullRenderStrategy,
    SlideImageRenderer,
)


def _unavailable_full_strategy() -> MagicMock:
    strategy = MagicMock(spec=FullRenderStrategy)
    strategy.name = "full"
    strategy.is_available.return_value = False
    return strategy


class TestFormats:
    def test_detect_pdf(self):
        assert detect_format(make_pdf(1)) is DocumentFormat.PDF

    def test_detect_pptx_by_contents(self):
        assert detect_format(make_pptx_archive(2)) is DocumentFormat.PPTX

    def test_detect_by_extension(self):
        assert detect_format(b"????", "https://x.example/deck.pptx?sig=1") is DocumentFormat.PPTX

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            detect_format(b"hello", "notes.txt")

    def test_count_pages(self):
        assert count_document_pages(make_pdf(3), DocumentFormat.PDF) == 3
        assert count_document_pages(make_pptx_archive(4), DocumentFormat.PPTX) == 4

    def test_count_pages_rejects_empty(self):
        with pytest.raises(ValueError):
            count_document_pages(b"", DocumentFormat.PDF)
        with pytest.raises(ValueError):
            count_document_pages(make_pptx_archive(0), DocumentFormat.PPTX)


class TestSlideImageRenderer:
    @pytest.mark.asyncio
    async def test_missing_tooling_fails_when_full_rendering_required(
        self, local_storage, limits
    ):
        renderer = SlideImageRenderer(
            local_storage, limits, full_strategy=_unavailable_full_strategy()
        )
        with pytest.raises(ToolingUnavailableError):
            await renderer.render(
                make_pdf(2),
                "job1",
                input_format=DocumentFormat.PDF,
                require_full_rendering=True,
            )

    @pytest.mark.asyncio
    async def test_embedded_fallback_uploads_one_image_per_slide(
        self, local_storage, limits
    ):
        deck = make_pptx_archive(
            3, media={"image1.png": make_png("red"), "image2.png": make_png("blue")}
        )
        renderer = SlideImageRenderer(
            local_storage, limits, full_strategy=_unavailable_full_strategy()
        )

        rendered = await renderer.render(
            deck, "job1", input_format=DocumentFormat.PPTX, require_full_rendering=False
        )

        assert [r.index for r in rendered] == [1, 2, 3]
        assert rendered[0].image_url == (
            "http://localhost:8000/files/heygen/slides/job1/slide-01.png"
        )
        slides_dir = local_storage.base_path / "heygen/slides/job1"
        # Round-robin reuse of the two embedded images
        assert (slides_dir / "slide-03.png").read_bytes() == (
            slides_dir / "slide-01.png"
        ).read_bytes()

    @pytest.mark.asyncio
    async def test_output_is_capped_at_max_slides(self, local_storage, limits):
        deck = make_pptx_archive(12, media={"image1.png": make_png()})
        renderer = SlideImageRenderer(
            local_storage, limits, full_strategy=_unavailable_full_strategy()
        )
        rendered = await renderer.render(
            deck, "job1", input_format=DocumentFormat.PPTX, require_full_rendering=False
        )
        assert len(rendered) == 9

    @pytest.mark.asyncio
    async def test_rejects_unsafe_job_id(self, local_storage, limits):
        renderer = SlideImageRenderer(local_storage, limits)
        with pytest.raises(ValueError):
            await renderer.render(make_pdf(1), "../etc", input_format=DocumentFormat.PDF)

    @pytest.mark.asyncio
    async def test_full_strategy_pdf(self, local_storage, limits):
        def fake_run(cmd, **kwargs):
            assert Path(cmd[0]).name == "pdftoppm"
            prefix = Path(cmd[-1])
            last = int(cmd[cmd.index("-l") + 1])
            for page in range(1, last + 1):
                prefix.parent.joinpath(f"{prefix.name}-{page}.png").write_bytes(make_png())
            return subprocess.CompletedProcess(cmd, 0, "", "")

        with (
            patch(
                "slideavatar.document.renderer.shutil.which",
                side_effect=lambda name: f"/usr/bin/{name}",
            ),
            patch("slideavatar.document.renderer.subprocess.run", side_effect=fake_run),
        ):
            renderer = SlideImageRenderer(local_storage, limits)
            rendered = await renderer.render(
                make_pdf(2), "job2", input_format=DocumentFormat.PDF
            )

        assert [r.image_url for r in rendered] == [
            "http://localhost:8000/files/heygen/slides/job2/slide-01.png",
            "http://localhost:8000/files/heygen/slides/job2/slide-02.png",
        ]


class TestFullRenderStrategy:
    def test_unavailable_without_soffice_for_pptx(self):
        strategy = FullRenderStrategy()
        with patch(
            "slideavatar.document.renderer.shutil.which",
            side_effect=lambda name: "/usr/bin/pdftoppm" if name == "pdftoppm" else None,
        ):
            assert strategy.is_available(DocumentFormat.PDF)
            assert not strategy.is_available(DocumentFormat.PPTX)

    def test_non_zero_exit_raises(self, tmp_path):
        strategy = FullRenderStrategy()
        failed = subprocess.CompletedProcess(["pdftoppm"], 1, "", "bad pdf")
        with (
            patch("slideavatar.document.renderer.shutil.which", return_value="/usr/bin/x"),
            patch("slideavatar.document.renderer.subprocess.run", return_value=failed),
        ):
            with pytest.raises(RenderingError, match="bad pdf"):
                strategy.produce(make_pdf(1), DocumentFormat.PDF, 1, tmp_path)

    def test_timeout_raises(self, tmp_path):
        strategy = FullRenderStrategy(timeout=1)
        with (
            patch("slideavatar.document.renderer.shutil.which", return_value="/usr/bin/x"),
            patch(
                "slideavatar.document.renderer.subprocess.run",
                side_effect=subprocess.TimeoutExpired("pdftoppm", 1),
            ),
        ):
            with pytest.raises(RenderingError, match="timed out"):
                strategy.produce(make_pdf(1), DocumentFormat.PDF, 1, tmp_path)


class TestEmbeddedImageStrategy:
    def test_no_images_is_an_error(self, tmp_path):
        with pytest.raises(RenderingError):
            EmbeddedImageStrategy().produce(
                make_pptx_archive(2), DocumentFormat.PPTX, 2, tmp_path
            )

    def test_unsupported_images_are_reencoded(self, tmp_path):
        import io

        from PIL import Image

        buffer = io.BytesIO()
        Image.new("RGB", (8, 8), "green").save(buffer, "GIF")
        deck = make_pptx_archive(1, media={"image1.gif": buffer.getvalue()})

        rasters = EmbeddedImageStrategy().produce(deck, DocumentFormat.PPTX, 1, tmp_path)

        assert rasters[0].extension == "png"
        assert rasters[0].data.startswith(b"\x89PNG")

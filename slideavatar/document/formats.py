"""
Source document format detection and container validation.
"""

from __future__ import annotations

import io
import re
import zipfile
from enum import Enum
from pathlib import PurePosixPath

import PyPDF2
from PyPDF2.errors import PdfReadError

_SLIDE_PART = re.compile(r"^ppt/slides/slide(\d+)\.xml$")


class DocumentFormat(str, Enum):
    PDF = "pdf"
    PPTX = "pptx"


def detect_format(data: bytes, filename: str | None = None) -> DocumentFormat:
    """Identify a document by its magic bytes, then by file extension."""
    if data[:4] == b"%PDF":
        return DocumentFormat.PDF
    if data[:2] == b"PK" and zipfile.is_zipfile(io.BytesIO(data)):
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            if any(name.startswith("ppt/") for name in archive.namelist()):
                return DocumentFormat.PPTX
    if filename:
        suffix = PurePosixPath(filename.split("?", 1)[0]).suffix.lower().lstrip(".")
        for fmt in DocumentFormat:
            if suffix == fmt.value:
                return fmt
    raise ValueError("Unsupported document format: expected a PDF or PPTX file")


def pptx_slide_parts(data: bytes) -> list[str]:
    """Slide part names of a deck, ordered by slide number."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = archive.namelist()
    except zipfile.BadZipFile as e:
        raise ValueError(f"Presentation is not a valid PPTX archive: {e}") from e
    numbered = []
    for name in names:
        match = _SLIDE_PART.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
    return [name for _, name in sorted(numbered)]


def count_document_pages(data: bytes, input_format: DocumentFormat) -> int:
    """Count pages/slides, failing when the container holds none."""
    if not data:
        raise ValueError("Source document is empty")
    if input_format is DocumentFormat.PPTX:
        count = len(pptx_slide_parts(data))
    else:
        try:
            count = len(PyPDF2.PdfReader(io.BytesIO(data)).pages)
        except PdfReadError as e:
            raise ValueError(f"PDF could not be read: {e}") from e
    if count == 0:
        raise ValueError(f"No slides found in {input_format.value} document")
    return count

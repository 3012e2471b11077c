"""
Shared helpers for pipeline step execution.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import httpx
from loguru import logger

from slideavatar.core.errors import ExternalServiceError


@contextmanager
def job_workspace(job_id: str) -> Iterator[Path]:
    """Temporary directory owned by one job, removed on every exit path."""
    with tempfile.TemporaryDirectory(prefix=f"slideavatar-{job_id}-") as tmp:
        yield Path(tmp)
    logger.debug(f"Removed workspace for job {job_id}")


async def download_document(url: str, timeout: float = 120.0) -> bytes:
    """Fetch a source document over HTTP(S)."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ExternalServiceError(
            "document download",
            f"GET {url} failed",
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise ExternalServiceError("document download", f"GET {url} failed: {e}") from e

    if not response.content:
        raise ExternalServiceError("document download", f"GET {url} returned no content")
    logger.info(f"Downloaded {len(response.content)} bytes from {url}")
    return response.content

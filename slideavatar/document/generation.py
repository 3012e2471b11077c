"""
Document generation (source text -> presentation file) via Gamma.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Any

import requests
from loguru import logger

from slideavatar.core.errors import ExternalServiceError

_DONE_STATUSES = {"completed", "success"}
_FAILED_STATUSES = {"failed", "error"}


@dataclass(frozen=True)
class GeneratedDocument:
    file_url: str
    generation_id: str | None = None


class DocumentGenerator(ABC):
    """Abstract interface for services that author a deck from text."""

    @abstractmethod
    async def generate(
        self,
        source_text: str,
        *,
        max_slides: int,
        language: str,
        export_format: str = "pptx",
    ) -> GeneratedDocument:
        """Generate a presentation and return a download URL for the export."""
        raise NotImplementedError

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the generator is configured."""
        raise NotImplementedError


class GammaDocumentGenerator(DocumentGenerator):
    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://public-api.gamma.app",
        theme_id: str | None = None,
        tone: str | None = None,
        poll_interval: float = 5.0,
        timeout: float = 600.0,
        request_timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.theme_id = theme_id
        self.tone = tone
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.request_timeout = request_timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        return {"X-API-KEY": self.api_key or "", "Content-Type": "application/json"}

    def build_request(
        self, source_text: str, max_slides: int, language: str, export_format: str
    ) -> dict[str, Any]:
        text_options: dict[str, Any] = {"language": language, "amount": "medium"}
        if self.tone:
            text_options["tone"] = self.tone
        payload: dict[str, Any] = {
            "inputText": source_text.strip(),
            "textMode": "generate",
            "format": "presentation",
            "numCards": max_slides,
            "exportAs": export_format,
            "textOptions": text_options,
        }
        if self.theme_id:
            payload["themeId"] = self.theme_id
        return payload

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method, url, headers=self._headers(), timeout=self.request_timeout, **kwargs
            )
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            body = e.response.text[:500] if e.response is not None else ""
            raise ExternalServiceError("gamma", f"{method} {path} failed: {body}", status_code=status) from e
        except (requests.RequestException, ValueError) as e:
            raise ExternalServiceError("gamma", f"{method} {path} failed: {e}") from e
        if not isinstance(data, dict):
            raise ExternalServiceError("gamma", f"Unexpected response from {path}")
        return data

    @staticmethod
    def _export_url(data: dict[str, Any], export_format: str) -> str | None:
        result = data.get("result") if isinstance(data.get("result"), dict) else data
        url = result.get("exportUrl")
        if not url and isinstance(result.get("export"), dict):
            url = result["export"].get(export_format)
        return url if isinstance(url, str) and url else None

    async def generate(
        self,
        source_text: str,
        *,
        max_slides: int,
        language: str,
        export_format: str = "pptx",
    ) -> GeneratedDocument:
        if not self.is_available():
            raise ValueError("Gamma API key not configured. Please set GAMMA_API_KEY")
        if not source_text or not source_text.strip():
            raise ValueError("Source text is required for document generation")

        loop = asyncio.get_running_loop()
        payload = self.build_request(source_text, max_slides, language, export_format)
        created = await loop.run_in_executor(
            None, partial(self._request, "POST", "/v1.0/generations", json=payload)
        )
        generation_id = created.get("generationId") or created.get("id")
        if not generation_id:
            raise ExternalServiceError("gamma", "No generationId returned")
        logger.info(f"Gamma generation {generation_id} created ({max_slides} cards)")

        deadline = time.monotonic() + self.timeout
        while True:
            data = await loop.run_in_executor(
                None, partial(self._request, "GET", f"/v1.0/generations/{generation_id}")
            )
            status = str(data.get("status") or data.get("state") or "").lower()
            logger.debug(f"Gamma generation {generation_id} status: {status}")

            if status in _DONE_STATUSES:
                url = self._export_url(data, export_format)
                if not url:
                    raise ExternalServiceError(
                        "gamma", f"Generation {generation_id} completed without an export URL"
                    )
                return GeneratedDocument(file_url=url, generation_id=str(generation_id))
            if status in _FAILED_STATUSES:
                reason = data.get("error") or data.get("message") or "Unknown error"
                raise ExternalServiceError("gamma", f"Generation {generation_id} failed: {reason}")
            if time.monotonic() >= deadline:
                raise TimeoutError(
                    f"Gamma generation {generation_id} not finished after {self.timeout}s"
                )
            await asyncio.sleep(self.poll_interval)

"""
HeyGen templated video service (video package)
"""

import asyncio
from functools import partial
from typing import Any

import requests
from loguru import logger

from slideavatar.core.errors import ExternalServiceError

from .interface import TemplateVideoInterface


class HeyGenTemplateService(TemplateVideoInterface):
    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.heygen.com",
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.api_url = f"{base_url.rstrip('/')}/v2"
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key and self.api_key != "your_heygen_api_key_here")

    def _post_generate(self, template_id: str, payload: dict[str, Any]) -> str:
        url = f"{self.api_url}/template/{template_id}/generate"
        headers = {"X-Api-Key": self.api_key or "", "Content-Type": "application/json"}
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            body = e.response.text[:500] if e.response is not None else ""
            logger.error(f"HeyGen template generation failed: {status} {body}")
            raise ExternalServiceError("heygen", f"template generate failed: {body}", status_code=status) from e
        except (requests.RequestException, ValueError) as e:
            logger.error(f"HeyGen template generation failed: {e}")
            raise ExternalServiceError("heygen", f"template generate failed: {e}") from e

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            raise ExternalServiceError("heygen", f"template generate returned error: {error}")
        video_id = (data.get("data") or {}).get("video_id") if isinstance(data, dict) else None
        if not video_id:
            raise ExternalServiceError("heygen", "response did not include a video_id")
        return str(video_id)

    async def submit(self, template_id: str, payload: dict[str, Any]) -> str:
        if not self.is_available():
            raise ValueError(
                "HeyGen API key not configured. Please set HEYGEN_API_KEY in your .env file"
            )
        logger.info(
            f"Submitting HeyGen template {template_id} with {len(payload.get('variables', {}))} variables"
        )
        loop = asyncio.get_running_loop()
        video_id = await loop.run_in_executor(
            None, partial(self._post_generate, template_id, payload)
        )
        logger.info(f"HeyGen video generation started: {video_id}")
        return video_id

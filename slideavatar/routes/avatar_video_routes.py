"""
Avatar video routes.

Runs the full pipeline synchronously for one request and returns either the
submitted video id or the failing step.
"""

from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from loguru import logger

from slideavatar.configs.config import config
from slideavatar.pipeline import AvatarVideoPipeline, build_default_pipeline
from slideavatar.schemas.avatar_video import AvatarVideoRequest
from slideavatar.voice import VoiceResolver, normalize_language_code

router = APIRouter(prefix="/api", tags=["avatar-videos"])


@lru_cache(maxsize=1)
def get_pipeline() -> AvatarVideoPipeline:
    return build_default_pipeline()


@lru_cache(maxsize=1)
def get_voice_resolver() -> VoiceResolver:
    return VoiceResolver(
        config.heygen_default_voice_id, voices_path=config.heygen_voices_path
    )


@router.post("/avatar-videos")
async def create_avatar_video(
    request: AvatarVideoRequest,
    pipeline: AvatarVideoPipeline = Depends(get_pipeline),
) -> Any:
    """Turn the requested deck into a submitted avatar video.

    Returns 200 with the video id and slide plan, or 502 with the failed step
    and the per-step job state. Server-side file paths are only accepted from
    the command line.
    """
    if request.document_path is not None:
        raise HTTPException(
            status_code=400,
            detail="document_path is not accepted over HTTP; use document_url",
        )
    result = await pipeline.run(request)
    if not result["success"]:
        logger.warning(
            f"Avatar video request failed at {result['failed_step']}: {result['error']}"
        )
        return JSONResponse(status_code=502, content=result)
    return result


@router.get("/voices/resolve")
async def resolve_voice(
    language: str, resolver: VoiceResolver = Depends(get_voice_resolver)
) -> dict[str, Any]:
    """Show which voice a narration language maps to."""
    if not language.strip():
        raise HTTPException(status_code=400, detail="language is required")
    return {
        "language": language,
        "normalized": normalize_language_code(language),
        "voice_id": resolver.resolve(language),
    }

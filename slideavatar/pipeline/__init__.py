"""Avatar video pipeline."""

from .coordinator import (
    AvatarVideoPipeline,
    PipelineResult,
    SourceDocument,
    build_default_pipeline,
)

__all__ = [
    "AvatarVideoPipeline",
    "PipelineResult",
    "SourceDocument",
    "build_default_pipeline",
]

"""
Pydantic models for avatar video requests.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

_JOB_ID_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.")


class AvatarVideoRequest(BaseModel):
    """Schema for a request to turn a deck (or text) into an avatar video."""

    source_text: str | None = Field(
        None, description="Text to generate a presentation from"
    )
    document_url: str | None = Field(
        None, description="URL of an existing PDF or PPTX presentation"
    )
    document_path: str | None = Field(
        None, description="Local path of an existing PDF or PPTX presentation"
    )
    language: str = Field(default="en", description="Narration language code")
    mode: str = Field(default="avatar", description="Generation mode")
    title: str | None = Field(None, description="Video title")
    voice_id: str | None = Field(None, description="Explicit voice id")
    job_id: str | None = Field(None, description="Caller-supplied job id")
    caption: bool | None = Field(None, description="Enable captions")
    require_full_rendering: bool | None = Field(
        None, description="Fail instead of using embedded images when rendering tools are missing"
    )

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if (v or "").strip().lower() != "avatar":
            raise ValueError("Only 'avatar' mode is supported")
        return "avatar"

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Normalize language code."""
        return (v or "en").strip() or "en"

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v or not set(v) <= _JOB_ID_CHARS or v.startswith(".") or ".." in v:
            raise ValueError("job_id may only contain letters, digits, '-', '_' and '.'")
        return v

    @model_validator(mode="after")
    def validate_single_source(self) -> AvatarVideoRequest:
        sources = [
            value
            for value in (self.source_text, self.document_url, self.document_path)
            if value is not None and value.strip()
        ]
        if len(sources) != 1:
            raise ValueError(
                "Exactly one of source_text, document_url or document_path is required"
            )
        return self

"""
Tests for the avatar video request schema.
"""

import pytest
from pydantic import ValidationError

from slideavatar.schemas.avatar_video import AvatarVideoRequest


class TestAvatarVideoRequest:
    def test_defaults(self):
        request = AvatarVideoRequest(document_url="https://x.example/deck.pdf")
        assert request.language == "en"
        assert request.mode == "avatar"
        assert request.caption is None
        assert request.require_full_rendering is None

    @pytest.mark.parametrize(
        "fields",
        [
            {},
            {"source_text": "  "},
            {"source_text": "Text", "document_url": "https://x.example/deck.pdf"},
            {"document_url": "https://x.example/a.pdf", "document_path": "/tmp/a.pdf"},
        ],
    )
    def test_exactly_one_source(self, fields):
        with pytest.raises(ValidationError, match="Exactly one"):
            AvatarVideoRequest(**fields)

    def test_only_avatar_mode(self):
        assert AvatarVideoRequest(source_text="t", mode=" Avatar ").mode == "avatar"
        with pytest.raises(ValidationError):
            AvatarVideoRequest(source_text="t", mode="podcast")

    def test_blank_language_defaults_to_english(self):
        assert AvatarVideoRequest(source_text="t", language="  ").language == "en"

    @pytest.mark.parametrize("job_id", ["../x", "a/b", ".hidden", "has space"])
    def test_unsafe_job_id(self, job_id):
        with pytest.raises(ValidationError):
            AvatarVideoRequest(source_text="t", job_id=job_id)

    def test_job_id_is_trimmed(self):
        assert AvatarVideoRequest(source_text="t", job_id=" job-1 ").job_id == "job-1"

"""
Unit tests for the local storage module.
"""

import tempfile
from pathlib import Path

import pytest

from slideavatar.storage import StorageConfig, create_storage_provider
from slideavatar.storage.local_storage import LocalStorage
from slideavatar.storage.paths import slide_image_object_key, validate_key_segment


class TestLocalStorage:
    """Test cases for the LocalStorage class."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for testing."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            yield Path(tmp_dir)

    @pytest.fixture
    def local_storage(self, temp_dir):
        return LocalStorage(base_path=temp_dir, base_url="https://files.example.com/")

    def test_upload_bytes_returns_public_url(self, local_storage, temp_dir):
        url = local_storage.upload_bytes(b"png", "heygen/slides/j/slide-01.png", "image/png")

        assert url == "https://files.example.com/heygen/slides/j/slide-01.png"
        assert (temp_dir / "heygen/slides/j/slide-01.png").read_bytes() == b"png"

    def test_upload_overwrites_existing_object(self, local_storage, temp_dir):
        local_storage.upload_bytes(b"first", "a/b.bin")
        local_storage.upload_bytes(b"second", "a/b.bin")
        assert (temp_dir / "a/b.bin").read_bytes() == b"second"

    def test_file_url_strips_leading_slash(self, local_storage):
        assert local_storage.get_file_url("/x.txt") == "https://files.example.com/x.txt"

    def test_key_cannot_escape_root(self, local_storage):
        with pytest.raises(ValueError):
            local_storage.upload_bytes(b"x", "../outside.txt")

    def test_factory_creates_local_storage(self, temp_dir):
        provider = create_storage_provider(
            StorageConfig(provider="local", base_path=str(temp_dir))
        )
        assert isinstance(provider, LocalStorage)

    def test_factory_rejects_unknown_provider(self):
        with pytest.raises(ValueError):
            create_storage_provider(StorageConfig(provider="ftp"))


class TestObjectKeys:
    def test_slide_image_key(self):
        assert (
            slide_image_object_key("heygen", "job-1", 3, ".PNG")
            == "heygen/slides/job-1/slide-03.png"
        )

    @pytest.mark.parametrize("value", ["", "../x", "a/b", ".hidden", "a..b"])
    def test_unsafe_segments(self, value):
        with pytest.raises(ValueError):
            validate_key_segment(value)

    def test_index_must_be_one_based(self):
        with pytest.raises(ValueError):
            slide_image_object_key("heygen", "job", 0, "png")

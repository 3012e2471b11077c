"""
Unit tests for the S3 storage backend with a mocked boto3 client.
"""

from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("boto3")

from slideavatar.storage.s3_storage import S3Storage  # noqa: E402


class TestS3Storage:
    @pytest.fixture
    def s3_client(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://bucket.s3.amazonaws.com/k?sig=1"
        return client

    def test_upload_returns_public_url(self, s3_client):
        with patch("slideavatar.storage.s3_storage.boto3.client", return_value=s3_client):
            storage = S3Storage(
                "bucket", public_base_url="https://cdn.example.com/", verify_bucket=False
            )
            url = storage.upload_bytes(b"png", "heygen/slides/j/slide-01.png", "image/png")

        assert url == "https://cdn.example.com/heygen/slides/j/slide-01.png"
        s3_client.put_object.assert_called_once_with(
            Bucket="bucket",
            Key="heygen/slides/j/slide-01.png",
            Body=b"png",
            ContentType="image/png",
        )

    def test_upload_without_public_base_is_presigned(self, s3_client):
        with patch("slideavatar.storage.s3_storage.boto3.client", return_value=s3_client):
            storage = S3Storage("bucket", url_expires_in=600, verify_bucket=False)
            url = storage.upload_bytes(b"png", "k")

        assert url == "https://bucket.s3.amazonaws.com/k?sig=1"
        assert s3_client.generate_presigned_url.call_args.kwargs["ExpiresIn"] == 600

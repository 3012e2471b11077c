"""
S3 storage backend.

Uploads return a URL under ``public_base_url`` when the bucket is fronted by a
CDN or a public-read policy, and a presigned GET URL otherwise.
"""

import logging

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from . import StorageProvider

logger = logging.getLogger(__name__)


class S3Storage(StorageProvider):
    def __init__(
        self,
        bucket_name: str,
        region_name: str | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        url_expires_in: int = 86400,
        verify_bucket: bool = True,
    ) -> None:
        """
        Args:
            bucket_name: Target bucket
            endpoint_url: S3-compatible endpoint (MinIO, R2, ...)
            public_base_url: Prefix for public object URLs
            url_expires_in: Lifetime of presigned URLs returned by uploads
            verify_bucket: Check bucket access at construction
        """
        if not bucket_name:
            raise ValueError("AWS_S3_BUCKET_NAME is required for S3 storage")
        self.bucket_name = bucket_name
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.url_expires_in = url_expires_in
        self.client = boto3.client(
            "s3",
            region_name=region_name,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            endpoint_url=endpoint_url,
        )
        if verify_bucket:
            self._check_bucket()

    def _check_bucket(self) -> None:
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
        except NoCredentialsError as e:
            raise ValueError("AWS credentials are not configured") from e
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            raise ValueError(
                f"S3 bucket '{self.bucket_name}' is not accessible (code {code})"
            ) from e
        logger.info(f"Using S3 bucket {self.bucket_name}")

    def get_file_url(self, object_key: str, expires_in: int = 3600) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{object_key}"
        url: str = self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": object_key},
            ExpiresIn=expires_in,
        )
        return url

    def upload_bytes(
        self, data: bytes, object_key: str, content_type: str | None = None
    ) -> str:
        params = {"Bucket": self.bucket_name, "Key": object_key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            self.client.put_object(**params)
        except ClientError as e:
            logger.error(f"S3 upload of {object_key} failed: {e}")
            raise
        logger.debug(f"Uploaded {len(data)} bytes to s3://{self.bucket_name}/{object_key}")
        return self.get_file_url(object_key, expires_in=self.url_expires_in)

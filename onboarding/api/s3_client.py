"""S3 client for submission images and documents.

Uses boto3 with asyncio.to_thread to avoid blocking the event loop.
Two logical buckets are used: one for images (logos, photos, dishes, deals,
JPEG menus) and one for documents (PDF menus).
"""
import asyncio
import logging
import time

import boto3
from botocore.exceptions import ClientError

from onboarding.metrics import (
    S3_UPLOADS_TOTAL,
    S3_UPLOAD_DURATION_SECONDS,
    S3_UPLOAD_BYTES,
    S3_DELETES_TOTAL,
)

logger = logging.getLogger(__name__)


class S3Client:
    """Async-friendly S3 client for submission file storage."""

    def __init__(
        self,
        images_bucket: str,
        documents_bucket: str,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        public_base_url: str = "",
    ):
        self.images_bucket = images_bucket
        self.documents_bucket = documents_bucket
        self.region = region
        self.public_base_url = public_base_url.rstrip("/")
        self._s3 = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
        )

    async def close(self):
        """Close the S3 client."""
        pass  # boto3 client doesn't need explicit close

    def public_url(self, bucket: str, key: str) -> str:
        """Durable retrieval URL for an object."""
        if self.public_base_url:
            return f"{self.public_base_url}/{bucket}/{key}"
        return f"https://{bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload_bytes(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload bytes to S3.

        Args:
            bucket: Target bucket (images or documents)
            key: Object key, e.g. "dishes/1718000000000-dish-0.webp"
            data: Raw file bytes
            content_type: MIME type stored with the object

        Returns:
            Public URL of the stored object

        Raises:
            ClientError: If S3 rejects the upload
        """
        start_time = time.perf_counter()
        try:
            await asyncio.to_thread(
                self._s3.put_object,
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            S3_UPLOAD_DURATION_SECONDS.observe(time.perf_counter() - start_time)
            S3_UPLOADS_TOTAL.labels(bucket=bucket, status="error").inc()
            logger.error(f"[S3Client] Failed to upload {bucket}/{key}: {e}")
            raise

        S3_UPLOAD_DURATION_SECONDS.observe(time.perf_counter() - start_time)
        S3_UPLOADS_TOTAL.labels(bucket=bucket, status="success").inc()
        S3_UPLOAD_BYTES.observe(len(data))
        logger.debug(f"[S3Client] Uploaded {bucket}/{key} ({len(data)} bytes)")
        return self.public_url(bucket, key)

    async def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object. Missing objects are not an error for S3."""
        try:
            await asyncio.to_thread(self._s3.delete_object, Bucket=bucket, Key=key)
        except ClientError as e:
            S3_DELETES_TOTAL.labels(status="error").inc()
            logger.error(f"[S3Client] Failed to delete {bucket}/{key}: {e}")
            raise
        S3_DELETES_TOTAL.labels(status="success").inc()
        logger.debug(f"[S3Client] Deleted {bucket}/{key}")

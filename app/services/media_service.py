"""
Media upload adapter: hosts local image files on S3 and returns their URL
"""

import asyncio
import logging
import mimetypes
import os
from typing import Optional
from uuid import uuid4

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException, status

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class MediaService:
    """Upload contract: ``upload(local_path)`` returns a hosted URL or None."""

    async def upload(self, local_path: Optional[str]) -> Optional[str]:
        raise NotImplementedError


class S3MediaService(MediaService):
    """Media service backed by an S3 bucket."""

    def __init__(self, s3_client=None, bucket_name: Optional[str] = None):
        """
        Initialize the S3 client.

        Args:
            s3_client: Preconfigured boto3 S3 client, built from settings when omitted
            bucket_name: Target bucket, defaults to the configured bucket
        """
        self.bucket_name = bucket_name or settings.s3_bucket_name
        if not self.bucket_name:
            raise ValueError("S3 bucket name must be configured")

        if s3_client is None:
            if not settings.s3_configured:
                raise ValueError("AWS credentials and S3 bucket name must be configured")

            config = Config(
                region_name=settings.aws_region,
                retries={'max_attempts': 3, 'mode': 'adaptive'},
                max_pool_connections=50
            )
            s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
                config=config
            )

        self.s3_client = s3_client

    async def upload(self, local_path: Optional[str]) -> Optional[str]:
        """
        Upload a local file and remove it afterwards.

        Args:
            local_path: Path of the file to upload

        Returns:
            Optional[str]: Public URL of the hosted file, None if nothing was uploaded
        """
        if not local_path:
            return None

        try:
            s3_key = self._generate_s3_key(local_path)
            content_type = mimetypes.guess_type(local_path)[0] or 'application/octet-stream'

            with open(local_path, 'rb') as file:
                body = file.read()

            await asyncio.to_thread(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=body,
                ContentType=content_type
            )

            url = self._public_url(s3_key)
            logger.info(f"Uploaded {os.path.basename(local_path)} to {url}")
            return url

        except (ClientError, BotoCoreError, OSError) as e:
            logger.error(f"Media upload failed for {local_path}: {e}")
            return None
        finally:
            self._remove_local_file(local_path)

    def _generate_s3_key(self, local_path: str) -> str:
        """Unique key under the media prefix, keeping the file extension."""
        extension = ""
        filename = os.path.basename(local_path)
        if "." in filename:
            extension = filename.rsplit(".", 1)[-1].lower()

        unique_filename = f"{uuid4()}.{extension}" if extension else str(uuid4())
        return f"{settings.s3_media_prefix}{unique_filename}"

    def _public_url(self, s3_key: str) -> str:
        if settings.s3_public_base_url:
            return f"{settings.s3_public_base_url.rstrip('/')}/{s3_key}"
        return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{s3_key}"

    @staticmethod
    def _remove_local_file(local_path: str) -> None:
        try:
            if os.path.exists(local_path):
                os.remove(local_path)
        except OSError as e:
            logger.warning(f"Could not remove temporary file {local_path}: {e}")


_media_service: Optional[MediaService] = None


def get_media_service() -> MediaService:
    """
    Dependency returning the shared media service.

    Raises:
        HTTPException: 503 when S3 is not configured
    """
    global _media_service
    if _media_service is None:
        try:
            _media_service = S3MediaService()
        except ValueError as e:
            logger.error(f"Media storage unavailable: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Media storage not configured. Please configure AWS credentials and S3 bucket."
            )
    return _media_service

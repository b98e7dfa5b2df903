"""
File service for staging uploaded images on local disk
"""

import logging
import os
from typing import Iterable, Optional
from uuid import uuid4

import aiofiles
from fastapi import UploadFile

from app.config import get_settings
from app.core.errors import ValidationError

settings = get_settings()
logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class FileService:
    """Stage multipart uploads in the temp directory for the media service."""

    def __init__(self, temp_directory: Optional[str] = None):
        self.temp_directory = temp_directory or settings.temp_directory

    async def save_temp(self, file: Optional[UploadFile]) -> Optional[str]:
        """
        Write an uploaded image to the temp directory.

        Args:
            file: Uploaded file, may be absent

        Returns:
            Optional[str]: Local path, None when no file was sent

        Raises:
            ValidationError: If the file type is not an allowed image type or
                the file is too large
        """
        if file is None or not file.filename:
            return None

        extension = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
        if extension not in settings.allowed_image_types:
            raise ValidationError(
                f"Unsupported file type. Allowed: {', '.join(settings.allowed_image_types)}"
            )

        os.makedirs(self.temp_directory, exist_ok=True)
        local_path = os.path.join(self.temp_directory, f"{uuid4()}.{extension}")
        max_size_bytes = settings.max_image_size_mb * 1024 * 1024

        written = 0
        async with aiofiles.open(local_path, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_size_bytes:
                    break
                await out.write(chunk)

        if written > max_size_bytes:
            self.discard(local_path)
            raise ValidationError(f"File too large. Maximum size: {settings.max_image_size_mb}MB")

        logger.debug(f"Staged {file.filename} at {local_path} ({written} bytes)")
        return local_path

    @staticmethod
    def discard(*paths: Optional[str]) -> None:
        """Remove staged files that were not consumed by an upload."""
        for path in paths:
            if path and os.path.exists(path):
                try:
                    os.remove(path)
                except OSError as e:
                    logger.warning(f"Could not remove temporary file {path}: {e}")

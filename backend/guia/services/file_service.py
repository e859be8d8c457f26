"""
Guia Backend — Local File Media Service
=========================================

What:  MediaService that writes images to the local disk.
Why:   Development and tests run without media-host credentials.
How:   Files land in <storage_root>/<folder>/<uuid><ext>; main.py mounts
       storage_root at /uploads, so the returned URL is
       <public_base_url>/uploads/<folder>/<uuid><ext>.

Security Model:
    1. Extension check against the allowed image types
    2. Size check before anything is written
    3. UUID filename, so no client input reaches the file system path
    4. Folder names come from the kind registry, never from the request
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Tuple

import aiofiles

from guia.exceptions import FileStorageError
from guia.services.media_base import MediaService, UploadedImage

logger = logging.getLogger(__name__)


class LocalMediaService(MediaService):
    """
    Stores uploads on disk.

    Directory Structure:
        uploads/
        ├── restaurants_images/
        │   ├── a1b2c3d4-....jpg
        │   └── e5f6g7h8-....png
        └── movieTheaters_images/
            └── ...
    """

    def __init__(self, storage_root: str, public_base_url: str, max_file_size: int):
        super().__init__(max_file_size=max_file_size)
        self.storage_root = Path(storage_root).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalMediaService initialized with storage_root=%s", self.storage_root)

    def _generate_storage_path(self, folder: str, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, path relative to storage_root)."""
        relative_path = f"{folder}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def public_url(self, relative_path: str) -> str:
        return f"{self.public_base_url}/uploads/{relative_path}"

    async def upload(self, image: UploadedImage, folder: str) -> str:
        ext = self.validate_extension(image)
        absolute_path, relative_path = self._generate_storage_path(folder, ext)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(image.content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(image.content))
        return self.public_url(relative_path)

    async def health_check(self) -> bool:
        return self.storage_root.is_dir() and os.access(self.storage_root, os.W_OK)

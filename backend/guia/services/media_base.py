"""
Guia Backend — Abstract Media Service Interface
=================================================

What:  Contract for storing listing images and returning their public URL.
How:   CloudinaryMediaService (external media host) and LocalMediaService
       (disk + /uploads static mount) implement upload() and health_check().
       Validation and the concurrent multi-upload live here so both backends
       behave the same.
Who:   Called by ListingService while creating or updating a listing.
When:  After every JSON-encoded form field has parsed, before persistence.

Failure Semantics:
    upload_many() starts every upload at once and fails as a whole if any
    single upload fails. Images that already reached the host are not
    removed.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import magic

from guia.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# Sniffed content type → extensions a file of that type may carry
ALLOWED_MIME_TYPES = {
    "image/png": {".png"},
    "image/jpeg": {".jpg", ".jpeg"},
    "image/gif": {".gif"},
    "image/webp": {".webp"},
}

ALLOWED_EXTENSIONS = set().union(*ALLOWED_MIME_TYPES.values())


@dataclass
class UploadedImage:
    """
    One `images` part of a multipart request, already read into memory.

    `detected_type` is filled by MediaService.validate_mime_type() from the
    file's bytes; the client's `content_type` header is never trusted.
    """
    filename: str
    content: bytes
    content_type: Optional[str] = None
    detected_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()


class MediaService(ABC):
    """
    Stores images and hands back URLs.

    Contract:
        - upload() returns an absolute URL that serves the stored image
        - backend failures surface as MediaUploadError or FileStorageError
        - validate() rejects unsupported extensions, oversize files and
          content whose sniffed type is not an image of that extension,
          with ValidationError, before anything is stored
    """

    def __init__(self, max_file_size: int):
        self.max_file_size = max_file_size

    def validate_extension(self, image: UploadedImage) -> str:
        ext = image.extension
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="images",
                context={"extension": ext, "filename": image.filename},
            )
        return ext

    def validate_size(self, image: UploadedImage) -> None:
        size = len(image.content)
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="images",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    def validate_mime_type(self, image: UploadedImage) -> str:
        """
        Sniff the real content type from the file's header bytes.

        A renamed executable keeps its magic numbers, so `photo.jpg` holding
        a PE binary is rejected here even though its extension passes.

        Returns:
            Detected MIME type, also stored on `image.detected_type`

        Raises:
            ValidationError:  not an allowed image type, or the bytes do not
                              match the file's extension
            FileStorageError: libmagic itself failed
        """
        try:
            mime_type = magic.from_buffer(image.content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed for %s: %s", image.filename, str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"filename": image.filename, "error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image (PNG, JPEG, GIF or WebP)."
                ),
                field="images",
                context={"detected_mime": mime_type, "filename": image.filename},
            )
        if image.extension not in ALLOWED_MIME_TYPES[mime_type]:
            raise ValidationError(
                message=f"File '{image.filename}' does not contain {image.extension} image data.",
                field="images",
                context={"detected_mime": mime_type, "extension": image.extension},
            )

        image.detected_type = mime_type
        return mime_type

    def validate(self, images: Sequence[UploadedImage]) -> None:
        """Check every image before the first upload starts."""
        for image in images:
            self.validate_extension(image)
            self.validate_size(image)
            self.validate_mime_type(image)

    @abstractmethod
    async def upload(self, image: UploadedImage, folder: str) -> str:
        """
        Store one image under `folder` and return its public URL.

        Args:
            image:  The uploaded file
            folder: Per-kind folder, e.g. "restaurants_images"
        """
        ...

    async def upload_many(self, images: Sequence[UploadedImage], folder: str) -> List[str]:
        """
        Upload every image concurrently. URLs come back in input order.

        Returns [] without touching the backend when `images` is empty.
        """
        if not images:
            return []
        self.validate(images)
        urls = await asyncio.gather(*(self.upload(image, folder) for image in images))
        logger.info("Uploaded %d image(s) to %s", len(urls), folder)
        return list(urls)

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the backend can accept uploads. Used by GET /health."""
        ...

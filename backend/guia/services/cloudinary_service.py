"""
Guia Backend — Cloudinary Media Service
=========================================

What:  MediaService backed by the Cloudinary media host.
How:   Each image is sent as a base64 data URI into the kind's folder
       ("restaurants_images", ...) and the returned `secure_url` is what the
       listing stores. The Cloudinary SDK is synchronous, so calls run in
       Starlette's threadpool to keep the event loop free.
Who:   Built by build_context() when MEDIA_BACKEND=cloudinary.
"""

import base64
import logging
import time

import cloudinary
import cloudinary.api
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from guia.exceptions import MediaUploadError
from guia.services.media_base import MediaService, UploadedImage

logger = logging.getLogger(__name__)


class CloudinaryMediaService(MediaService):
    """Uploads to Cloudinary; one instance per application context."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, max_file_size: int):
        super().__init__(max_file_size=max_file_size)
        self.cloud_name = cloud_name
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        logger.info("CloudinaryMediaService initialized for cloud '%s'", cloud_name)

    @staticmethod
    def to_data_uri(image: UploadedImage, mime_type: str) -> str:
        encoded = base64.b64encode(image.content).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"

    async def upload(self, image: UploadedImage, folder: str) -> str:
        # Sniffed type, never the client's Content-Type header
        mime_type = image.detected_type or self.validate_mime_type(image)
        start = time.perf_counter()
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                self.to_data_uri(image, mime_type),
                folder=folder,
                resource_type="image",
            )
        except Exception as e:
            logger.error(
                "Cloudinary upload failed for %s into %s: %s",
                image.filename,
                folder,
                str(e),
                exc_info=True,
            )
            raise MediaUploadError(
                context={"folder": folder, "filename": image.filename, "error": type(e).__name__},
            )

        url = result.get("secure_url")
        if not url:
            raise MediaUploadError(
                context={"folder": folder, "filename": image.filename, "error": "missing secure_url"},
            )

        logger.info(
            "Uploaded %s to Cloudinary in %.2fs",
            image.filename,
            time.perf_counter() - start,
        )
        return url

    async def health_check(self) -> bool:
        try:
            result = await run_in_threadpool(cloudinary.api.ping)
            return result.get("status") == "ok"
        except Exception as e:
            logger.warning("Cloudinary health check failed: %s", str(e))
            return False

"""
Event image upload to the asset host
"""

import io
import logging
import os
import uuid
from urllib.parse import urlparse

import cloudinary.uploader
from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from devevent.core.config import Settings
from devevent.core.errors import ImageUploadError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".avif"}


class ImageUploader:
    """Stores image bytes somewhere durable and returns the URL to keep on the event"""

    async def upload(self, data: bytes, filename: str) -> str:
        raise NotImplementedError


class CloudinaryUploader(ImageUploader):
    """Uploads to Cloudinary and returns the ``secure_url``"""

    def __init__(self, settings: Settings):
        self.folder = settings.IMAGE_FOLDER
        self.credentials = self._credentials(settings)

    @staticmethod
    def _credentials(settings: Settings) -> dict:
        if settings.CLOUDINARY_URL:
            # cloudinary://<api_key>:<api_secret>@<cloud_name>
            parsed = urlparse(settings.CLOUDINARY_URL)
            return {
                "cloud_name": parsed.hostname,
                "api_key": parsed.username,
                "api_secret": parsed.password,
            }
        return {
            "cloud_name": settings.CLOUDINARY_CLOUD_NAME,
            "api_key": settings.CLOUDINARY_API_KEY,
            "api_secret": settings.CLOUDINARY_API_SECRET,
        }

    def _upload_sync(self, data: bytes) -> dict:
        return cloudinary.uploader.upload(
            io.BytesIO(data),
            resource_type="image",
            folder=self.folder,
            secure=True,
            **self.credentials,
        )

    async def upload(self, data: bytes, filename: str) -> str:
        try:
            result = await run_in_threadpool(self._upload_sync, data)
        except Exception as e:
            logger.exception("Cloudinary upload failed for %s", filename)
            raise ImageUploadError(str(e)) from e

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            raise ImageUploadError("asset host returned no URL")
        logger.info("Uploaded %s to %s", filename, url)
        return url


class LocalUploader(ImageUploader):
    """Writes images under the static folder; used when Cloudinary is not configured"""

    def __init__(self, settings: Settings):
        self.directory = settings.LOCAL_UPLOAD_DIR

    def _write(self, data: bytes, name: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        with open(os.path.join(self.directory, name), "wb") as f:
            f.write(data)

    async def upload(self, data: bytes, filename: str) -> str:
        extension = os.path.splitext(filename or "")[1].lower()
        name = f"{uuid.uuid4().hex}{extension if extension in ALLOWED_EXTENSIONS else ''}"
        try:
            await run_in_threadpool(self._write, data, name)
        except OSError as e:
            raise ImageUploadError(str(e)) from e
        return "/" + "/".join([self.directory.strip("/"), name])


def build_uploader(settings: Settings) -> ImageUploader:
    if settings.cloudinary_enabled:
        return CloudinaryUploader(settings)
    logger.warning("Cloudinary is not configured; storing images in %s", settings.LOCAL_UPLOAD_DIR)
    return LocalUploader(settings)


def get_uploader(request: Request) -> ImageUploader:
    """FastAPI dependency returning the app's uploader"""
    return request.app.state.uploader

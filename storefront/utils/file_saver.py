import os
from uuid import uuid4

from fastapi import Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from storefront.core.config import Settings
from storefront.core.exceptions import ServerError, ValidationError
from storefront.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")


def allowed_file(filename: str) -> bool:
    return bool(filename) and filename.lower().endswith(ALLOWED_EXTENSIONS)


class MediaHost:
    """Stores product images and hands back the public URL they are served from.

    Files land in ``<root>/<folder>/<random name>`` and are exposed by the app
    under ``<base_url>/<folder>/``. Only URLs under that prefix are owned by the
    host; anything else (placeholder, external links) is left alone on destroy.
    """

    def __init__(self, root: str, base_url: str, folder: str, max_size: int):
        self.root = root
        self.base_url = base_url.rstrip("/")
        self.folder = folder
        self.max_size = max_size

    @classmethod
    def from_settings(cls, settings: Settings) -> "MediaHost":
        return cls(
            root=settings.MEDIA_ROOT,
            base_url=settings.MEDIA_URL,
            folder=settings.MEDIA_FOLDER,
            max_size=settings.MAX_UPLOAD_SIZE,
        )

    async def upload(self, file: UploadFile) -> str:
        if not allowed_file(file.filename) or not (file.content_type or "").startswith("image/"):
            raise ValidationError("Only image files are allowed")

        content = await file.read()
        if len(content) > self.max_size:
            raise ValidationError(f"Image exceeds the {self.max_size // (1024 * 1024)}MB upload limit")

        ext = os.path.splitext(file.filename)[1].lower()
        new_filename = f"{uuid4().hex}{ext}"
        try:
            await run_in_threadpool(self._write, new_filename, content)
        except OSError as exc:
            logger.error("media_upload_failed", filename=new_filename, error=str(exc))
            raise ServerError("Image upload failed")

        url = f"{self.base_url}/{self.folder}/{new_filename}"
        logger.info("media_uploaded", url=url, size=len(content))
        return url

    def _write(self, filename: str, content: bytes) -> None:
        folder = os.path.join(self.root, self.folder)
        os.makedirs(folder, exist_ok=True)
        with open(os.path.join(folder, filename), "wb") as f:
            f.write(content)

    def owns(self, url: str) -> bool:
        return bool(url) and url.startswith(f"{self.base_url}/{self.folder}/")

    def path_for(self, url: str) -> str:
        filename = url.rsplit("/", 1)[-1]
        return os.path.join(self.root, self.folder, filename)

    def destroy(self, url: str) -> bool:
        """Release a hosted image. Failures are logged, never raised."""
        if not self.owns(url):
            return False

        file_path = self.path_for(url)
        try:
            os.remove(file_path)
        except FileNotFoundError:
            logger.warning("media_destroy_missing", url=url)
            return False
        except OSError as exc:
            logger.warning("media_destroy_failed", url=url, error=str(exc))
            return False

        logger.info("media_destroyed", url=url)
        return True


def get_media_host(request: Request) -> MediaHost:
    return request.app.state.media_host

"""
Image Mirror
Best-effort download of article images into local storage.
Any failure returns None so callers keep the remote image URL.
"""

import re
import time
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import requests
import structlog

from ..config import Settings
from ..exceptions import ImageMirrorError

logger = structlog.get_logger(__name__)

IMAGE_SUBDIR = "news_images"
PUBLIC_PREFIX = "/storage"
ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
DEFAULT_EXTENSION = "jpg"
MAX_SLUG_LENGTH = 50


def slugify_title(title: Optional[str], max_length: int = MAX_SLUG_LENGTH) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', truncate"""
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or "image"


def extension_from_url(url: str) -> str:
    path = urlparse(url).path
    suffix = Path(path).suffix.lstrip(".").lower()
    return suffix if suffix in ALLOWED_EXTENSIONS else DEFAULT_EXTENSION


class ImageMirrorService:

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        timestamp: Optional[Callable[[], float]] = None
    ):
        self.storage_dir = Path(settings.file_storage_dir) / IMAGE_SUBDIR
        self.timeout = settings.image_download_timeout_seconds
        self.timestamp = timestamp or time.time
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'Mozilla/5.0 (compatible; NewsdeskImageMirror/1.0)'
        })

    def build_filename(self, title: Optional[str], image_url: str, attempt: int = 1) -> str:
        base = f"{slugify_title(title)}-{int(self.timestamp())}"
        if attempt > 1:
            base = f"{base}-{attempt}"
        return f"{base}.{extension_from_url(image_url)}"

    def mirror(self, image_url: Optional[str], title: Optional[str]) -> Optional[str]:
        """
        Download ``image_url`` and store it locally.

        Returns:
            Public path (``/storage/news_images/<file>``) or None on any failure
        """
        if not image_url:
            return None

        try:
            data = self._download(image_url)
            filename = self._write(title, image_url, data)
        except Exception as e:
            logger.warning("Image mirroring failed, keeping remote URL", image_url=image_url, error=str(e))
            return None

        public_path = f"{PUBLIC_PREFIX}/{IMAGE_SUBDIR}/{filename}"
        logger.debug("Image mirrored", image_url=image_url, path=public_path)
        return public_path

    def _write(self, title: Optional[str], image_url: str, data: bytes) -> str:
        """Create the file exclusively, adding a counter while the name is taken"""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        attempt = 1
        while True:
            filename = self.build_filename(title, image_url, attempt)
            try:
                with open(self.storage_dir / filename, "xb") as f:
                    f.write(data)
                return filename
            except FileExistsError:
                attempt += 1

    def _download(self, image_url: str) -> bytes:
        try:
            response = self.session.get(image_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageMirrorError(f"Failed to download {image_url}: {e}") from e
        return response.content

"""
Local Disk Image Storage

Stores product images inside the publicly served static directory:

    static/images/<32 hex chars>_<sanitised original name>

and records "/images/<file>" on the Product. The static mount in main.py
serves the directory.

Version: 1.0.0
"""

import logging
import os
import uuid
from pathlib import Path, PurePath
from typing import Optional

from starlette.concurrency import run_in_threadpool
from werkzeug.utils import secure_filename

from tequilas.core.config import get_settings
from tequilas.services.storage.base import BaseImageStorage, StoredImage

logger = logging.getLogger(__name__)


class LocalImageStorage(BaseImageStorage):
    """
    Image storage on the local filesystem.

    Attributes:
        root: Directory holding the images
        url_prefix: Public URL prefix mapped onto root
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        url_prefix: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        settings = get_settings()
        self.root = Path(root or settings.images_path)
        self.url_prefix = (url_prefix or settings.images_url_prefix).rstrip("/")

        logger.info(f"LocalImageStorage initialized (root={self.root}, url_prefix={self.url_prefix})")

    @property
    def provider_name(self) -> str:
        return "local"

    def _path_for_url(self, url: str) -> Optional[Path]:
        """Map a stored reference back to a file inside root, or None if foreign."""
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None
        name = url[len(prefix):]
        if not name or PurePath(name).name != name:
            return None
        return self.root / name

    def _write(self, path: Path, content: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def save(self, filename: str, content: bytes) -> StoredImage:
        self.validate(filename, content)

        unique_name = f"{uuid.uuid4().hex}_{secure_filename(filename) or 'image'}"
        path = self.root / unique_name
        await run_in_threadpool(self._write, path, content)

        logger.info(f"Stored image {unique_name} ({len(content)} bytes)")

        return StoredImage(
            url=f"{self.url_prefix}/{unique_name}",
            filename=unique_name,
            size_bytes=len(content),
        )

    async def delete(self, url: Optional[str]) -> bool:
        if not url:
            return False

        path = self._path_for_url(url)
        if path is None:
            logger.warning(f"Refusing to delete image outside storage root: {url}")
            return False

        if not path.exists():
            logger.debug(f"Image already gone: {path}")
            return False

        await run_in_threadpool(path.unlink)
        logger.info(f"Deleted image {path.name}")
        return True

    async def health_check(self) -> bool:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Image storage health check failed: {e}")
            return False
        return os.access(self.root, os.W_OK)

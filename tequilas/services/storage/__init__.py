"""
Image Storage Factory

Provides a single entry point for obtaining the image storage backend.

Usage:
    from tequilas.services.storage import get_image_storage

    storage = get_image_storage()
    stored = await storage.save(upload.filename, await upload.read())
"""

import logging
from functools import lru_cache

from tequilas.services.storage.base import BaseImageStorage, StoredImage
from tequilas.services.storage.local import LocalImageStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_image_storage() -> BaseImageStorage:
    """
    Get the configured image storage instance.

    The instance is cached so every request shares the same configuration.

    Returns:
        BaseImageStorage: Configured storage backend
    """
    logger.info("Image Storage: Using LocalImageStorage")
    return LocalImageStorage()


def reset_image_storage() -> None:
    """
    Clear the cached storage instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_image_storage.cache_clear()
    logger.debug("Image storage cache cleared")


__all__ = [
    "get_image_storage",
    "reset_image_storage",
    "BaseImageStorage",
    "StoredImage",
    "LocalImageStorage",
]

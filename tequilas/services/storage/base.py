"""
Image Storage Abstract Base Class

Defines the interface contract for product image storage backends.
Upload validation (extension, size) lives here so every backend rejects
the same files.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from tequilas.core.config import get_settings
from tequilas.core.errors import ValidationFailed


@dataclass
class StoredImage:
    """
    Result of storing an uploaded image.

    Attributes:
        url: Relative public reference recorded on the Product (e.g. /images/ab12_pizza.png)
        filename: Generated unique file name
        size_bytes: Stored size
    """
    url: str
    filename: str
    size_bytes: int


class BaseImageStorage(ABC):
    """
    Abstract base class for image storage backends.

    Example:
        >>> storage = get_image_storage()
        >>> stored = await storage.save("pizza.png", data)
        >>> product.image_url = stored.url
    """

    def __init__(
        self,
        allowed_extensions: Optional[list[str]] = None,
        max_size_bytes: Optional[int] = None,
    ):
        settings = get_settings()
        self.allowed_extensions = allowed_extensions or settings.allowed_image_extensions_list
        self.max_size_bytes = max_size_bytes or settings.max_image_size_bytes

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the storage backend."""
        pass

    def validate(self, filename: Optional[str], content: bytes) -> None:
        """
        Reject uploads that cannot be stored.

        Raises:
            ValidationFailed: Empty file, unsupported extension or too large
        """
        if not filename:
            raise ValidationFailed("Image file must have a name")

        extension = PurePath(filename).suffix.lower()
        if extension not in self.allowed_extensions:
            raise ValidationFailed(
                f"Unsupported image type '{extension or filename}'. "
                f"Allowed: {', '.join(self.allowed_extensions)}"
            )
        if not content:
            raise ValidationFailed("Image file is empty")
        if len(content) > self.max_size_bytes:
            raise ValidationFailed(
                f"Image file exceeds {self.max_size_bytes // (1024 * 1024)} MB limit"
            )

    @abstractmethod
    async def save(self, filename: str, content: bytes) -> StoredImage:
        """
        Store an image under a generated unique name.

        Args:
            filename: Original client-side file name
            content: Raw file bytes

        Returns:
            StoredImage: Public reference of the stored file
        """
        pass

    @abstractmethod
    async def delete(self, url: Optional[str]) -> bool:
        """
        Remove a previously stored image.

        Returns:
            bool: True if a file was removed, False if nothing was there
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the backend can accept writes."""
        pass

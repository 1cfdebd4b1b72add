"""Local filesystem store for post images."""

from pathlib import Path

import aiofiles.os

from .logging import get_logger

logger = get_logger(__name__)


class SecurityException(Exception):
    """Raised when an image reference points outside the base directory."""

    pass


class ImageStore:
    """Resolves stored image references against a base directory and removes them."""

    def __init__(self, base_path: Path | str):
        self.base_path = Path(base_path).resolve()

    def _get_safe_file_path(self, image_url: str) -> Path:
        """Get file path with security validation."""
        file_path = (self.base_path / image_url.lstrip("/")).resolve()

        try:
            file_path.relative_to(self.base_path)
        except ValueError as e:
            raise SecurityException(f"Path traversal detected: {image_url}") from e

        return file_path

    async def clear_image(self, image_url: str) -> bool:
        """Delete the file behind an image reference.

        Best-effort: failures are logged and reported as ``False``, never raised.
        """
        if not image_url:
            return False

        try:
            file_path = self._get_safe_file_path(image_url)
            await aiofiles.os.remove(file_path)
        except SecurityException as e:
            logger.warning("Refusing to delete image outside base directory", error=str(e))
            return False
        except OSError as e:
            logger.warning("Failed to delete image", image_url=image_url, error=str(e))
            return False

        logger.debug("Deleted image", image_url=image_url)
        return True

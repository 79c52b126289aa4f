"""
DevNote Backend - Avatar File Service
=====================================

What:  Validates, stores, resolves and removes uploaded avatar images.
How:   Checks extension, size and decoded image format, then writes the bytes
       to a date-organized directory under a random filename.
Who:   UserService during profile edits; the /uploads route when serving.

Checks, cheapest first:
    1. Extension is one of .png .jpg .jpeg .gif .webp
    2. Size is non-zero and within settings.max_avatar_size
    3. Pillow identifies the bytes as an image whose format matches the
       extension, and the image passes verify()
    4. Stored as avatars/YYYY/MM/DD/<uuid><ext>; no user input in the path

Directory Structure:
    uploads/
    └── avatars/
        └── 2024/
            └── 01/
                └── 15/
                    └── a1b2c3d4-....png
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from PIL import Image, UnidentifiedImageError

from devnote.config import settings
from devnote.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"
AVATAR_DIR = "avatars"

# Extension → Pillow format name
ALLOWED_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".gif": "GIF",
    ".webp": "WEBP",
}

ALLOWED_EXTENSIONS = set(ALLOWED_FORMATS)


class FileService:
    """
    Avatar storage rooted at `storage_root` (settings.upload_root by default).

    All returned public URLs start with `/uploads/` and map 1:1 to a path
    relative to the storage root.
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.upload_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Return the normalized extension, or raise ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="avatar",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty uploads and uploads over settings.max_avatar_size.

        The declared Content-Length is checked as well as the real size, since
        clients may send either a wrong header or none at all.
        """
        max_mb = settings.max_avatar_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="avatar")

        if content_length and content_length > settings.max_avatar_size:
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field="avatar",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_avatar_size:
            raise ValidationError(
                message=(
                    f"File is too large ({actual_size / (1024 * 1024):.1f}MB). "
                    f"Maximum size is {max_mb:.0f}MB."
                ),
                field="avatar",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_image(self, content: bytes, extension: str) -> str:
        """
        Decode the header with Pillow and check it matches the extension.

        Returns:
            The Pillow format name (e.g. "PNG").
        """
        try:
            with Image.open(BytesIO(content)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ValidationError(
                message="The uploaded file is not a valid image.",
                field="avatar",
                context={"error": type(e).__name__},
            )

        expected = ALLOWED_FORMATS[extension]
        if image_format != expected:
            raise ValidationError(
                message=(
                    f"File content ({image_format}) does not match its extension '{extension}'."
                ),
                field="avatar",
                context={"detected_format": image_format, "expected_format": expected},
            )
        return image_format

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Return (absolute_path, relative_path) for a new avatar file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{AVATAR_DIR}/{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated bytes to disk.

        Returns:
            (absolute_path, relative_path)

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save the uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Full pipeline for one avatar upload.

        Returns:
            (absolute_path, public_url), where public_url looks like
            /uploads/avatars/2024/01/15/<uuid>.png
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_image(content, ext)
        absolute_path, relative_path = await self.store_file(content, ext)
        return absolute_path, PUBLIC_PREFIX + relative_path

    def resolve_public_url(self, public_url: str) -> Optional[Path]:
        """
        Map a /uploads/... URL (or the part after the prefix) back to a path
        inside the storage root. Returns None for anything that would escape it.
        """
        relative = public_url[len(PUBLIC_PREFIX):] if public_url.startswith(PUBLIC_PREFIX) else public_url
        candidate = (self.storage_root / relative.lstrip("/")).resolve()
        if candidate != self.storage_root and self.storage_root not in candidate.parents:
            return None
        return candidate

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a stored file (replaced avatar or failed write).

        Failures are logged and swallowed; a leftover file never fails the
        user's request.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))


file_service = FileService()

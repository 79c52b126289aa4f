"""
DevNote Backend - File Service Unit Tests
=========================================

What:  Avatar validation (extension, size, decoded format), storage layout,
       public URL resolution and cleanup.
How:   Real images generated with Pillow; a temporary storage root per test.
"""

import os
import re
from pathlib import Path
from unittest.mock import patch

import pytest

from devnote.exceptions import FileStorageError, ValidationError
from devnote.services.file_service import FileService


class TestExtensionValidation:

    def setup_method(self):
        self.service = FileService()

    @pytest.mark.parametrize("name", ["me.png", "me.jpg", "me.jpeg", "me.gif", "me.webp"])
    def test_allowed(self, name):
        assert self.service.validate_extension(name) == Path(name).suffix

    def test_case_insensitive(self):
        assert self.service.validate_extension("ME.PNG") == ".png"
        assert self.service.validate_extension("me.Jpeg") == ".jpeg"

    @pytest.mark.parametrize("name", ["doc.pdf", "run.exe", "image.bmp", "noextension"])
    def test_rejected(self, name):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(name)

    def test_double_extension_uses_last(self):
        with pytest.raises(ValidationError):
            self.service.validate_extension("avatar.png.exe")


class TestSizeValidation:

    def setup_method(self):
        self.service = FileService()

    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(None, 0)

    def test_within_limit(self):
        self.service.validate_size(1024, 1024)

    def test_declared_too_large(self):
        with patch("devnote.services.file_service.settings") as mock_settings:
            mock_settings.max_avatar_size = 1000
            with pytest.raises(ValidationError, match="too large"):
                self.service.validate_size(2000, 10)

    def test_actual_too_large(self):
        with patch("devnote.services.file_service.settings") as mock_settings:
            mock_settings.max_avatar_size = 1000
            with pytest.raises(ValidationError, match="too large"):
                self.service.validate_size(None, 1001)


class TestImageValidation:

    def setup_method(self):
        self.service = FileService()

    @pytest.mark.parametrize(
        "fmt,ext",
        [("PNG", ".png"), ("JPEG", ".jpg"), ("JPEG", ".jpeg"), ("GIF", ".gif")],
    )
    def test_matching_format(self, make_image, fmt, ext):
        assert self.service.validate_image(make_image(fmt), ext) == fmt

    def test_mismatched_extension(self, png_bytes):
        with pytest.raises(ValidationError, match="does not match"):
            self.service.validate_image(png_bytes, ".jpg")

    def test_not_an_image(self):
        with pytest.raises(ValidationError, match="not a valid image"):
            self.service.validate_image(b"MZ\x90\x00 this is an executable", ".png")

    def test_truncated_png(self, png_bytes):
        with pytest.raises(ValidationError):
            self.service.validate_image(png_bytes[:20], ".png")


class TestStorage:

    @pytest.mark.asyncio
    async def test_validate_and_store(self, temp_storage, png_bytes):
        service = FileService(storage_root=temp_storage)
        absolute_path, public_url = await service.validate_and_store("Me.PNG", png_bytes)

        assert re.fullmatch(
            r"/uploads/avatars/\d{4}/\d{2}/\d{2}/[0-9a-f-]{36}\.png", public_url
        )
        assert Path(absolute_path).read_bytes() == png_bytes
        assert service.resolve_public_url(public_url) == Path(absolute_path).resolve()

    @pytest.mark.asyncio
    async def test_invalid_upload_not_written(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        with pytest.raises(ValidationError):
            await service.validate_and_store("me.png", b"plain text")
        assert not any(Path(temp_storage).rglob("*.png"))

    @pytest.mark.asyncio
    async def test_write_failure(self, temp_storage, png_bytes):
        service = FileService(storage_root=temp_storage)
        with patch("devnote.services.file_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await service.store_file(png_bytes, ".png")

    def test_resolve_rejects_traversal(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        assert service.resolve_public_url("/uploads/../../etc/passwd") is None
        assert service.resolve_public_url("../outside.png") is None
        assert service.resolve_public_url("avatars/x.png") == Path(temp_storage).resolve() / "avatars/x.png"

    @pytest.mark.asyncio
    async def test_cleanup(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        target = Path(temp_storage) / "old.png"
        target.write_bytes(b"x")

        await service.cleanup_file(str(target))
        assert not target.exists()

        # Missing file is not an error
        await service.cleanup_file(str(target))
        assert not os.path.exists(target)

"""
Blog Backend — File Storage Service (Upload Adapter)
======================================================

What:  Validates uploaded images (post covers, author avatars), stores them
       on disk, and hands back a reference URL to keep on the entity.
How:   Validates extension, declared content type and size, stores the file
       in a folder/date-organized directory under a UUID filename.
Who:   Called by PostService (cover) and AuthorService (avatar); the
       `/files/{path}` route resolves references back to files.

Reference format:
    <api_prefix>/files/<folder>/<YYYY>/<MM>/<DD>/<uuid>.<ext>
    e.g. /api/files/covers/2024/01/15/a1b2c3d4-....jpg

Security:
    - UUID filenames: no user input ever reaches the file system path
    - resolve() refuses any relative path that escapes the storage root
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from fastapi import UploadFile

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif"}


class FileService:
    """
    Manages upload validation, storage and cleanup.

    Directory Structure:
        storage/
        ├── covers/2024/01/15/<uuid>.jpg
        └── avatars/2024/01/15/<uuid>.png
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    @property
    def url_prefix(self) -> str:
        return f"{settings.api_prefix}/files/"

    def validate_extension(self, filename: str) -> str:
        """
        Check the extension against the allow-list.

        Returns: Normalized extension (lowercase with dot, .jpeg → .jpg).
        Raises:  ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ".jpg" if ext == ".jpeg" else ext

    def validate_content_type(self, content_type: Optional[str]) -> None:
        """Reject uploads whose declared Content-Type is not an allowed image type."""
        if content_type is None:
            return
        mime = content_type.split(";")[0].strip().lower()
        if mime not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message=f"File content type '{mime}' is not supported. Upload a PNG, JPEG, WEBP or GIF image.",
                field="file",
                context={"content_type": mime, "allowed": sorted(ALLOWED_CONTENT_TYPES)},
            )

    def validate_size(self, content: bytes, content_length: Optional[int]) -> None:
        """
        Validate file size against the configured maximum.

        Checks the reported size first (cheap), then the bytes actually read.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if not content:
            raise ValidationError(message="Uploaded file is empty.", field="file")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large: maximum size is {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if len(content) > settings.max_file_size:
            raise ValidationError(
                message=(
                    f"File is too large ({len(content) / (1024 * 1024):.1f}MB): "
                    f"maximum size is {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    def _generate_storage_path(self, folder: str, extension: str) -> Tuple[Path, str]:
        """Build <folder>/YYYY/MM/DD/<uuid><ext>; returns (absolute, relative)."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{folder}/{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str, folder: str) -> Tuple[str, str]:
        """
        Write validated file content to disk with async I/O.

        Returns: Tuple of (absolute_path, relative_path).
        Raises:  FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(folder, extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        folder: str,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Complete validation and storage pipeline, cheapest check first.

        Returns: Reference URL to persist on the entity.
        """
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(content, content_length)
        _, relative_path = await self.store_file(content, ext, folder)
        return self.url_prefix + relative_path

    async def save_upload(self, upload: UploadFile, folder: str) -> str:
        """Read a multipart UploadFile, store it, and close it."""
        try:
            content = await upload.read()
            logger.info(
                "Received upload: filename=%s, size=%d bytes, folder=%s",
                upload.filename or "unknown",
                len(content),
                folder,
            )
            return await self.validate_and_store(
                filename=upload.filename or "",
                content=content,
                folder=folder,
                content_type=upload.content_type,
                content_length=upload.size,
            )
        finally:
            await upload.close()

    def resolve(self, relative_path: str) -> Path:
        """
        Map a relative storage path to an absolute one inside the storage root.

        Raises ValidationError for paths that escape the root (../../etc/passwd).
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path")
        return full_path

    async def cleanup_file(self, file_path: str) -> None:
        """Best-effort delete: failures are logged, never raised."""
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def discard_reference(self, reference: Optional[str]) -> None:
        """Delete the stored file behind a reference URL, if it is one of ours."""
        if not reference or not reference.startswith(self.url_prefix):
            return
        try:
            path = self.resolve(reference[len(self.url_prefix):])
        except ValidationError:
            logger.warning("Refusing to delete reference outside storage: %s", reference)
            return
        await self.cleanup_file(str(path))


file_service = FileService()

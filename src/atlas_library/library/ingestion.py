"""
File Ingestion

Validates an uploaded blob, stores it, classifies it and hands its
metadata to the item repository as a new file item.
"""

import logging
from typing import AsyncIterable, AsyncIterator, Optional

from atlas_library.config import UploadConfig
from atlas_library.errors import (
    FileTooLarge,
    FileTypeRejected,
    InvalidInput,
    OrphanedBlobError,
    StoreIOError,
)
from atlas_library.library.repository import ItemRepository
from atlas_library.models.item import FileInfo, FileItem, FileType, ItemCreate
from atlas_library.storage.blob_store import BlobStore

logger = logging.getLogger("atlas_library.ingestion")


def normalize_media_type(media_type: Optional[str]) -> str:
    """Lowercase and drop parameters such as '; charset=utf-8'."""
    return (media_type or "").split(";", 1)[0].strip().lower()


def classify(media_type: str, filename: str = "") -> FileType:
    """
    Map a media type to a file type.

    Checked in order; the filename extension breaks ties for office formats
    whose media type is ambiguous. Anything unmatched is a plain 'file'.
    """
    name = (filename or "").lower()
    if "pdf" in media_type:
        return FileType.PDF
    if "word" in media_type or name.endswith((".doc", ".docx")):
        return FileType.WORD
    if "excel" in media_type or "spreadsheet" in media_type or name.endswith((".xls", ".xlsx")):
        return FileType.EXCEL
    if "powerpoint" in media_type or "presentation" in media_type or name.endswith((".ppt", ".pptx")):
        return FileType.POWERPOINT
    if media_type.startswith("image/"):
        return FileType.IMAGE
    if media_type.startswith("video/"):
        return FileType.VIDEO
    if media_type.startswith("audio/"):
        return FileType.AUDIO
    if "text" in media_type or "markdown" in media_type:
        return FileType.TEXT
    return FileType.FILE


async def _single_chunk(data: bytes) -> AsyncIterator[bytes]:
    yield data


class FileIngestor:
    """
    Upload pipeline.

    Order of work:
    1. Reject disallowed media types before anything is written
    2. Stream the payload to the blob store under the size ceiling
    3. Read a text preview for text-like uploads
    4. Commit the file item; a failure here leaves an orphaned blob
    """

    def __init__(self, repository: ItemRepository, blob_store: BlobStore, config: Optional[UploadConfig] = None):
        self.repository = repository
        self.blob_store = blob_store
        self.config = config or UploadConfig()

    def is_allowed(self, media_type: str) -> bool:
        return media_type in self.config.allowed_types or media_type.startswith(self.config.text_prefix)

    def is_text_like(self, media_type: str) -> bool:
        return media_type.startswith(self.config.text_prefix) or "json" in media_type

    def validate(self, media_type: str, size_hint: Optional[int] = None) -> None:
        """
        Raises:
            FileTypeRejected: If the media type is not accepted
            FileTooLarge: If the declared size already exceeds the ceiling
        """
        if not self.is_allowed(media_type):
            logger.warning(f"Rejected upload with media type {media_type!r}")
            raise FileTypeRejected(f"File type {media_type or 'unknown'} not allowed")
        if size_hint is not None and size_hint > self.config.max_file_size:
            logger.warning(f"Rejected upload of {size_hint} bytes")
            raise FileTooLarge(
                f"File too large. Max upload size is {self.config.max_file_size // (1024 * 1024)}MB."
            )

    async def ingest(
        self,
        chunks: AsyncIterable[bytes],
        filename: str,
        media_type: Optional[str],
        fields: Optional[ItemCreate] = None,
        size_hint: Optional[int] = None,
    ) -> FileItem:
        """
        Store an uploaded payload and create its file item.

        Args:
            chunks: Async iterable over the payload
            filename: Original filename as supplied by the client
            media_type: Declared media type
            fields: Optional item metadata (title, tags, ...)
            size_hint: Declared payload size, if known

        Raises:
            InvalidInput: If no filename was supplied
            FileTypeRejected / FileTooLarge: On validation failure (nothing stored)
            StoreIOError: If the blob cannot be written
            OrphanedBlobError: If the blob was written but the item was not
        """
        if not filename or not filename.strip():
            raise InvalidInput("No file uploaded")
        fields = fields or ItemCreate()
        media_type = normalize_media_type(media_type)
        self.validate(media_type, size_hint)

        stored_filename = self.blob_store.storage_filename(filename)
        try:
            size = await self.blob_store.write(stored_filename, chunks, self.config.max_file_size)
        except FileTooLarge:
            logger.warning(f"Upload {filename!r} exceeded {self.config.max_file_size} bytes")
            raise
        except OSError as e:
            logger.error(f"Could not store upload {filename!r}: {e}")
            raise StoreIOError("Could not store uploaded file") from e

        logger.info(f"Stored upload {filename!r} as {stored_filename} ({size} bytes)")

        text_preview = None
        if self.is_text_like(media_type):
            text_preview = await self._read_preview(stored_filename)

        blob = FileInfo(
            original_name=filename,
            stored_filename=stored_filename,
            relative_path=f"/uploads/{stored_filename}",
            mime_type=media_type,
            size_bytes=size,
        )

        try:
            return await self.repository.create_from_upload(
                fields,
                blob,
                file_type=classify(media_type, filename),
                text_preview=text_preview,
            )
        except StoreIOError as e:
            logger.error(f"Blob {stored_filename} stored but its item was not saved: {e}")
            raise OrphanedBlobError(
                "File stored but library update failed", stored_filename, cause=e
            ) from e

    async def ingest_bytes(
        self,
        data: bytes,
        filename: str,
        media_type: Optional[str],
        fields: Optional[ItemCreate] = None,
    ) -> FileItem:
        """Convenience wrapper for payloads already in memory."""
        return await self.ingest(_single_chunk(data), filename, media_type, fields, size_hint=len(data))

    async def _read_preview(self, stored_filename: str) -> Optional[str]:
        try:
            return await self.blob_store.read_text(stored_filename, self.config.preview_chars)
        except OSError as e:
            logger.warning(f"Could not read text preview of {stored_filename}: {e}")
            return None

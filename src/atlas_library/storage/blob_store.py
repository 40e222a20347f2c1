"""
Blob Store

Holds uploaded file contents in a single directory, each blob addressed
only by its generated storage filename `<16 hex chars>_<sanitized name>`.
"""

import logging
import secrets
from pathlib import Path
from typing import AsyncIterable, Optional

import aiofiles
import aiofiles.os

from atlas_library.errors import FileTooLarge
from atlas_library.security.sanitizer import Sanitizer

logger = logging.getLogger("atlas_library.blobs")


class BlobStore:
    """Directory of uploaded blobs."""

    def __init__(self, uploads_dir: Path, sanitizer: Optional[Sanitizer] = None):
        self.uploads_dir = Path(uploads_dir)
        self.sanitizer = sanitizer or Sanitizer()

    async def initialize(self) -> None:
        self.uploads_dir.mkdir(parents=True, exist_ok=True)

    def storage_filename(self, original_name: str) -> str:
        """Random 8-byte hex token joined to the sanitized original name."""
        return f"{secrets.token_hex(8)}_{self.sanitizer.sanitize_filename(original_name)}"

    def path_for(self, stored_filename: str) -> Path:
        path = self.uploads_dir / stored_filename
        if not self.sanitizer.is_within(path, self.uploads_dir) or path.parent.resolve() != self.uploads_dir.resolve():
            raise ValueError(f"Invalid storage filename: {stored_filename}")
        return path

    def exists(self, stored_filename: str) -> bool:
        return self.path_for(stored_filename).exists()

    async def write(
        self,
        stored_filename: str,
        chunks: AsyncIterable[bytes],
        max_size: Optional[int] = None,
    ) -> int:
        """
        Stream chunks into a new blob.

        Args:
            stored_filename: Name produced by storage_filename()
            chunks: Async iterable of byte chunks
            max_size: Ceiling in bytes; exceeding it aborts the write

        Returns:
            Number of bytes written

        Raises:
            FileTooLarge: If the payload exceeds max_size (partial blob removed)
            OSError: If the blob cannot be written
        """
        await self.initialize()
        path = self.path_for(stored_filename)
        total_size = 0

        try:
            async with aiofiles.open(path, "wb") as out:
                async for chunk in chunks:
                    total_size += len(chunk)
                    if max_size is not None and total_size > max_size:
                        raise FileTooLarge(
                            f"File too large. Max upload size is {max_size // (1024 * 1024)}MB."
                        )
                    await out.write(chunk)
        except Exception:
            await self._discard(path)
            raise

        return total_size

    async def read_text(self, stored_filename: str, max_chars: int) -> str:
        """Decode the first max_chars characters of a blob as UTF-8."""
        path = self.path_for(stored_filename)
        # UTF-8 uses at most 4 bytes per character
        async with aiofiles.open(path, "rb") as f:
            head = await f.read(max_chars * 4)
        return head.decode("utf-8", errors="replace")[:max_chars]

    async def delete(self, stored_filename: str) -> bool:
        """
        Remove a blob.

        Returns:
            True if removed, False if it was already missing

        Raises:
            OSError: If the blob exists but cannot be removed
        """
        path = self.path_for(stored_filename)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        logger.info(f"Removed blob {stored_filename}")
        return True

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial blob {path}: {e}")

"""
Document Store

Loads and saves whole named JSON documents. There is no partial-update
primitive: every mutation reads the entire document, changes it in
memory and writes it back while holding the document's lock.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

import aiofiles
import aiofiles.os

from atlas_library.errors import StoreIOError

logger = logging.getLogger("atlas_library.store")


class DocumentStore(ABC):
    """
    Abstract persistence backend for named documents.

    Implementations guarantee that a `save` is observed by readers either
    entirely or not at all.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    @abstractmethod
    async def load(self, key: str) -> Optional[dict]:
        """
        Read one document.

        Returns:
            The parsed document, or None if it was never saved.

        Raises:
            StoreIOError: If the document exists but cannot be read or parsed
        """
        pass

    @abstractmethod
    async def save(self, key: str, document: dict) -> None:
        """
        Write one document in full.

        Raises:
            StoreIOError: If the write fails; the previous version is kept
        """
        pass

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """Serialise read-modify-write cycles on one document within this process."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            yield


class JsonFileStore(DocumentStore):
    """
    Stores each document as `<data_dir>/<key>.json`.

    Writes go to a sibling temp file that is then renamed over the target,
    so a crash mid-write leaves the old document intact.
    """

    def __init__(self, data_dir: Path):
        super().__init__()
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    async def load(self, key: str) -> Optional[dict]:
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error(f"Error loading {path}: {e}")
            raise StoreIOError(f"Could not read {key} document") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON in {path}: {e}")
            raise StoreIOError(f"Could not parse {key} document") from e

    async def save(self, key: str, document: dict) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(document, indent=2, ensure_ascii=False)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving {path}: {e}")
            raise StoreIOError(f"Could not write {key} document") from e

"""
Item Repository

CRUD over item records in the library document, keeping the aggregate
counters in step with every mutation.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from atlas_library.errors import InvalidInput, NotFound, ParseError
from atlas_library.models.item import (
    ITEM_CLASSES,
    FileInfo,
    FileItem,
    FileType,
    Item,
    ItemCreate,
    ItemPatch,
    ItemType,
    utcnow,
)
from atlas_library.models.library import DeletionResult, LibraryDocument, LibraryStats
from atlas_library.storage.blob_store import BlobStore
from atlas_library.storage.document_store import DocumentStore

logger = logging.getLogger("atlas_library.repository")

LIBRARY_KEY = "library"

# Value a field takes when a patch explicitly sets it to null
_CLEARED_VALUES = {"starred": False}


class ItemRepository:
    """
    Repository for item records.

    Every mutation is one read-modify-write of the whole library document
    under the store's per-document lock. Reads return fresh copies, never
    references into shared state.
    """

    def __init__(self, store: DocumentStore, blob_store: Optional[BlobStore] = None):
        self.store = store
        self.blob_store = blob_store

    async def initialize(self) -> None:
        """Persist an empty library document on first use."""
        async with self.store.lock(LIBRARY_KEY):
            if await self.store.load(LIBRARY_KEY) is None:
                await self._save(LibraryDocument())
                logger.info("Initialized empty library document")

    async def _load(self) -> LibraryDocument:
        raw = await self.store.load(LIBRARY_KEY)
        if raw is None:
            return LibraryDocument()
        try:
            return LibraryDocument.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Library document does not match schema: {e}")
            raise ParseError("Library document is malformed") from e

    async def _save(self, document: LibraryDocument, touch: bool = True) -> None:
        if touch:
            document.touch()
        await self.store.save(LIBRARY_KEY, document.model_dump(mode="json", by_alias=True))

    async def list(self) -> LibraryDocument:
        """Snapshot of all items and stats."""
        return await self._load()

    async def get(self, item_id: str) -> Item:
        """
        Fetch one item and count the read.

        The returned item reflects the view count before this read; the
        persisted count is one higher.

        Raises:
            NotFound: If no item has this id
        """
        async with self.store.lock(LIBRARY_KEY):
            document = await self._load()
            index = self._require_index(document, item_id)
            item = document.items[index]
            snapshot = item.model_copy(deep=True)
            item.views += 1
            await self._save(document, touch=False)
        return snapshot

    async def create(self, fields: ItemCreate) -> Item:
        """
        Create a note or link item.

        Raises:
            InvalidInput: If the title is missing or the type is 'file'
        """
        if not fields.title or not fields.title.strip():
            raise InvalidInput("Title required")
        if fields.type == ItemType.FILE:
            raise InvalidInput("File items can only be created by upload")

        item_class = ITEM_CLASSES[fields.type.value]
        item = item_class(
            title=fields.title,
            description=fields.description,
            url=fields.url,
            content=fields.content,
            category=fields.category,
            tags=fields.tags,
            country=fields.country,
            source=fields.source,
        )

        async with self.store.lock(LIBRARY_KEY):
            document = await self._load()
            document.items.insert(0, item)
            document.stats.total_items += 1
            if item.type == ItemType.LINK.value:
                document.stats.total_links += 1
            await self._save(document)

        logger.info(f"Created {item.type} item {item.id}")
        return item.model_copy(deep=True)

    async def create_from_upload(
        self,
        fields: ItemCreate,
        blob: FileInfo,
        file_type: FileType = FileType.FILE,
        text_preview: Optional[str] = None,
    ) -> FileItem:
        """
        Create a file item for a blob that is already stored.

        The title falls back to the original filename.
        """
        title = fields.title if fields.title and fields.title.strip() else blob.original_name
        if not title or not title.strip():
            raise InvalidInput("Title required")

        item = FileItem(
            title=title,
            description=fields.description,
            category=fields.category,
            tags=fields.tags,
            country=fields.country,
            source=fields.source,
            file=blob,
            file_type=file_type,
            text_preview=text_preview,
        )

        async with self.store.lock(LIBRARY_KEY):
            document = await self._load()
            document.items.insert(0, item)
            document.stats.total_items += 1
            document.stats.total_files += 1
            document.stats.total_size += blob.size_bytes
            await self._save(document)

        logger.info(f"Created file item {item.id} for blob {blob.stored_filename}")
        return item.model_copy(deep=True)

    async def update(self, item_id: str, patch: ItemPatch) -> Item:
        """
        Apply the fields present in the patch and stamp `updated`.

        Raises:
            NotFound: If no item has this id
            InvalidInput: If the patch would leave the item invalid
        """
        changes = patch.changes()
        if "title" in changes and (not changes["title"] or not changes["title"].strip()):
            raise InvalidInput("Title cannot be empty")
        for name, cleared in _CLEARED_VALUES.items():
            if name in changes and changes[name] is None:
                changes[name] = cleared

        async with self.store.lock(LIBRARY_KEY):
            document = await self._load()
            index = self._require_index(document, item_id)
            current = document.items[index]

            merged = current.model_dump()
            merged.update(changes)
            merged["updated"] = utcnow()
            try:
                updated = type(current).model_validate(merged)
            except ValidationError as e:
                raise InvalidInput(f"Invalid update: {e.errors()[0]['msg']}") from e

            document.items[index] = updated
            await self._save(document)

        return updated.model_copy(deep=True)

    async def delete(self, item_id: str) -> DeletionResult:
        """
        Remove an item and, once that is persisted, its blob.

        Blob cleanup is a compensating step: a missing blob is fine and a
        failed removal is logged and reported, not raised.

        Raises:
            NotFound: If no item has this id
        """
        async with self.store.lock(LIBRARY_KEY):
            document = await self._load()
            index = self._require_index(document, item_id)
            item = document.items.pop(index)

            document.stats.total_items -= 1
            if item.type == ItemType.LINK.value:
                document.stats.total_links -= 1
            file = getattr(item, "file", None)
            if file is not None:
                document.stats.total_files -= 1
                document.stats.total_size -= file.size_bytes
            await self._save(document)

        logger.info(f"Deleted item {item_id}")
        result = DeletionResult(id=item_id)
        if file is not None:
            await self._remove_blob(file.stored_filename, result)
        return result

    async def replace(self, document: LibraryDocument) -> LibraryDocument:
        """Overwrite the whole library, recomputing stats from its items."""
        ids = [item.id for item in document.items]
        if len(ids) != len(set(ids)):
            raise InvalidInput("Item ids must be unique")

        document = document.model_copy(deep=True)
        document.stats = LibraryStats.from_items(document.items)
        async with self.store.lock(LIBRARY_KEY):
            await self._save(document)
        return document

    async def recompute_stats(self) -> LibraryStats:
        """Rebuild the counters by scanning the items and persist them."""
        async with self.store.lock(LIBRARY_KEY):
            document = await self._load()
            document.stats = LibraryStats.from_items(document.items)
            await self._save(document)
        return document.stats

    async def _remove_blob(self, stored_filename: str, result: DeletionResult) -> None:
        if self.blob_store is None:
            logger.warning(f"No blob store configured; blob {stored_filename} left in place")
            result.blob_removed = False
            result.blob_error = "no blob store configured"
            return
        try:
            result.blob_removed = await self.blob_store.delete(stored_filename)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not remove blob {stored_filename}: {e}")
            result.blob_removed = False
            result.blob_error = str(e)

    @staticmethod
    def _require_index(document: LibraryDocument, item_id: str) -> int:
        index = document.index_of(item_id)
        if index is None:
            raise NotFound("Item not found")
        return index

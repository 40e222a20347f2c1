"""
Atlas Library System - Main Engine Implementation

Wires the document store, blob store, repository, taxonomy, ingestion
and stats into one object implementing LibraryEngine.
"""

import logging
from typing import AsyncIterable, List, Optional

from atlas_library.config import LibraryConfig, load_config
from atlas_library.engine.base import LibraryEngine
from atlas_library.library.ingestion import FileIngestor
from atlas_library.library.query import quick_search, run_query
from atlas_library.library.repository import ItemRepository
from atlas_library.library.stats import StatsAggregator
from atlas_library.library.taxonomy import TaxonomyStore
from atlas_library.models.item import FileItem, Item, ItemCreate, ItemPatch
from atlas_library.models.library import (
    DeletionResult,
    LibraryExport,
    LibraryImport,
    QueryParams,
    QueryResult,
    SearchResult,
)
from atlas_library.models.taxonomy import Category, CategoryDocument, TagDocument
from atlas_library.storage.blob_store import BlobStore
from atlas_library.storage.document_store import DocumentStore, JsonFileStore

logger = logging.getLogger("atlas_library.system")


class LibrarySystem(LibraryEngine):
    """
    Main implementation of the content library.

    Usage:
        library = LibrarySystem(config)
        await library.initialize()

        item = await library.create_item(ItemCreate(title="Report A"))
        page = await library.list_items(QueryParams(sort="title"))
    """

    def __init__(
        self,
        config: Optional[LibraryConfig] = None,
        store: Optional[DocumentStore] = None,
        blob_store: Optional[BlobStore] = None,
    ):
        """
        Initialize the library.

        Args:
            config: Configuration object. Loaded from config/library_config.yaml if not provided.
            store: Document backend. Defaults to JSON files under storage.data_dir.
            blob_store: Blob backend. Defaults to storage.uploads_dir.
        """
        self.config = config or load_config()

        self.store = store or JsonFileStore(self.config.storage.data_dir)
        self.blob_store = blob_store or BlobStore(self.config.storage.uploads_dir)

        self.repository = ItemRepository(self.store, self.blob_store)
        self.taxonomy = TaxonomyStore(self.store)
        self.ingestor = FileIngestor(self.repository, self.blob_store, self.config.uploads)
        self.stats = StatsAggregator(self.repository, self.taxonomy)

        self._initialized = False

    async def initialize(self) -> None:
        """Create the blob directory and seed any missing documents."""
        if self._initialized:
            return

        await self.blob_store.initialize()
        await self.repository.initialize()
        await self.taxonomy.initialize()

        self._initialized = True
        logger.info("Library initialized")

    async def list_items(self, params: QueryParams) -> QueryResult:
        document = await self.repository.list()
        return run_query(document.items, params, document.stats)

    async def get_item(self, item_id: str) -> Item:
        return await self.repository.get(item_id)

    async def create_item(self, fields: ItemCreate) -> Item:
        return await self.repository.create(fields)

    async def upload_item(
        self,
        chunks: AsyncIterable[bytes],
        filename: str,
        media_type: Optional[str],
        fields: Optional[ItemCreate] = None,
        size_hint: Optional[int] = None,
    ) -> FileItem:
        return await self.ingestor.ingest(chunks, filename, media_type, fields, size_hint=size_hint)

    async def update_item(self, item_id: str, patch: ItemPatch) -> Item:
        return await self.repository.update(item_id, patch)

    async def delete_item(self, item_id: str) -> DeletionResult:
        return await self.repository.delete(item_id)

    async def list_categories(self) -> List[Category]:
        return await self.taxonomy.list_categories()

    async def add_category(self, name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Category:
        return await self.taxonomy.add_category(name, icon, color)

    async def list_tags(self) -> List[str]:
        return await self.taxonomy.list_tags()

    async def add_tag(self, tag: str) -> List[str]:
        return await self.taxonomy.add_tag(tag)

    async def get_stats(self) -> dict:
        return await self.stats.summary()

    async def search(self, query: str) -> SearchResult:
        document = await self.repository.list()
        return quick_search(document.items, query, self.config.query.search_limit)

    async def export_data(self) -> LibraryExport:
        """Dump all three documents as currently persisted."""
        return LibraryExport(
            library=await self.repository.list(),
            categories=CategoryDocument(categories=await self.taxonomy.list_categories()),
            tags=TagDocument(tags=await self.taxonomy.list_tags()),
        )

    async def import_data(self, bundle: LibraryImport) -> None:
        """
        Overwrite the supplied documents.

        Documents absent from the bundle are left untouched. Library stats
        are recomputed from the imported items rather than trusted.
        """
        if bundle.library is not None:
            await self.repository.replace(bundle.library)
            logger.info(f"Imported library with {len(bundle.library.items)} items")
        if bundle.categories is not None:
            await self.taxonomy.replace_categories(bundle.categories)
            logger.info(f"Imported {len(bundle.categories.categories)} categories")
        if bundle.tags is not None:
            await self.taxonomy.replace_tags(bundle.tags)
            logger.info(f"Imported {len(bundle.tags.tags)} tags")

    async def close(self) -> None:
        self._initialized = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

"""
Library Engine - Abstract Base Class

Defines the operations the content library exposes to its callers
(the HTTP API, scripts, tests).
"""

from abc import ABC, abstractmethod
from typing import AsyncIterable, List, Optional

from atlas_library.models.item import FileItem, Item, ItemCreate, ItemPatch
from atlas_library.models.library import (
    DeletionResult,
    LibraryExport,
    LibraryImport,
    QueryParams,
    QueryResult,
    SearchResult,
)
from atlas_library.models.taxonomy import Category


class LibraryEngine(ABC):
    """
    Abstract Base Class for the content library.

    Groups the operations:
    1. Items - list/get/create/upload/update/delete
    2. Taxonomy - categories and tags
    3. Stats and quick search
    4. Export/import of the persisted documents
    """

    @abstractmethod
    async def list_items(self, params: QueryParams) -> QueryResult:
        """
        Filter, sort and paginate the collection.

        Args:
            params: Search/category/tag/type filters, sort key, limit and offset

        Returns:
            QueryResult with the page, the pre-pagination total and stats
        """
        pass

    @abstractmethod
    async def get_item(self, item_id: str) -> Item:
        """Fetch one item, counting the view."""
        pass

    @abstractmethod
    async def create_item(self, fields: ItemCreate) -> Item:
        """Create a note or link."""
        pass

    @abstractmethod
    async def upload_item(
        self,
        chunks: AsyncIterable[bytes],
        filename: str,
        media_type: Optional[str],
        fields: Optional[ItemCreate] = None,
        size_hint: Optional[int] = None,
    ) -> FileItem:
        """
        Store an uploaded blob and create its file item.

        Args:
            chunks: Payload as an async iterable of byte chunks
            filename: Original filename
            media_type: Declared media type
            fields: Optional metadata for the item
            size_hint: Declared payload size, if known
        """
        pass

    @abstractmethod
    async def update_item(self, item_id: str, patch: ItemPatch) -> Item:
        """Apply a partial update."""
        pass

    @abstractmethod
    async def delete_item(self, item_id: str) -> DeletionResult:
        """Delete an item and its blob."""
        pass

    @abstractmethod
    async def list_categories(self) -> List[Category]:
        pass

    @abstractmethod
    async def add_category(self, name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Category:
        pass

    @abstractmethod
    async def list_tags(self) -> List[str]:
        pass

    @abstractmethod
    async def add_tag(self, tag: str) -> List[str]:
        pass

    @abstractmethod
    async def get_stats(self) -> dict:
        """Counters plus per-category breakdown."""
        pass

    @abstractmethod
    async def search(self, query: str) -> SearchResult:
        pass

    @abstractmethod
    async def export_data(self) -> LibraryExport:
        pass

    @abstractmethod
    async def import_data(self, bundle: LibraryImport) -> None:
        """Overwrite every document present in the bundle."""
        pass

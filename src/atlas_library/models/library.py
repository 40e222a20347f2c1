"""
Library Document Data Model

The persisted items+stats document and the shapes returned by queries,
deletes and export.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from atlas_library.models.item import Item, utcnow
from atlas_library.models.taxonomy import CategoryDocument, TagDocument


class LibraryStats(BaseModel):
    """Aggregate counters maintained on every mutation."""

    total_items: int = Field(default=0, ge=0, alias="totalItems")
    total_files: int = Field(default=0, ge=0, alias="totalFiles")
    total_links: int = Field(default=0, ge=0, alias="totalLinks")
    total_size: int = Field(default=0, ge=0, alias="totalSize")

    class Config:
        populate_by_name = True

    @classmethod
    def from_items(cls, items: list) -> "LibraryStats":
        """Recompute every counter by scanning the items."""
        stats = cls()
        for item in items:
            stats.total_items += 1
            if item.type == "link":
                stats.total_links += 1
            file = getattr(item, "file", None)
            if file is not None:
                stats.total_files += 1
                stats.total_size += file.size_bytes
        return stats


class LibraryDocument(BaseModel):
    """Items (newest first on insert) plus their stats."""

    items: List[Item] = Field(default_factory=list)
    stats: LibraryStats = Field(default_factory=LibraryStats)
    last_updated: datetime = Field(default_factory=utcnow, alias="lastUpdated")

    class Config:
        populate_by_name = True

    def index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    def touch(self) -> None:
        self.last_updated = utcnow()


class QueryParams(BaseModel):
    """Filter, sort and pagination options for listing items."""

    search: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    type: Optional[str] = None
    sort: Optional[str] = None
    limit: int = Field(default=50, ge=0)
    offset: int = Field(default=0, ge=0)


class QueryResult(BaseModel):
    """One page of filtered+sorted items; `total` counts before pagination."""

    items: List[Item]
    total: int
    offset: int
    limit: int
    stats: LibraryStats


class SearchResult(BaseModel):
    """Quick search answer: the first matches plus the full match count."""

    items: List[Item]
    total: int
    query: str


class DeletionResult(BaseModel):
    """
    Outcome of a delete.

    `blob_removed` is None when the item had no blob. A failed blob
    cleanup does not fail the delete; it is reported in `blob_error`.
    """

    id: str
    blob_removed: Optional[bool] = Field(default=None, alias="blobRemoved")
    blob_error: Optional[str] = Field(default=None, alias="blobError")

    class Config:
        populate_by_name = True


class LibraryExport(BaseModel):
    """Full dump of the three persisted documents."""

    export_date: datetime = Field(default_factory=utcnow, alias="exportDate")
    library: Optional[LibraryDocument] = None
    categories: Optional[CategoryDocument] = None
    tags: Optional[TagDocument] = None

    class Config:
        populate_by_name = True


class LibraryImport(BaseModel):
    """Any subset of the three documents to overwrite."""

    library: Optional[LibraryDocument] = None
    categories: Optional[CategoryDocument] = None
    tags: Optional[TagDocument] = None

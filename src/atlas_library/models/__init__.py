"""Data models package."""

from atlas_library.models.item import (
    FileInfo,
    FileItem,
    FileType,
    Item,
    ItemCreate,
    ItemPatch,
    ItemType,
    LinkItem,
    NoteItem,
)
from atlas_library.models.library import (
    DeletionResult,
    LibraryDocument,
    LibraryExport,
    LibraryImport,
    LibraryStats,
    QueryParams,
    QueryResult,
    SearchResult,
)
from atlas_library.models.taxonomy import Category, CategoryDocument, TagDocument, slugify

__all__ = [
    "Category",
    "CategoryDocument",
    "DeletionResult",
    "FileInfo",
    "FileItem",
    "FileType",
    "Item",
    "ItemCreate",
    "ItemPatch",
    "ItemType",
    "LibraryDocument",
    "LibraryExport",
    "LibraryImport",
    "LibraryStats",
    "LinkItem",
    "NoteItem",
    "QueryParams",
    "QueryResult",
    "SearchResult",
    "TagDocument",
    "slugify",
]

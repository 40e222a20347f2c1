"""Persistence backends: whole-document store and blob directory."""

from atlas_library.storage.blob_store import BlobStore
from atlas_library.storage.document_store import DocumentStore, JsonFileStore

__all__ = ["BlobStore", "DocumentStore", "JsonFileStore"]

"""
Library Errors

Every failure the core can surface, each mapped to the HTTP status
the API answers with.
"""

from typing import Optional


class LibraryError(Exception):
    """Base class for all library failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"error": self.message}


class InvalidInput(LibraryError):
    """A required field is missing or a value is malformed."""
    status_code = 400


class NotFound(LibraryError):
    """No item with the requested id."""
    status_code = 404


class FileTypeRejected(InvalidInput):
    """Upload media type is neither allow-listed nor text."""


class FileTooLarge(InvalidInput):
    """Upload exceeds the configured size ceiling."""


class StoreIOError(LibraryError):
    """A persisted document could not be read or written."""
    status_code = 500


class ParseError(StoreIOError):
    """A persisted document was read but does not match its schema."""


class OrphanedBlobError(LibraryError):
    """
    The blob was stored but its metadata record could not be committed.

    The blob stays on disk under `stored_filename` until cleaned up by hand.
    """
    status_code = 500

    def __init__(self, message: str, stored_filename: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.stored_filename = stored_filename
        self.cause = cause

    def to_body(self) -> dict:
        return {"error": self.message, "orphanedBlob": self.stored_filename}

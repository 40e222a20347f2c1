"""
Item Data Model

Defines the catalog record as three tagged variants (note, link, file)
plus the create/patch payloads used by the repository.
"""

import json
import secrets
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Millisecond timestamp in base36 followed by 8 random hex chars."""
    return to_base36(int(time.time() * 1000)) + secrets.token_hex(4)


def normalize_tags(value: Any) -> List[str]:
    """
    Accept a list, a JSON list string or a comma-separated string; list
    elements may themselves be comma-separated. Trim, drop empties and
    duplicates while keeping first-seen order.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    tags: List[str] = []
    for raw in value:
        for part in _split_tag_field(str(raw)):
            tag = str(part).strip()
            if tag and tag not in tags:
                tags.append(tag)
    return tags


def _split_tag_field(raw: str) -> list:
    raw = raw.strip()
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
    return raw.split(",")


class ItemType(str, Enum):
    """Kind of catalog record."""
    NOTE = "note"
    LINK = "link"
    FILE = "file"


class FileType(str, Enum):
    """Coarse classification of an uploaded blob."""
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    POWERPOINT = "powerpoint"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    FILE = "file"


class FileInfo(BaseModel):
    """
    Metadata of the blob backing a file item.

    Legacy export keys (filename, path, mimetype, size) are accepted on load.
    """

    original_name: str = Field(
        ...,
        validation_alias=AliasChoices("originalName", "original_name"),
        serialization_alias="originalName",
    )
    stored_filename: str = Field(
        ...,
        validation_alias=AliasChoices("storedFilename", "stored_filename", "filename"),
        serialization_alias="storedFilename",
    )
    relative_path: str = Field(
        ...,
        validation_alias=AliasChoices("relativePath", "relative_path", "path"),
        serialization_alias="relativePath",
    )
    mime_type: str = Field(
        ...,
        validation_alias=AliasChoices("mimeType", "mime_type", "mimetype"),
        serialization_alias="mimeType",
    )
    size_bytes: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("sizeBytes", "size_bytes", "size"),
        serialization_alias="sizeBytes",
    )


class ItemBase(BaseModel):
    """Fields shared by every item variant."""

    id: str = Field(default_factory=generate_id)
    title: str
    description: str = ""
    url: Optional[str] = None
    content: Optional[str] = None
    category: str = "other"
    tags: List[str] = Field(default_factory=list)
    country: Optional[str] = None
    source: Optional[str] = None
    created: datetime = Field(default_factory=utcnow)
    updated: Optional[datetime] = None
    views: int = Field(default=0, ge=0)
    starred: bool = False

    class Config:
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def _file_only_on_file_items(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("file") is not None and "file" not in cls.model_fields:
            raise ValueError("only file items may carry a file record")
        return data

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("title cannot be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _category_default(cls, value: Any) -> Any:
        return value or "other"

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_set(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    @field_validator("created", "updated")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def matches_text(self, needle: str, include_preview: bool = False) -> bool:
        """Case-insensitive substring match over title, description, tags and content."""
        needle = needle.lower()
        fields = [self.title, self.description, self.content]
        if include_preview:
            fields.append(getattr(self, "text_preview", None))
        if any(field and needle in field.lower() for field in fields):
            return True
        return any(needle in tag.lower() for tag in self.tags)


class NoteItem(ItemBase):
    type: Literal["note"] = "note"


class LinkItem(ItemBase):
    type: Literal["link"] = "link"


class FileItem(ItemBase):
    type: Literal["file"] = "file"
    file_type: FileType = Field(default=FileType.FILE, alias="fileType")
    file: FileInfo
    text_preview: Optional[str] = Field(default=None, alias="textPreview")


Item = Annotated[Union[NoteItem, LinkItem, FileItem], Field(discriminator="type")]

ITEM_CLASSES = {
    ItemType.NOTE.value: NoteItem,
    ItemType.LINK.value: LinkItem,
    ItemType.FILE.value: FileItem,
}


class ItemCreate(BaseModel):
    """
    Fields accepted when creating an item.

    Title is optional here so the repository can answer with InvalidInput
    rather than a schema error.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    type: ItemType = ItemType.NOTE
    url: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    country: Optional[str] = None
    source: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _type_default(cls, value: Any) -> Any:
        return value or ItemType.NOTE

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)


class ItemPatch(BaseModel):
    """
    Partial update.

    Only fields present in the payload are applied (tracked through
    `model_fields_set`), so an explicit null clears a field while an
    absent field is left untouched.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    country: Optional[str] = None
    source: Optional[str] = None
    starred: Optional[bool] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Optional[List[str]]:
        return None if value is None else normalize_tags(value)

    def changes(self) -> dict:
        """The fields explicitly supplied, with their new values."""
        return {name: getattr(self, name) for name in self.model_fields_set}

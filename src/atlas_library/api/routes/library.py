"""
Library API Routes

Endpoints for listing, reading, creating, uploading, updating and
deleting items.
"""

from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from atlas_library.api.dependencies import get_library
from atlas_library.engine.library_system import LibrarySystem
from atlas_library.errors import InvalidInput
from atlas_library.models.item import ItemCreate, ItemPatch
from atlas_library.models.library import QueryParams

router = APIRouter()


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


@router.get("")
async def list_items(
    search: Optional[str] = None,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    type: Optional[str] = None,
    sort: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0),
    offset: int = Query(0, ge=0),
    library: LibrarySystem = Depends(get_library),
):
    """
    List items with optional filters.

    Args:
        search: Case-insensitive substring over title, description, tags and content
        category: Exact category id
        tag: Exact tag
        type: note, link or file
        sort: newest (default), oldest or title
        limit: Page size
        offset: Items to skip
    """
    params = QueryParams(
        search=search,
        category=category,
        tag=tag,
        type=type,
        sort=sort,
        limit=library.config.query.default_limit if limit is None else limit,
        offset=offset,
    )
    result = await library.list_items(params)
    return _dump(result)


@router.post("/upload")
async def upload_item(
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    tags: Optional[List[str]] = Form(None),
    country: Optional[str] = Form(None),
    source: Optional[str] = Form(None),
    library: LibrarySystem = Depends(get_library),
):
    """
    Upload a file and create its item.

    Form fields mirror item creation. Tags may be repeated fields, a
    JSON list or a comma-separated string.
    """
    if file is None or not file.filename:
        raise InvalidInput("No file uploaded")

    chunk_size = library.config.uploads.chunk_size

    async def chunks() -> AsyncIterator[bytes]:
        while True:
            chunk = await file.read(chunk_size)
            if not chunk:
                break
            yield chunk

    fields = ItemCreate(
        title=title,
        description=description,
        category=category,
        tags=tags,
        country=country,
        source=source,
    )
    try:
        item = await library.upload_item(
            chunks(),
            file.filename,
            file.content_type,
            fields,
            size_hint=file.size,
        )
    finally:
        await file.close()

    return {"success": True, "item": _dump(item)}


@router.get("/{item_id}")
async def get_item(item_id: str, library: LibrarySystem = Depends(get_library)):
    """Get one item; counts as a view."""
    item = await library.get_item(item_id)
    return _dump(item)


@router.post("")
async def create_item(fields: ItemCreate, library: LibrarySystem = Depends(get_library)):
    """Create a note or link."""
    item = await library.create_item(fields)
    return {"success": True, "item": _dump(item)}


@router.put("/{item_id}")
async def update_item(item_id: str, patch: ItemPatch, library: LibrarySystem = Depends(get_library)):
    """Apply the supplied fields to an item."""
    item = await library.update_item(item_id, patch)
    return {"success": True, "item": _dump(item)}


@router.delete("/{item_id}")
async def delete_item(item_id: str, library: LibrarySystem = Depends(get_library)):
    """Delete an item and its uploaded file, if any."""
    result = await library.delete_item(item_id)
    return {"success": True, **_dump(result)}

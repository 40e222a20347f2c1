"""
Taxonomy API Routes

Endpoints for the category and tag vocabularies.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from atlas_library.api.dependencies import get_library
from atlas_library.engine.library_system import LibrarySystem

router = APIRouter()


class CategoryRequest(BaseModel):
    """New category; the id is derived from the name."""
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class TagRequest(BaseModel):
    tag: Optional[str] = None


@router.get("/categories")
async def list_categories(library: LibrarySystem = Depends(get_library)):
    categories = await library.list_categories()
    return [category.model_dump(mode="json") for category in categories]


@router.post("/categories")
async def add_category(request: CategoryRequest, library: LibrarySystem = Depends(get_library)):
    """Add a category, replacing any existing one with the same id."""
    category = await library.add_category(request.name, request.icon, request.color)
    return {"success": True, "category": category.model_dump(mode="json")}


@router.get("/tags")
async def list_tags(library: LibrarySystem = Depends(get_library)):
    return await library.list_tags()


@router.post("/tags")
async def add_tag(request: TagRequest, library: LibrarySystem = Depends(get_library)):
    """Add a tag if new; answers with the full tag list."""
    tags = await library.add_tag(request.tag)
    return {"success": True, "tags": tags}

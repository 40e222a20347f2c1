"""
Data API Routes

Stats, quick search, export/import and serving of uploaded files.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from atlas_library.api.dependencies import get_library
from atlas_library.engine.library_system import LibrarySystem
from atlas_library.errors import NotFound
from atlas_library.models.library import LibraryImport

router = APIRouter()


@router.get("/api/stats")
async def get_stats(library: LibrarySystem = Depends(get_library)):
    """
    Library statistics.

    Returns:
        - totalItems, totalFiles, totalLinks, totalSize: Maintained counters
        - lastUpdated: Last mutation of the library document
        - categoryStats: Item count per known category
    """
    return await library.get_stats()


@router.get("/api/search")
async def search(q: str = "", library: LibrarySystem = Depends(get_library)):
    """Quick search; also matches the text preview of uploaded files."""
    result = await library.search(q)
    return result.model_dump(mode="json", by_alias=True)


@router.get("/api/export")
async def export_data(library: LibrarySystem = Depends(get_library)):
    """Dump library, categories and tags in one bundle."""
    bundle = await library.export_data()
    return bundle.model_dump(mode="json", by_alias=True)


@router.post("/api/import")
async def import_data(bundle: LibraryImport, library: LibrarySystem = Depends(get_library)):
    """Overwrite every document present in the bundle."""
    await library.import_data(bundle)
    return {"success": True}


@router.get("/uploads/{stored_filename}")
async def get_upload(stored_filename: str, library: LibrarySystem = Depends(get_library)):
    """Serve an uploaded blob by its storage filename."""
    try:
        path = library.blob_store.path_for(stored_filename)
    except ValueError:
        raise NotFound("File not found")
    if not path.is_file():
        raise NotFound("File not found")
    return FileResponse(path)

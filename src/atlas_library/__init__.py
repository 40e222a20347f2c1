"""
Atlas Library

Single-tenant content library: notes, links and uploaded files, tagged
with categories and free-form tags, with aggregate stats and
filtered/sorted/paginated queries.
"""

from atlas_library.engine.library_system import LibrarySystem
from atlas_library.models.item import FileItem, Item, ItemCreate, ItemPatch, LinkItem, NoteItem

__version__ = "0.1.0"
__all__ = ["FileItem", "Item", "ItemCreate", "ItemPatch", "LibrarySystem", "LinkItem", "NoteItem"]

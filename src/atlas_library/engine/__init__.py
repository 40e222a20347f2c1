"""Engine package."""

from atlas_library.engine.base import LibraryEngine
from atlas_library.engine.library_system import LibrarySystem

__all__ = ["LibraryEngine", "LibrarySystem"]

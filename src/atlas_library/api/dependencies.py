"""
API Dependencies

Holds the process-wide LibrarySystem and hands it to route handlers.
"""

from typing import Optional

from atlas_library.config import LibraryConfig, load_config
from atlas_library.engine.library_system import LibrarySystem

# Global library instance (lazy initialized)
library_system: Optional[LibrarySystem] = None


async def get_library() -> LibrarySystem:
    """Get the global library instance, initializing it on first use."""
    global library_system

    if library_system is None:
        system = LibrarySystem(load_config())
        await system.initialize()
        library_system = system

    return library_system


async def set_library(system: Optional[LibrarySystem], config: Optional[LibraryConfig] = None) -> None:
    """Install (or clear) the global instance; used at startup and shutdown."""
    global library_system

    if system is None and config is not None:
        system = LibrarySystem(config)
    if system is not None:
        await system.initialize()
    library_system = system

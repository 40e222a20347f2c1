"""Security package - filename sanitization and path containment."""

from atlas_library.security.sanitizer import Sanitizer

__all__ = ["Sanitizer"]

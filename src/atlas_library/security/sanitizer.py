"""
Security Sanitizer

Turns user-supplied filenames into safe storage names and checks that
resolved paths stay inside their storage directory.
"""

import re
from pathlib import Path


class Sanitizer:
    """
    Sanitizes filenames before they touch the filesystem.

    Every character outside [A-Za-z0-9.-] becomes an underscore, which
    removes path separators and so any traversal attempt.
    """

    UNSAFE_FILENAME_PATTERN = re.compile(r'[^a-zA-Z0-9.-]')

    def sanitize_filename(self, filename: str) -> str:
        """
        Sanitize a filename for storage.

        Args:
            filename: Original filename as uploaded

        Returns:
            Filename containing only letters, digits, dots, hyphens and underscores
        """
        if not filename:
            return "upload"
        return self.UNSAFE_FILENAME_PATTERN.sub('_', filename)

    def is_within(self, path: Path, base: Path) -> bool:
        """Check that path resolves to a location under base."""
        try:
            path.resolve().relative_to(base.resolve())
        except ValueError:
            return False
        return True

"""Exceptions raised by the quickfind core."""

from pathlib import Path
from typing import Optional


class QuickfindError(Exception):
    """Base exception for quickfind errors."""
    pass


class RootDirectoryNotFoundError(QuickfindError):
    """Raised when the search root does not exist or is not a directory."""

    def __init__(self, root: Path):
        self.root = root
        super().__init__(f"Directory not found: {root}")


class MatcherError(QuickfindError):
    """Raised by a matcher when it cannot process an entry."""

    def __init__(self, message: str, matcher_name: Optional[str] = None):
        """Initialize matcher error.

        Args:
            message: Error message
            matcher_name: Name of the matcher that failed (optional)
        """
        self.matcher_name = matcher_name
        super().__init__(message)

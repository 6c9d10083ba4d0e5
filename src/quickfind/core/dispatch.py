"""Static routing of files to content matchers by extension.

Only two content types are searched. Every other file is matched on its name
alone.
"""

from enum import Enum
from pathlib import Path
from typing import Dict


class ContentCapability(str, Enum):
    """Content matcher a file is routed to."""
    NAME_ONLY = "name_only"
    JSON = "json"
    DATABASE = "database"


# File extension -> content capability (compared lowercased)
EXTENSION_TO_CAPABILITY: Dict[str, ContentCapability] = {
    '.json': ContentCapability.JSON,
    '.db': ContentCapability.DATABASE,
    '.sqlite': ContentCapability.DATABASE,
    '.sqlite3': ContentCapability.DATABASE,
}


def classify(file_path: Path) -> ContentCapability:
    """Route a file to a content capability from its extension.

    Examples:
        >>> classify(Path("data/users.JSON"))
        <ContentCapability.JSON: 'json'>
        >>> classify(Path("app.sqlite3"))
        <ContentCapability.DATABASE: 'database'>
        >>> classify(Path("notes.txt"))
        <ContentCapability.NAME_ONLY: 'name_only'>
    """
    return EXTENSION_TO_CAPABILITY.get(file_path.suffix.lower(), ContentCapability.NAME_ONLY)

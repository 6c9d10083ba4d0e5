"""Name and content matchers.

Each matcher takes one filesystem entry and the run's ComparisonPolicy and
returns a MatchOutcome:

1. NameMatcher (name.py): substring test on the base name
2. TextLineMatcher (text.py): line numbers of matching lines in any text file
3. JsonStructuralMatcher (json_lines.py): line scan of JSON files with JSON paths
4. RelationalContentMatcher (database.py): SQLite table, column and row matches
"""

from .base import BaseMatcher
from .name import NameMatcher
from .text import TextLineMatcher
from .json_lines import JsonStructuralMatcher, structural_paths, iter_leaves
from .database import RelationalContentMatcher, is_text_column, open_read_only

__all__ = [
    "BaseMatcher",
    "NameMatcher",
    "TextLineMatcher",
    "JsonStructuralMatcher",
    "structural_paths",
    "iter_leaves",
    "RelationalContentMatcher",
    "is_text_column",
    "open_read_only",
]

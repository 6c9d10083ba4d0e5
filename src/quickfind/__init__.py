"""quickfind: search file names, JSON files and SQLite databases in one pass."""

__version__ = "0.1.0"

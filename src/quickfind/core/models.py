"""
Value objects for a quickfind run.

This module defines the request, the comparison policy derived from it, the
per-matcher outcome type and the run-scoped report the engine hands to the
presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enumerations
# ============================================================================

class MatchKind(str, Enum):
    """Kind of match a record represents. Drives grouping, not matcher identity."""
    NAME = "name"
    JSON_CONTENT = "json_content"
    TEXT_CONTENT = "text_content"
    DATABASE_CONTENT = "database_content"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS = {
    MatchKind.NAME: "Name match",
    MatchKind.JSON_CONTENT: "JSON content match",
    MatchKind.TEXT_CONTENT: "Text content match",
    MatchKind.DATABASE_CONTENT: "Database content match",
}


class SkipReason(str, Enum):
    """Why a matcher produced no record for an entry."""
    NO_MATCH = "no_match"
    TOO_LARGE = "too_large"
    UNREADABLE = "unreadable"
    UNDECODABLE = "undecodable"
    NOT_A_DATABASE = "not_a_database"
    UNEXPECTED_ERROR = "unexpected_error"


# ============================================================================
# Request and comparison policy
# ============================================================================

class SearchRequest(BaseModel):
    """Input to the traversal engine. Immutable for the lifetime of a run."""

    model_config = ConfigDict(frozen=True)

    search_text: str = Field(..., description="Text fragment to look for")
    root_directory: Path = Field(default_factory=Path.cwd, description="Directory to search")
    case_sensitive: bool = Field(False, description="Use case-sensitive ordinal comparison")

    @field_validator("search_text")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if value == "":
            raise ValueError("search text must not be empty")
        return value


LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class ComparisonPolicy:
    """Substring test applied to names, lines and SQL patterns for one run.

    Case-insensitive comparison lowercases both sides with str.lower(), a
    per-character mapping independent of the current locale. Full Unicode
    case folding ("ß" -> "ss") is not applied.
    """
    search_text: str
    case_sensitive: bool
    _needle: str = field(init=False, repr=False)

    def __post_init__(self):
        needle = self.search_text if self.case_sensitive else self.search_text.lower()
        object.__setattr__(self, "_needle", needle)

    @classmethod
    def from_request(cls, request: SearchRequest) -> "ComparisonPolicy":
        return cls(search_text=request.search_text, case_sensitive=request.case_sensitive)

    def contains(self, haystack: str) -> bool:
        if not self.case_sensitive:
            haystack = haystack.lower()
        return self._needle in haystack

    @property
    def like_pattern(self) -> str:
        """`%text%` with LIKE wildcards in the search text escaped."""
        escaped = (
            self.search_text
            .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
            .replace("%", LIKE_ESCAPE + "%")
            .replace("_", LIKE_ESCAPE + "_")
        )
        return f"%{escaped}%"

    @property
    def sql_collation(self) -> Optional[str]:
        return None if self.case_sensitive else "nocase"


# ============================================================================
# Records and outcomes
# ============================================================================

@dataclass(frozen=True)
class MatchRecord:
    """One entry in the result set.

    Attributes:
        path: Filesystem path of the entry that produced the match
        kind: Match kind used for grouping
        detail: Where inside the entry the match occurred
        type_tag: File type that was searched as text (e.g. "JSON"), if any
    """
    path: str
    kind: MatchKind
    detail: str
    type_tag: Optional[str] = None

    def __post_init__(self):
        if not self.path:
            raise ValueError("MatchRecord.path must not be empty")
        if not self.detail:
            raise ValueError("MatchRecord.detail must not be empty")

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "path": self.path,
            "kind": self.kind.value,
            "detail": self.detail,
            "type_tag": self.type_tag,
        }


@dataclass(frozen=True)
class MatchOutcome:
    """Result of running one matcher on one entry: a record or a skip reason."""
    record: Optional[MatchRecord] = None
    skip: Optional[SkipReason] = None
    message: str = ""
    notes: Tuple[str, ...] = ()

    def __post_init__(self):
        if (self.record is None) == (self.skip is None):
            raise ValueError("MatchOutcome needs exactly one of record or skip")

    @classmethod
    def matched(cls, record: MatchRecord, notes: Tuple[str, ...] = ()) -> "MatchOutcome":
        return cls(record=record, notes=notes)

    @classmethod
    def skipped(cls, reason: SkipReason, message: str = "", notes: Tuple[str, ...] = ()) -> "MatchOutcome":
        return cls(skip=reason, message=message, notes=notes)

    @property
    def is_match(self) -> bool:
        return self.record is not None


# ============================================================================
# Progress, warnings and the run report
# ============================================================================

@dataclass(frozen=True)
class ProgressEvent:
    """Emitted after each processed entry."""
    completed: int
    total: int
    path: Optional[str] = None

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 1.0
        return self.completed / self.total


@dataclass(frozen=True)
class TraversalWarning:
    """A subtree that could not be enumerated."""
    path: str
    message: str


@dataclass(frozen=True)
class SkippedEntry:
    path: str
    reason: SkipReason
    message: str = ""


@dataclass(frozen=True)
class PartialSkip:
    """A table or column inside an entry that could not be searched."""
    path: str
    message: str


@dataclass
class SearchReport:
    """Everything a run produced. The engine is the only writer."""
    request: SearchRequest
    records: List[MatchRecord] = field(default_factory=list)
    warnings: List[TraversalWarning] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    partial_skips: List[PartialSkip] = field(default_factory=list)
    total_entries: int = 0
    processed_entries: int = 0
    cancelled: bool = False

    @property
    def count(self) -> int:
        return len(self.records)

    def grouped(self) -> Dict[MatchKind, List[MatchRecord]]:
        """Records grouped by kind, groups in order of first appearance."""
        groups: Dict[MatchKind, List[MatchRecord]] = {}
        for record in self.records:
            groups.setdefault(record.kind, []).append(record)
        return groups

    def to_dict(self) -> dict:
        return {
            "search_text": self.request.search_text,
            "directory": str(self.request.root_directory),
            "case_sensitive": self.request.case_sensitive,
            "count": self.count,
            "total_entries": self.total_entries,
            "processed_entries": self.processed_entries,
            "cancelled": self.cancelled,
            "warnings": [{"path": w.path, "message": w.message} for w in self.warnings],
            "partial_skips": [{"path": p.path, "message": p.message} for p in self.partial_skips],
            "results": [record.to_dict() for record in self.records],
        }

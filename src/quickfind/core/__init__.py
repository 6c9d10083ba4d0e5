"""quickfind core: traversal, dispatch and matching."""

from .engine import TraversalEngine, search
from .exceptions import QuickfindError, RootDirectoryNotFoundError, MatcherError
from .models import (
    ComparisonPolicy,
    MatchKind,
    MatchOutcome,
    MatchRecord,
    PartialSkip,
    ProgressEvent,
    SearchReport,
    SearchRequest,
    SkipReason,
    TraversalWarning,
)

__all__ = [
    "TraversalEngine",
    "search",
    "QuickfindError",
    "RootDirectoryNotFoundError",
    "MatcherError",
    "ComparisonPolicy",
    "MatchKind",
    "MatchOutcome",
    "MatchRecord",
    "PartialSkip",
    "ProgressEvent",
    "SearchReport",
    "SearchRequest",
    "SkipReason",
    "TraversalWarning",
]

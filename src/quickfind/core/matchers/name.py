"""Base-name substring matcher for files and directories."""

from pathlib import Path

from quickfind.core.matchers.base import BaseMatcher
from quickfind.core.models import ComparisonPolicy, MatchKind, MatchOutcome, MatchRecord, SkipReason


class NameMatcher(BaseMatcher):
    """Matches the search text anywhere in an entry's base name."""

    @property
    def name(self) -> str:
        return "name"

    def match(self, path: Path, policy: ComparisonPolicy) -> MatchOutcome:
        entry_name = path.name
        if not policy.contains(entry_name):
            return MatchOutcome.skipped(SkipReason.NO_MATCH)

        label = "directory" if path.is_dir() else "file"
        return MatchOutcome.matched(MatchRecord(
            path=str(path),
            kind=MatchKind.NAME,
            detail=f"{label}: {entry_name}",
        ))

"""Line-indexed substring matcher for files read as plain text."""

from pathlib import Path
from typing import Optional

from quickfind.core.matchers.base import BaseMatcher, format_line_numbers
from quickfind.core.models import ComparisonPolicy, MatchKind, MatchOutcome, MatchRecord, SkipReason


class TextLineMatcher(BaseMatcher):
    """Records every 1-based line number that contains the search text.

    Content is decoded as UTF-8 with replacement characters, so any readable
    file can be scanned. I/O failures become an `unreadable` skip.
    """

    def __init__(self, type_tag: Optional[str] = None):
        super().__init__()
        self.type_tag = type_tag

    @property
    def name(self) -> str:
        return "text"

    def match(self, path: Path, policy: ComparisonPolicy) -> MatchOutcome:
        try:
            with open(path, "r", encoding="utf-8", errors="replace", newline=None) as handle:
                line_numbers = [
                    number
                    for number, line in enumerate(handle, start=1)
                    if policy.contains(line.rstrip("\n"))
                ]
        except OSError as e:
            return MatchOutcome.skipped(SkipReason.UNREADABLE, str(e))

        if not line_numbers:
            return MatchOutcome.skipped(SkipReason.NO_MATCH)

        return MatchOutcome.matched(MatchRecord(
            path=str(path),
            kind=MatchKind.TEXT_CONTENT,
            detail=format_line_numbers(line_numbers),
            type_tag=self.type_tag,
        ))

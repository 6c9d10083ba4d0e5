"""Line-oriented matcher for JSON files with structural path annotation.

JSON files are scanned line by line rather than parsed as one document, so a
single malformed record in a JSON-lines log never hides matches on later
lines. When a matching line is itself a complete JSON object or array, the
path of every leaf value on that line is attached to it:

    line 3 (JSON paths: id, user.name, tags[0], tags[1])

Object members contribute `.key` segments and array items `[index]` segments.
"""

import json
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from quickfind.config import Settings, get_settings
from quickfind.core.matchers.base import BaseMatcher
from quickfind.core.models import ComparisonPolicy, MatchKind, MatchOutcome, MatchRecord, SkipReason


def iter_leaves(value: Any, prefix: str = "") -> Iterator[Tuple[str, Any]]:
    """Yield (path, scalar) for every leaf of a parsed JSON value.

    Examples:
        >>> list(iter_leaves({"a": {"b": "x"}}))
        [('a.b', 'x')]
        >>> [p for p, _ in iter_leaves([1, 2, "x"])]
        ['[0]', '[1]', '[2]']
    """
    if isinstance(value, dict):
        for member, child in value.items():
            yield from iter_leaves(child, f"{prefix}.{member}" if prefix else member)
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from iter_leaves(item, f"{prefix}[{index}]")
    else:
        yield prefix, value


def structural_paths(line: str) -> List[str]:
    """Return every leaf path of a line that parses as a standalone JSON container.

    Lines that are not a complete object or array return an empty list.
    """
    content = line.strip()
    if not content.startswith(("{", "[")):
        return []

    try:
        return [path for path, _ in iter_leaves(json.loads(content)) if path]
    except (ValueError, RecursionError):
        return []


class JsonStructuralMatcher(BaseMatcher):
    """Matches JSON files line by line and annotates lines with JSON paths."""

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()
        self.settings = settings or get_settings()

    @property
    def name(self) -> str:
        return "json"

    def match(self, path: Path, policy: ComparisonPolicy) -> MatchOutcome:
        try:
            size = path.stat().st_size
        except OSError as e:
            return MatchOutcome.skipped(SkipReason.UNREADABLE, str(e))

        if size > self.settings.max_json_file_bytes:
            return MatchOutcome.skipped(
                SkipReason.TOO_LARGE,
                f"{size} bytes exceeds limit of {self.settings.max_json_file_bytes}",
            )

        line_details: List[str] = []
        try:
            with open(path, "r", encoding="utf-8-sig", newline=None) as handle:
                for number, raw_line in enumerate(handle, start=1):
                    line = raw_line.rstrip("\n")
                    if not policy.contains(line):
                        continue

                    detail = f"line {number}"
                    paths = structural_paths(line)
                    if paths:
                        detail += f" (JSON paths: {', '.join(paths)})"
                    line_details.append(detail)
        except UnicodeDecodeError as e:
            return MatchOutcome.skipped(SkipReason.UNDECODABLE, str(e))
        except OSError as e:
            return MatchOutcome.skipped(SkipReason.UNREADABLE, str(e))

        if not line_details:
            return MatchOutcome.skipped(SkipReason.NO_MATCH)

        return MatchOutcome.matched(MatchRecord(
            path=str(path),
            kind=MatchKind.JSON_CONTENT,
            detail="; ".join(line_details),
        ))

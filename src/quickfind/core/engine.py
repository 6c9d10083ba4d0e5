"""Traversal engine: one pass over a directory tree, dispatching every entry.

The engine:
- Materializes all entries under the root before matching, so progress has a
  fixed denominator
- Runs the name matcher on every entry
- Routes regular files to a content matcher through the dispatch table
- Reports progress after each entry and stops early on cancellation
- Owns the only result list of the run
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from quickfind.config import Settings, get_settings
from quickfind.core.dispatch import ContentCapability, classify
from quickfind.core.exceptions import RootDirectoryNotFoundError
from quickfind.core.matchers import (
    JsonStructuralMatcher,
    NameMatcher,
    RelationalContentMatcher,
    TextLineMatcher,
)
from quickfind.core.models import (
    ComparisonPolicy,
    MatchOutcome,
    PartialSkip,
    ProgressEvent,
    SearchReport,
    SearchRequest,
    SkippedEntry,
    SkipReason,
    TraversalWarning,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class TraversalEngine:
    """Single-threaded search over one directory tree."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the engine and its matchers.

        Args:
            settings: Optional settings instance (uses cached settings if None)
        """
        self.settings = settings or get_settings()
        self.name_matcher = NameMatcher()
        self.json_matcher = JsonStructuralMatcher(self.settings)
        self.json_text_matcher = TextLineMatcher(type_tag="JSON")
        self.database_matcher = RelationalContentMatcher()

    def enumerate_entries(
        self,
        root: Path,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[List[Path], List[TraversalWarning]]:
        """List every file and directory under `root`, at any depth.

        Directories that cannot be read are reported as warnings and their
        contents are left out. Names are sorted within each directory so the
        order is stable between runs.

        Returns:
            Tuple of (entries, warnings)
        """
        entries: List[Path] = []
        warnings: List[TraversalWarning] = []

        def on_error(error: OSError) -> None:
            target = error.filename or str(root)
            if isinstance(error, PermissionError):
                message = "access denied"
            elif isinstance(error, FileNotFoundError):
                message = "directory not found"
            else:
                message = error.strerror or str(error)
            logger.warning(f"Skipping {target}: {message}")
            warnings.append(TraversalWarning(path=str(target), message=message))

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            if cancel_event is not None and cancel_event.is_set():
                break
            dirnames.sort()
            base = Path(dirpath)
            entries.extend(base / name for name in sorted(dirnames + filenames))

        return entries, warnings

    def run(
        self,
        request: SearchRequest,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchReport:
        """Search the request's root directory.

        Args:
            request: What to search for and where
            on_progress: Called with a ProgressEvent after every entry
            cancel_event: When set, processing stops before the next entry;
                results collected so far are kept

        Returns:
            SearchReport with records in traversal order

        Raises:
            RootDirectoryNotFoundError: If the root is missing or not a directory
        """
        root = Path(request.root_directory)
        if not root.is_dir():
            raise RootDirectoryNotFoundError(root)

        policy = ComparisonPolicy.from_request(request)
        report = SearchReport(request=request)

        logger.info(f"Searching {root} for '{request.search_text}' (case_sensitive={request.case_sensitive})")

        entries, warnings = self.enumerate_entries(root, cancel_event)
        report.warnings.extend(warnings)
        report.total_entries = len(entries)
        logger.info(f"Discovered {len(entries)} entries")

        if cancel_event is not None and cancel_event.is_set():
            report.cancelled = True
            return report

        if not entries:
            if on_progress:
                on_progress(ProgressEvent(completed=0, total=0))
            return report

        for index, entry in enumerate(entries):
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                logger.info(f"Search cancelled after {index} of {len(entries)} entries")
                break

            self._process_entry(entry, policy, report)
            report.processed_entries = index + 1

            if on_progress:
                on_progress(ProgressEvent(completed=index + 1, total=len(entries), path=str(entry)))

        logger.info(f"Search finished with {report.count} matches")
        return report

    def _process_entry(self, entry: Path, policy: ComparisonPolicy, report: SearchReport) -> None:
        self._collect(entry, self.name_matcher.match_safe(entry, policy), report)

        if not entry.is_file():
            return

        capability = classify(entry)
        if capability is ContentCapability.JSON:
            outcome = self.json_matcher.match_safe(entry, policy)
            if outcome.skip is SkipReason.UNDECODABLE:
                logger.debug(f"{entry} is not decodable as JSON text, searching it as plain text")
                outcome = self.json_text_matcher.match_safe(entry, policy)
        elif capability is ContentCapability.DATABASE:
            outcome = self.database_matcher.match_safe(entry, policy)
        else:
            return

        self._collect(entry, outcome, report)

    @staticmethod
    def _collect(entry: Path, outcome: MatchOutcome, report: SearchReport) -> None:
        if outcome.record is not None:
            report.records.append(outcome.record)
        elif outcome.skip is not SkipReason.NO_MATCH:
            report.skipped.append(SkippedEntry(path=str(entry), reason=outcome.skip, message=outcome.message))

        for note in outcome.notes:
            logger.debug(f"Partially skipped {entry}: {note}")
            report.partial_skips.append(PartialSkip(path=str(entry), message=note))


def search(
    request: SearchRequest,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    settings: Optional[Settings] = None,
) -> SearchReport:
    """Convenience wrapper: run a TraversalEngine once."""
    return TraversalEngine(settings).run(request, on_progress=on_progress, cancel_event=cancel_event)

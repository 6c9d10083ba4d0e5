"""Base matcher interface shared by the name and content matchers.

A matcher looks at one filesystem entry under a fixed comparison policy and
returns a single MatchOutcome: a record when the entry matched, otherwise a
skip reason. Matchers never raise for per-entry problems and never hold a
file handle or connection beyond the call.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable
import logging

from quickfind.core.models import ComparisonPolicy, MatchOutcome, SkipReason


class BaseMatcher(ABC):
    """Abstract base class for matcher implementations.

    Attributes:
        logger: Logger instance for this matcher
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def match(self, path: Path, policy: ComparisonPolicy) -> MatchOutcome:
        """Search one entry.

        Args:
            path: Entry to inspect
            policy: Comparison policy of the current run

        Returns:
            MatchOutcome holding a record or a skip reason
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    def match_safe(self, path: Path, policy: ComparisonPolicy) -> MatchOutcome:
        """Run match() and turn any unexpected exception into a skip.

        Use this from the traversal loop so one bad entry never aborts a run.
        """
        try:
            outcome = self.match(path, policy)
        except Exception as e:
            self.logger.debug(f"{self.name} matcher failed on {path}: {e}", exc_info=True)
            return MatchOutcome.skipped(SkipReason.UNEXPECTED_ERROR, str(e))

        if outcome.skip is not None and outcome.skip is not SkipReason.NO_MATCH:
            self.logger.debug(f"{self.name} matcher skipped {path}: {outcome.skip.value} {outcome.message}")
        return outcome

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


def format_line_numbers(line_numbers: Iterable[int]) -> str:
    """Render 1-based line numbers as "line 2; line 5"."""
    return "; ".join(f"line {number}" for number in line_numbers)

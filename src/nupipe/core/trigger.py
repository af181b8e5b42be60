"""Source change trigger with branch filter and quiet period.

Changes on accepted branches are coalesced: a build fires only once no new
change has arrived for the whole quiet period, and never while a build is
still running.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from fnmatch import fnmatchcase

from ..models import SourceChange

logger = logging.getLogger(__name__)


def _short_branch(branch: str) -> str:
    return branch.removeprefix("refs/heads/")


@dataclass(frozen=True)
class BranchFilter:
    """``+:pattern`` / ``-:pattern`` branch rules; the last matching rule wins."""

    rules: tuple[str, ...] = ("+:main",)

    @classmethod
    def from_rules(cls, rules: Iterable[str]) -> "BranchFilter":
        lines = [line.strip() for raw in rules for line in raw.splitlines()]
        return cls(rules=tuple(line for line in lines if line))

    def accepts(self, branch: str) -> bool:
        name = _short_branch(branch)
        accepted = False
        for rule in self.rules:
            if rule.startswith("-:"):
                if fnmatchcase(name, rule[2:].strip()):
                    accepted = False
            else:
                pattern = rule[2:].strip() if rule.startswith("+:") else rule
                if fnmatchcase(name, pattern):
                    accepted = True
        return accepted


class QuietPeriodTrigger:
    """Debounces source changes into build triggers."""

    def __init__(
        self,
        quiet_period: float,
        branch_filter: BranchFilter | None = None,
    ) -> None:
        if quiet_period < 0:
            raise ValueError("quiet_period must be >= 0")
        self.quiet_period = timedelta(seconds=quiet_period)
        self.branch_filter = branch_filter or BranchFilter()
        self._pending: SourceChange | None = None
        self._coalesced = 0

    @property
    def pending(self) -> SourceChange | None:
        return self._pending

    def notify(self, change: SourceChange) -> bool:
        """Record a change; returns False if its branch is filtered out."""
        if not self.branch_filter.accepts(change.branch):
            logger.debug("Ignoring change on filtered branch %s", change.branch)
            return False
        if self._pending is not None:
            self._coalesced += 1
            logger.debug("Coalescing change %s into pending trigger", change.revision)
        self._pending = change
        return True

    def poll(self, now: datetime, busy: bool = False) -> SourceChange | None:
        """Return the latest change once the quiet period has passed.

        Args:
            now: Current time
            busy: True while a build is running; pending changes keep waiting

        Returns:
            The change to build, or None if nothing should start yet
        """
        if self._pending is None or busy:
            return None
        if now - self._pending.detected_at < self.quiet_period:
            return None
        fired = self._pending
        if self._coalesced:
            logger.info("Coalesced %d changes into one build", self._coalesced + 1)
        self._pending = None
        self._coalesced = 0
        return fired

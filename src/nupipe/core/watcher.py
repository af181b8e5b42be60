"""Source watching loop.

Polls the head revision of the watched branch, feeds every new revision to a
QuietPeriodTrigger and starts a build whenever the trigger fires.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime

from ..models import SourceChange
from .trigger import QuietPeriodTrigger

logger = logging.getLogger(__name__)


def watch_source(
    branch: str,
    poll_revision: Callable[[], str],
    trigger: QuietPeriodTrigger,
    on_fire: Callable[[SourceChange], None],
    interval: float = 30,
    max_runs: int | None = None,
    max_polls: int | None = None,
    clock: Callable[[], datetime] = datetime.now,
    sleep: Callable[[float], None] = time.sleep,
    is_busy: Callable[[], bool] = lambda: False,
) -> int:
    """Watch a branch and build after each quiet period.

    The revision seen at start-up is the baseline and does not trigger.

    Args:
        branch: Branch being watched
        poll_revision: Returns the branch's current head revision
        trigger: Debouncing trigger
        on_fire: Runs a build for a fired change
        interval: Seconds between polls
        max_runs: Stop after this many builds
        max_polls: Stop after this many polls
        clock: Current time source
        sleep: Sleep function
        is_busy: True while a build is running

    Returns:
        Number of builds started
    """
    last_revision = poll_revision()
    logger.info("Watching %s at %s", branch, last_revision[:12])
    runs = 0
    polls = 0
    while (max_runs is None or runs < max_runs) and (max_polls is None or polls < max_polls):
        sleep(interval)
        polls += 1
        revision = poll_revision()
        now = clock()
        if revision != last_revision:
            last_revision = revision
            trigger.notify(SourceChange(branch=branch, revision=revision, detected_at=now))
        fired = trigger.poll(now, busy=is_busy())
        if fired is not None:
            runs += 1
            on_fire(fired)
    return runs

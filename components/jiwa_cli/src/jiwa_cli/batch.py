"""Apply one action to a list of issues, in order, stopping at the first failure."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from issue_client_interface.errors import IssueTrackerError

logger = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    processed: list[str] = field(default_factory=list)
    failed_key: str | None = None
    error: IssueTrackerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_batch(keys: Iterable[str], action: Callable[[str], object]) -> BatchOutcome:
    """Call ``action(key)`` for each key sequentially.

    The first IssueTrackerError stops the batch; keys after it are left untouched.
    Any other exception propagates unchanged.
    """
    outcome = BatchOutcome()
    for key in keys:
        try:
            action(key)
        except IssueTrackerError as e:
            logger.debug("Stopping batch at %s after %d processed", key, len(outcome.processed))
            outcome.failed_key = key
            outcome.error = e
            return outcome
        outcome.processed.append(key)
    return outcome

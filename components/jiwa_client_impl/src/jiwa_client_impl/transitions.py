"""Resolve a human readable status name into the transition Jira needs to get there.

Transitions are named actions in Jira that move one issue from one status to another.
Which transitions exist depends on the issue's current status and its workflow, so you
have to ask Jira which transitions are available for a specific issue, and then trigger
one of them by its id.

There is an inherent race between listing and applying: another user can move the
issue in between, in which case Jira rejects the apply call and the resulting ApiError
is surfaced as is. Retrying blindly could advance the workflow twice.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from issue_client_interface.errors import AmbiguousTransitionError, InvalidInputError, TransitionNotFoundError
from issue_client_interface.issue import Transition

if TYPE_CHECKING:
    from issue_client_interface.client import IssueTrackerClient

logger = logging.getLogger(__name__)


def _normalize(name: str) -> str:
    return name.casefold()


def find_transition(issue_key: str, transitions: Sequence[Transition], status: str) -> Transition:
    """Pick the transition whose name equals status, ignoring case.

    Only exact (case-insensitive) matches count; there is no prefix or fuzzy matching.

    Raises:
        TransitionNotFoundError:  If nothing matches. The error lists every available transition name.
        AmbiguousTransitionError: If several transitions carry the same name.
    """
    wanted = _normalize(status)
    matches = [t for t in transitions if _normalize(t.name) == wanted]

    if not matches:
        raise TransitionNotFoundError(issue_key, status, [t.name for t in transitions])
    if len(matches) > 1:
        raise AmbiguousTransitionError(issue_key, status, [f"{t.name} (id {t.id})" for t in matches])
    return matches[0]


def transition_issue(
    client: IssueTrackerClient,
    issue_key: str,
    status: str,
    *,
    timeout: float | None = None,
) -> Transition:
    """List the issue's transitions, resolve status among them and apply the match.

    Returns:
        The transition that was applied.
    """
    if not status or not status.strip():
        raise InvalidInputError("cannot move an issue to an empty status")

    transitions = client.list_issue_transitions(issue_key, timeout=timeout)
    match = find_transition(issue_key, transitions, status)

    logger.debug("Resolved %r to transition %s (%s) for %s", status, match.id, match.name, issue_key)
    client.apply_transition(issue_key, match.id, timeout=timeout)
    logger.info("Moved %s via %r", issue_key, match.name)
    return match

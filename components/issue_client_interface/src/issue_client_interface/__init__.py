"""Contracts shared by issue tracker clients."""

from issue_client_interface.client import IssueTrackerClient
from issue_client_interface.errors import (
    AmbiguousOutcomeError,
    AmbiguousTransitionError,
    ApiError,
    ConfigurationError,
    InvalidInputError,
    InvalidResponseError,
    IssueNotFoundError,
    IssueTrackerError,
    TransitionError,
    TransitionNotFoundError,
    TransportError,
)
from issue_client_interface.issue import (
    Comment,
    Issue,
    IssueType,
    IssueUpdate,
    Project,
    SearchResult,
    Transition,
    is_issue_key,
)

__all__ = [
    "IssueTrackerClient",
    "Issue",
    "IssueUpdate",
    "IssueType",
    "Project",
    "Comment",
    "SearchResult",
    "Transition",
    "is_issue_key",
    "IssueTrackerError",
    "ConfigurationError",
    "InvalidInputError",
    "TransportError",
    "AmbiguousOutcomeError",
    "ApiError",
    "IssueNotFoundError",
    "InvalidResponseError",
    "TransitionError",
    "TransitionNotFoundError",
    "AmbiguousTransitionError",
]

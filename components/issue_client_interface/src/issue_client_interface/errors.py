"""Error taxonomy shared by every issue tracker client implementation.

Every error raised by a client derives from ``IssueTrackerError`` so the command
layer can tell "our" failures apart from programming errors with a single
``except`` clause.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
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


class IssueTrackerError(Exception):
    """Base class for all client errors."""


class ConfigurationError(IssueTrackerError):
    """Raised when the client is missing base URL or credentials.

    Always raised before a request leaves the process.
    """


class InvalidInputError(IssueTrackerError, ValueError):
    """Raised for caller input that can never succeed (empty JQL, malformed key, ...)."""


class TransportError(IssueTrackerError):
    """Raised when no HTTP response was received (DNS, TCP, TLS, timeout)."""


class AmbiguousOutcomeError(TransportError):
    """Raised when a mutating request timed out after it was sent.

    The remote side may or may not have applied the change; the caller has to
    check the issue before trying again.
    """


class ApiError(IssueTrackerError):
    """Raised when the service answered with a status code above 299.

    Args:
        status_code: HTTP status code of the response
        body:        The raw response body, unmodified
    """

    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"API error {status_code}: {body}")


class IssueNotFoundError(ApiError):
    """Raised when a requested issue or project does not exist (404)."""


class InvalidResponseError(IssueTrackerError):
    """Raised when a successful response body cannot be decoded."""

    def __init__(self, message: str, body: str = "") -> None:
        self.body = body
        super().__init__(message)


class TransitionError(IssueTrackerError):
    """Base class for failures to resolve a status name into a transition."""

    def __init__(self, issue_key: str, status: str, available: Sequence[str], message: str) -> None:
        self.issue_key = issue_key
        self.status = status
        self.available = list(available)
        super().__init__(message)


class TransitionNotFoundError(TransitionError):
    """Raised when no available transition matches the requested status."""

    def __init__(self, issue_key: str, status: str, available: Sequence[str]) -> None:
        names = ", ".join(available) if available else "(none)"
        super().__init__(
            issue_key,
            status,
            available,
            f"could not find {status!r} as a valid transition for {issue_key}, "
            f"valid transitions are: {names}",
        )


class AmbiguousTransitionError(TransitionError):
    """Raised when more than one available transition matches the requested status."""

    def __init__(self, issue_key: str, status: str, available: Sequence[str]) -> None:
        super().__init__(
            issue_key,
            status,
            available,
            f"{status!r} matches more than one transition for {issue_key}: {', '.join(available)}",
        )

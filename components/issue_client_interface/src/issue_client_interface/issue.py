"""Issue contract - Core issue representation."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field, fields as dataclass_fields

#project code, hyphen, number: "JIWA-42"
ISSUE_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*-[0-9]+$")
PROJECT_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


def is_issue_key(value: str) -> bool:
    """Return True when value is a bare issue key such as 'JIWA-42'."""
    return isinstance(value, str) and ISSUE_KEY_PATTERN.fullmatch(value) is not None


@dataclass(frozen=True)
class Transition:
    """One edge out of an issue's current workflow state."""

    id: str
    name: str


@dataclass(frozen=True)
class Comment:
    author: str
    created: str
    body: str


@dataclass(frozen=True)
class IssueType:
    id: str
    name: str
    description: str = ""
    subtask: bool = False


@dataclass(frozen=True)
class Project:
    """A project as returned by the service, used to enumerate issue types."""

    key: str
    name: str
    issue_types: list[IssueType] = field(default_factory=list)


@dataclass
#opted for dataclass instead of standard class so that partial updates can be made
class IssueUpdate:
    """
    All fields default to None. During an update, only fields explicitly changed to non-None value will be sent.

    Note that ``labels`` replaces the issue's label set, it is never merged.
    """

    summary: str | None = None
    description: str | None = None
    issue_type: str | None = None
    labels: list[str] | None = None
    assignee: str | None = None

    def set_fields(self) -> dict:
        """Return a dict containing only the fields explicitly set to non-None values (the only ones to be updated)"""
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self) if getattr(self, f.name) is not None}

    @classmethod
    def from_issue(cls, issue: Issue) -> IssueUpdate:
        """Build an update that writes back the issue's current summary, description and labels."""
        return cls(summary=issue.summary, description=issue.description, labels=list(issue.labels))


class Issue(ABC):
    """Abstract base class representing an issue."""

    @property
    @abstractmethod
    def key(self) -> str:
        """Return the project scoped key of the issue (e.g. 'JIWA-42')"""
        raise NotImplementedError

    @property
    @abstractmethod
    def project(self) -> str:
        """Return the key of the project the issue belongs to."""
        raise NotImplementedError

    @property
    @abstractmethod
    def summary(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def description(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def issue_type(self) -> str:
        """Return the name of the issue type (e.g. 'Task')."""
        raise NotImplementedError

    @property
    @abstractmethod
    def labels(self) -> list[str]:
        raise NotImplementedError

    @property
    @abstractmethod
    def assignee(self) -> str | None:
        """Return the name of the assignee, or None if unassigned."""
        raise NotImplementedError

    @property
    @abstractmethod
    def status(self) -> str:
        """Return the name of the current workflow status."""
        raise NotImplementedError

    @property
    @abstractmethod
    def comments(self) -> list[Comment]:
        """Return comments in the order the service lists them."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<Issue key={self.key!r} summary={self.summary!r} status={self.status!r}>"


@dataclass(frozen=True)
class SearchResult:
    """Exactly one page of search results, as the service returned it."""

    issues: list[Issue]
    start_at: int = 0
    max_results: int = 0
    total: int = 0

    def __iter__(self) -> Iterator[Issue]:
        return iter(self.issues)

    def __len__(self) -> int:
        return len(self.issues)

"""Core client contract definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from issue_client_interface.issue import Comment, Issue, IssueUpdate, Project, SearchResult, Transition

__all__ = ["IssueTrackerClient"]


class IssueTrackerClient(ABC):
    """Tracks issues.

    Every operation accepts a keyword-only ``timeout`` (seconds) that overrides the
    client's configured per-call timeout. Failures are reported by raising a subclass
    of ``issue_client_interface.errors.IssueTrackerError``.
    """

    # ------------------------------------------------------------------
    # Issue CRUD (create, read, update, delete)
    # ------------------------------------------------------------------
    @abstractmethod
    def create_issue(
        self,
        *, # asterisk indicates that all calls to this method must specify the argument name
        project: str,
        summary: str,
        description: str = "",
        issue_type: str = "Task",
        labels: Sequence[str] | None = None,
        component: str | None = None,
        assignee: str | None = None,
        timeout: float | None = None,
        ) -> Issue:
        """Create an issue."""
        """Args:
            project:     Key of the project to create the issue in
            summary:     Short title for the new issue
            description: Optional long-form description
            issue_type:  Name of the issue type, e.g. 'Task' or 'Bug'
            labels:      Initial labels
            component:   Name of a project component
            assignee:    Name of the initial assignee

        Returns:
            The newly created Issue, carrying the key assigned by the service

        """
        raise NotImplementedError

    @abstractmethod
    def get_issue(self, key: str, *, timeout: float | None = None) -> Issue:
        """Get an issue."""
        """Raises:
            IssueNotFoundError: If no issue with that key exists

        """
        raise NotImplementedError

    @abstractmethod
    def update_issue(self, key: str, update: IssueUpdate, *, timeout: float | None = None) -> None:
        """Update an issue."""
        """Args:
            key:    The key of the issue to update
            update: An IssueUpdate instance carrying the desired changes

        Notes on usage: Only the fields explicitly set are modified, leaving the other properties unchanged.
        An update with no fields set does not contact the service.

        """
        raise NotImplementedError

    @abstractmethod
    def delete_issue(self, key: str, *, timeout: float | None = None) -> None:
        """Delete an issue."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Field shortcuts
    # ------------------------------------------------------------------
    @abstractmethod
    def assign_issue(self, key: str, assignee: str | None, *, timeout: float | None = None) -> None:
        """Assign an issue to a user, or unassign it when assignee is None."""
        raise NotImplementedError

    @abstractmethod
    def label_issue(self, key: str, labels: Sequence[str], *, timeout: float | None = None) -> None:
        """Replace the labels of an issue."""
        """Notes on usage:
            The given labels REPLACE the existing ones. Callers that want to add a label have to
            read the current labels and pass the union.

        Raises:
            InvalidInputError: If labels is empty

        """
        raise NotImplementedError

    @abstractmethod
    def comment_on_issue(self, key: str, body: str, *, timeout: float | None = None) -> Comment:
        """Add a comment to an issue."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @abstractmethod
    def search(self, jql: str, *, timeout: float | None = None) -> SearchResult:
        """Search issues with a JQL query."""
        """Notes on usage:
            Returns exactly the page the service returned, no automatic re-paging.

        Raises:
            InvalidInputError: If jql is empty

        """
        raise NotImplementedError

    @abstractmethod
    def get_project(self, key: str, *, timeout: float | None = None) -> Project:
        """Get a project, including its issue types."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------
    @abstractmethod
    def list_issue_transitions(self, key: str, *, timeout: float | None = None) -> list[Transition]:
        """List the transitions available from the issue's current status."""
        raise NotImplementedError

    @abstractmethod
    def apply_transition(self, key: str, transition_id: str, *, timeout: float | None = None) -> None:
        """Apply a transition by its id."""
        raise NotImplementedError

    @abstractmethod
    def transition_issue(self, key: str, status: str, *, timeout: float | None = None) -> Transition:
        """Move an issue to the status with the given (case-insensitive) name."""
        """Returns:
            The transition that was applied

        Raises:
            TransitionNotFoundError: If no available transition carries that name; the message
                                     lists the transitions that were available

        """
        raise NotImplementedError

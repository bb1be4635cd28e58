"""Jira Issue implementation."""

from __future__ import annotations

from typing import Any

from issue_client_interface.issue import Comment, Issue, IssueType, Project


# ------------------------------------------------------------------
# Issue implementation
# ------------------------------------------------------------------
class JiraIssue(Issue):
    """Concrete Issue backed by a Jira issue API response.

    Construct via the module-level ``build_issue()`` factory rather than
    instantiating directly.

    Args:
        key:      The Jira issue key (e.g. 'JIWA-42').
        raw_data: The ``fields``-level dict from the Jira REST API response.
        base_url: The browse root of the Jira instance (base URL plus endpoint prefix).

    """

    def __init__(self, key: str, raw_data: dict, base_url: str = "") -> None:
        self._key = key
        self._raw = raw_data
        self._base_url = base_url.rstrip("/")

    @property
    def key(self) -> str:
        return self._key

    @property
    def project(self) -> str:
        project = self._raw.get("project")
        if isinstance(project, dict) and project.get("key"):
            return project["key"]
        #fall back to the key prefix, which is always the project key
        return self._key.rsplit("-", 1)[0]

    @property
    def summary(self) -> str:
        return self._raw.get("summary") or ""

    @property
    def description(self) -> str:
        """Return description as plain text, flattening ADF when needed."""
        # API v2 returns a plain string, v3 returns Atlassian Document Format
        desc = self._raw.get("description")
        if desc is None:
            return ""
        if isinstance(desc, str):
            return desc
        return _extract_adf_text(desc)

    @property
    def issue_type(self) -> str:
        return _name_of(self._raw.get("issuetype"))

    @property
    def labels(self) -> list[str]:
        return list(self._raw.get("labels") or [])

    @property
    def assignee(self) -> str | None:
        """Return name of the task assignee."""
        return _user_name(self._raw.get("assignee"))

    @property
    def status(self) -> str:
        return _name_of(self._raw.get("status"))

    @property
    def comments(self) -> list[Comment]:
        container = self._raw.get("comment")
        if not isinstance(container, dict):
            return []
        return [build_comment(c) for c in container.get("comments") or [] if isinstance(c, dict)]

    @property
    def url(self) -> str:
        """Return the browsable URL of the issue."""
        return f"{self._base_url}/browse/{self._key}"

    @property
    def raw(self) -> dict:
        return dict(self._raw)


def _name_of(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("name") or ""
    return ""


def _user_name(user: Any) -> str | None:
    if not isinstance(user, dict):
        return None
    # Server/DC use name, Cloud only exposes accountId and displayName
    return user.get("name") or user.get("emailAddress") or user.get("displayName") or None


# ---------------------------------------------------------------------------
# Extract data from ADF format which Jira v3 stores description in
# ---------------------------------------------------------------------------

def _extract_adf_text(node: dict) -> str:
    """Recursively extract plain text from an ADF document node."""
    if not isinstance(node, dict):
        return ""
    if node.get("type") == "text":
        return node.get("text", "")
    parts = [_extract_adf_text(child) for child in node.get("content") or []]
    return "\n".join(filter(None, parts))


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def build_issue(data: dict, base_url: str = "") -> JiraIssue:
    """Return a JiraIssue from a Jira REST API issue response.

    Args:
        data:     The issue payload, with ``key`` and ``fields``.
        base_url: The Jira browse root (e.g. 'https://myorg.atlassian.net').

    """
    return JiraIssue(data["key"], data.get("fields") or {}, base_url)


def build_comment(data: dict) -> Comment:
    body = data.get("body")
    if isinstance(body, dict):
        body = _extract_adf_text(body)
    return Comment(
        author=_user_name(data.get("author")) or "",
        created=data.get("created") or "",
        body=body or "",
    )


def build_project(data: dict) -> Project:
    issue_types = [
        IssueType(
            id=str(t.get("id", "")),
            name=t.get("name", ""),
            description=t.get("description") or "",
            subtask=bool(t.get("subtask", False)),
        )
        for t in data.get("issueTypes") or []
        if isinstance(t, dict)
    ]
    return Project(key=data.get("key", ""), name=data.get("name", ""), issue_types=issue_types)

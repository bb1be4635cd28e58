"""Tests for the shared issue types and error taxonomy."""

import pytest

from issue_client_interface.client import IssueTrackerClient
from issue_client_interface.errors import (
    AmbiguousOutcomeError,
    ApiError,
    InvalidInputError,
    IssueNotFoundError,
    IssueTrackerError,
    TransportError,
)
from issue_client_interface.issue import Comment, Issue, IssueUpdate, SearchResult, is_issue_key


class StubIssue(Issue):
    key = "JIWA-1"
    project = "JIWA"
    summary = "Fix bug"
    description = "line one\nline two"
    issue_type = "Task"
    labels = ["a", "b"]
    assignee = None
    status = "To Do"
    comments: list[Comment] = []


@pytest.mark.parametrize("value", ["JIWA-1", "A-0", "AB_2C-12345"])
def test_is_issue_key_accepts_keys(value):
    assert is_issue_key(value)


@pytest.mark.parametrize("value", ["", "jiwa-1", "JIWA", "JIWA-", "1ABC-2", "JIWA-1\n", " JIWA-1", "JIWA-1a", None])
def test_is_issue_key_rejects_everything_else(value):
    assert not is_issue_key(value)


def test_issue_update_only_reports_set_fields():
    update = IssueUpdate(summary="New", labels=[])

    assert update.set_fields() == {"summary": "New", "labels": []}
    assert IssueUpdate().set_fields() == {}


def test_issue_update_from_issue_copies_writable_fields():
    issue = StubIssue()

    update = IssueUpdate.from_issue(issue)

    assert update.set_fields() == {"summary": "Fix bug", "description": "line one\nline two", "labels": ["a", "b"]}
    assert update.labels is not issue.labels


def test_search_result_iterates_one_page():
    issues = [StubIssue(), StubIssue()]
    result = SearchResult(issues=issues, start_at=0, max_results=50, total=120)

    assert len(result) == 2
    assert list(result) == issues
    assert result.total == 120


def test_api_error_keeps_status_and_body():
    error = ApiError(400, '{"errors":{"summary":"required"}}')

    assert error.status_code == 400
    assert error.body == '{"errors":{"summary":"required"}}'
    assert str(error) == 'API error 400: {"errors":{"summary":"required"}}'


def test_error_hierarchy():
    assert issubclass(IssueNotFoundError, ApiError)
    assert issubclass(AmbiguousOutcomeError, TransportError)
    assert issubclass(InvalidInputError, ValueError)
    for error in (ApiError, TransportError, InvalidInputError):
        assert issubclass(error, IssueTrackerError)


def test_client_cannot_be_instantiated():
    with pytest.raises(TypeError):
        IssueTrackerClient()

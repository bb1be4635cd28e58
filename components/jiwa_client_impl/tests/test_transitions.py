"""Tests for resolving a status name into a transition."""

from unittest.mock import MagicMock, call

import pytest

from issue_client_interface.client import IssueTrackerClient
from issue_client_interface.errors import (
    AmbiguousTransitionError,
    InvalidInputError,
    TransitionError,
    TransitionNotFoundError,
)
from issue_client_interface.issue import Transition
from jiwa_client_impl.transitions import find_transition, transition_issue

AVAILABLE = [Transition("11", "In Progress"), Transition("21", "Done")]


@pytest.mark.parametrize("status, expected_id", [("done", "21"), ("DONE", "21"), ("Done", "21"), ("in progress", "11")])
def test_find_transition_matches_case_insensitively(status, expected_id):
    assert find_transition("JIWA-1", AVAILABLE, status).id == expected_id


@pytest.mark.parametrize("status", ["cancelled", "Don", "progress", "done ", "In-Progress"])
def test_find_transition_requires_exact_name(status):
    with pytest.raises(TransitionNotFoundError):
        find_transition("JIWA-1", AVAILABLE, status)


def test_not_found_error_lists_every_available_transition():
    with pytest.raises(TransitionNotFoundError) as exc_info:
        find_transition("JIWA-1", AVAILABLE, "cancelled")

    error = exc_info.value
    assert error.issue_key == "JIWA-1"
    assert error.available == ["In Progress", "Done"]
    assert "In Progress" in str(error)
    assert "Done" in str(error)
    assert "JIWA-1" in str(error)


def test_not_found_error_without_any_transitions():
    with pytest.raises(TransitionNotFoundError) as exc_info:
        find_transition("JIWA-1", [], "Done")

    assert "(none)" in str(exc_info.value)


def test_duplicate_names_are_ambiguous():
    transitions = [Transition("31", "Done"), Transition("41", "done")]

    with pytest.raises(AmbiguousTransitionError) as exc_info:
        find_transition("JIWA-1", transitions, "Done")

    assert isinstance(exc_info.value, TransitionError)
    assert "31" in str(exc_info.value)
    assert "41" in str(exc_info.value)


def test_transition_issue_lists_then_applies():
    client = MagicMock(spec=IssueTrackerClient)
    client.list_issue_transitions.return_value = AVAILABLE

    applied = transition_issue(client, "JIWA-1", "done", timeout=2.0)

    assert applied == Transition("21", "Done")
    assert client.method_calls == [
        call.list_issue_transitions("JIWA-1", timeout=2.0),
        call.apply_transition("JIWA-1", "21", timeout=2.0),
    ]


def test_transition_issue_does_not_apply_when_unresolved():
    client = MagicMock(spec=IssueTrackerClient)
    client.list_issue_transitions.return_value = AVAILABLE

    with pytest.raises(TransitionNotFoundError):
        transition_issue(client, "JIWA-1", "cancelled")

    client.apply_transition.assert_not_called()


@pytest.mark.parametrize("status", ["", "  "])
def test_transition_issue_rejects_empty_status_before_listing(status):
    client = MagicMock(spec=IssueTrackerClient)

    with pytest.raises(InvalidInputError):
        transition_issue(client, "JIWA-1", status)

    client.list_issue_transitions.assert_not_called()

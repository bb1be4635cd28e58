"""Tests for fail-fast batch processing."""

from unittest.mock import MagicMock, call

import pytest

from issue_client_interface.errors import ApiError
from jiwa_cli.batch import run_batch


def test_all_keys_processed_in_order():
    action = MagicMock()

    outcome = run_batch(["JIWA-1", "JIWA-2", "JIWA-3"], action)

    assert outcome.ok
    assert outcome.processed == ["JIWA-1", "JIWA-2", "JIWA-3"]
    assert action.call_args_list == [call("JIWA-1"), call("JIWA-2"), call("JIWA-3")]


def test_stops_at_first_failure():
    error = ApiError(400, "transition not allowed")
    action = MagicMock(side_effect=[None, error, None])

    outcome = run_batch(["JIWA-1", "JIWA-2", "JIWA-3"], action)

    assert not outcome.ok
    assert outcome.processed == ["JIWA-1"]
    assert outcome.failed_key == "JIWA-2"
    assert outcome.error is error
    # JIWA-3 is never touched
    assert action.call_count == 2


def test_unexpected_errors_propagate():
    action = MagicMock(side_effect=KeyError("boom"))

    with pytest.raises(KeyError):
        run_batch(["JIWA-1"], action)


def test_empty_batch_is_ok():
    outcome = run_batch([], MagicMock())

    assert outcome.ok
    assert outcome.processed == []

"""Tests for turning arguments and piped lines into issue keys."""

import io

import pytest

from issue_client_interface.errors import InvalidInputError
from jiwa_cli.issue_input import InputSource, issue_url, read_issue_keys, resolve_issue_key

BASE_URL = "https://catouc.atlassian.net"


@pytest.mark.parametrize(
    "prefix, expected",
    [
        ("/jira", "https://catouc.atlassian.net/jira/browse/JIWA-001"),
        ("", "https://catouc.atlassian.net/browse/JIWA-001"),
    ],
)
def test_issue_url(prefix, expected):
    assert issue_url("JIWA-001", BASE_URL, prefix) == expected


@pytest.mark.parametrize("prefix", ["", "/jira"])
@pytest.mark.parametrize("key", ["", "01Something"])
def test_issue_url_rejects_invalid_keys(key, prefix):
    with pytest.raises(InvalidInputError) as exc_info:
        issue_url(key, BASE_URL, prefix)

    assert str(exc_info.value).startswith("issueKey must match")


@pytest.mark.parametrize(
    "prefix, text",
    [
        ("", "https://catouc.atlassian.net/browse/JIWA-001"),
        ("/jira", "https://catouc.atlassian.net/jira/browse/JIWA-001"),
        # configured prefix but missing in the URL
        ("/jira", "https://catouc.atlassian.net/browse/JIWA-001"),
        ("/jira", "JIWA-001"),
        ("", "  JIWA-001\n"),
    ],
)
def test_resolve_issue_key(prefix, text):
    assert resolve_issue_key(text, BASE_URL, prefix) == "JIWA-001"


@pytest.mark.parametrize(
    "text",
    [
        "invalidURL",
        "",
        "https://other.example.com/browse/JIWA-001",
        "https://catouc.atlassian.net/browse/not-a-key",
        "jiwa-001",
    ],
)
def test_resolve_issue_key_rejects_unrecognised_input(text):
    with pytest.raises(InvalidInputError):
        resolve_issue_key(text, BASE_URL, "/jira")


def test_read_issue_keys_from_arguments_ignores_stream():
    stream = io.StringIO("JIWA-9\n")

    keys = read_issue_keys(InputSource.ARGUMENTS, ["JIWA-1", f"{BASE_URL}/browse/JIWA-2"], stream, BASE_URL)

    assert keys == ["JIWA-1", "JIWA-2"]
    assert stream.read() == "JIWA-9\n"


def test_read_issue_keys_from_stream_skips_blank_lines():
    stream = io.StringIO(f"{BASE_URL}/browse/JIWA-1\n\n  \nJIWA-2\n")

    keys = read_issue_keys(InputSource.STDIN, ["ignored"], stream, BASE_URL)

    assert keys == ["JIWA-1", "JIWA-2"]


def test_read_issue_keys_stops_on_malformed_line():
    stream = io.StringIO("JIWA-1\nnot an issue\n")

    with pytest.raises(InvalidInputError):
        read_issue_keys(InputSource.STDIN, [], stream, BASE_URL)


@pytest.mark.parametrize("source, stream", [(InputSource.ARGUMENTS, None), (InputSource.STDIN, io.StringIO("\n"))])
def test_read_issue_keys_requires_at_least_one_key(source, stream):
    with pytest.raises(InvalidInputError) as exc_info:
        read_issue_keys(source, [], stream, BASE_URL)

    assert "no issue keys" in str(exc_info.value)

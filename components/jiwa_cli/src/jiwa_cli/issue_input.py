"""Turning command-line arguments or piped lines into issue keys, and keys back into URLs."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import TextIO

from issue_client_interface.errors import InvalidInputError
from issue_client_interface.issue import ISSUE_KEY_PATTERN, is_issue_key


class InputSource(str, Enum):
    """Where a command reads its issue identifiers from. Decided once, by the caller."""

    ARGUMENTS = "arguments"
    STDIN = "stdin"


def issue_url(key: str, base_url: str, endpoint_prefix: str = "") -> str:
    """Return the browsable URL of an issue."""
    if not is_issue_key(key):
        raise InvalidInputError(f"issueKey must match `{ISSUE_KEY_PATTERN.pattern}`")
    return f"{base_url.rstrip('/')}{endpoint_prefix.rstrip('/')}/browse/{key}"


def resolve_issue_key(text: str, base_url: str, endpoint_prefix: str = "") -> str:
    """Return the bare issue key of ``text``, which is either a key or a browse URL.

    Both ``{base_url}{endpoint_prefix}/browse/KEY`` and ``{base_url}/browse/KEY`` are
    accepted.

    Raises:
        InvalidInputError: If text is neither a key nor a browse URL of this instance.
    """
    value = text.strip()
    if is_issue_key(value):
        return value

    base = base_url.rstrip("/")
    prefixes = [f"{base}{endpoint_prefix.rstrip('/')}/browse/", f"{base}/browse/"]
    for prefix in prefixes:
        if value.startswith(prefix):
            candidate = value[len(prefix):].strip("/")
            if is_issue_key(candidate):
                return candidate

    raise InvalidInputError(f"{value!r} is neither an issue key nor an issue URL under {base}")


def read_issue_keys(
    source: InputSource,
    arguments: Sequence[str],
    stream: TextIO | None,
    base_url: str,
    endpoint_prefix: str = "",
) -> list[str]:
    """Collect issue keys from the arguments or from the stream, never both.

    Blank lines in the stream are skipped; every other line has to resolve to a key.
    """
    if source is InputSource.ARGUMENTS:
        lines: Iterable[str] = arguments
    else:
        if stream is None:
            raise InvalidInputError("no input stream to read issue keys from")
        lines = (line for line in stream if line.strip())

    keys = [resolve_issue_key(line, base_url, endpoint_prefix) for line in lines]
    if not keys:
        raise InvalidInputError("no issue keys were given")
    return keys

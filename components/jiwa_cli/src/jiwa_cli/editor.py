"""Collecting free-form text (summary, description, comments) through the user's editor."""

from __future__ import annotations

import typer

from issue_client_interface.errors import InvalidInputError


def split_summary_description(text: str) -> tuple[str, str]:
    """First line is the summary, everything after it the description."""
    summary, _, description = text.partition("\n")
    return summary.strip(), description


def edit_text(prefill: str = "", extension: str = ".txt") -> str:
    """Open $EDITOR (or $VISUAL) on a temporary file and return what was saved.

    Raises:
        InvalidInputError: If the editor was closed without saving.
    """
    text = typer.edit(prefill, extension=extension, require_save=True)
    if text is None:
        raise InvalidInputError("editor was closed without saving")
    return text


def edit_summary_description(prefill: str = "") -> tuple[str, str]:
    summary, description = split_summary_description(edit_text(prefill))
    if not summary:
        raise InvalidInputError("the summary line needs to be filled at least")
    return summary, description

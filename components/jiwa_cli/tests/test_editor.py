"""Tests for editor-driven text input."""

from unittest.mock import patch

import pytest

from issue_client_interface.errors import InvalidInputError
from jiwa_cli.editor import edit_summary_description, edit_text, split_summary_description


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Fix bug\nSteps:\n1. run it\n", ("Fix bug", "Steps:\n1. run it\n")),
        ("  Fix bug  \n", ("Fix bug", "")),
        ("Only summary", ("Only summary", "")),
        ("", ("", "")),
    ],
)
def test_split_summary_description(text, expected):
    assert split_summary_description(text) == expected


def test_edit_text_returns_saved_text():
    with patch("jiwa_cli.editor.typer.edit", return_value="saved text") as edit:
        assert edit_text("prefill") == "saved text"

    edit.assert_called_once_with("prefill", extension=".txt", require_save=True)


def test_edit_text_without_saving_raises():
    with patch("jiwa_cli.editor.typer.edit", return_value=None):
        with pytest.raises(InvalidInputError):
            edit_text()


def test_edit_summary_description_splits_editor_output():
    with patch("jiwa_cli.editor.typer.edit", return_value="New summary\nNew description"):
        assert edit_summary_description("Old\nold") == ("New summary", "New description")


def test_edit_summary_description_requires_summary():
    with patch("jiwa_cli.editor.typer.edit", return_value="\nonly a description"):
        with pytest.raises(InvalidInputError):
            edit_summary_description()

"""CLI interface for jiwa - Jira issues from the terminal.

Issue keys (or browse URLs) are taken from the positional arguments, or, when
something is piped in, one per line from stdin. Never both:

    jiwa ls -s "in progress" | jiwa mv done
    jiwa mv JIWA-42 "In Progress"
"""
from __future__ import annotations

import io
import logging
import os
import stat
import sys
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from issue_client_interface.client import IssueTrackerClient
from issue_client_interface.errors import InvalidInputError, IssueTrackerError
from issue_client_interface.issue import Issue, IssueUpdate
from jiwa_cli.batch import run_batch
from jiwa_cli.editor import edit_summary_description, edit_text, split_summary_description
from jiwa_cli.issue_input import InputSource, issue_url, read_issue_keys
from jiwa_client_impl.config import CONFIG_PATH_ENV, ClientConfig, load_config_file, resolve_config
from jiwa_client_impl.jira_impl import JiraClient

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="jiwa - create, edit, move and search Jira issues from your terminal",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class OutputFormat(str, Enum):
    RAW = "raw"
    TABLE = "table"


# ============================================================================
# PLUMBING
# ============================================================================
@app.callback()
def main(
        ctx: typer.Context,
        config_path: Path | None = typer.Option(
            None, "--config", envvar=CONFIG_PATH_ENV, help="Path to config.json (default ~/.config/jiwa/config.json)"
        ),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request to stderr"),
):
    """jiwa - Jira issues from the terminal."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.obj = config_path


def _connect(ctx: typer.Context) -> tuple[ClientConfig, IssueTrackerClient]:
    """Resolve the configuration and build a client from it."""
    config = resolve_config(load_config_file(ctx.obj), dict(os.environ))
    client = JiraClient.from_config(config)
    ctx.call_on_close(client.close)
    return config, client


def _stdin_is_piped(stream: io.TextIOBase | None = None) -> bool:
    """True unless stdin is a character device (a terminal or /dev/null)."""
    stream = sys.stdin if stream is None else stream
    if stream is None:
        return False
    try:
        mode = os.fstat(stream.fileno()).st_mode
    except (OSError, ValueError):
        # in-memory streams have no descriptor
        return not stream.isatty()
    return not stat.S_ISCHR(mode)


def _input_source() -> InputSource:
    return InputSource.STDIN if _stdin_is_piped() else InputSource.ARGUMENTS


@contextmanager
def _reporting_errors(action: str) -> Iterator[None]:
    """Turn client errors into a one line message and exit status 1."""
    try:
        yield
    except IssueTrackerError as e:
        _print_error(f"{action}: {e}")
        raise typer.Exit(1)


def _print_error(message: str) -> None:
    # error bodies come straight from Jira, never interpret them as markup
    err_console.print(message, style="red", markup=False, highlight=False)


def _url(config: ClientConfig, key: str) -> str:
    return issue_url(key, config.base_url, config.endpoint_prefix)


def _keys_and_value(
        config: ClientConfig, source: InputSource, args: Sequence[str], usage: str
) -> tuple[list[str], str]:
    """Split ``[KEY...] VALUE`` (arguments) or ``VALUE`` (stdin) into keys and the trailing value."""
    if source is InputSource.STDIN:
        if len(args) != 1:
            raise InvalidInputError(f"usage: {usage}")
        keys = read_issue_keys(source, [], sys.stdin, config.base_url, config.endpoint_prefix)
        return keys, args[0]

    if len(args) < 2:
        raise InvalidInputError(f"usage: {usage}")
    keys = read_issue_keys(source, args[:-1], None, config.base_url, config.endpoint_prefix)
    return keys, args[-1]


def _run_for_each(config: ClientConfig, keys: list[str], verb: str, action: Callable[[str], object]) -> None:
    """Apply action to every key in order, print each processed URL, stop at the first failure."""

    def act_and_print(key: str) -> None:
        action(key)
        typer.echo(_url(config, key))

    outcome = run_batch(keys, act_and_print)
    if not outcome.ok:
        remaining = len(keys) - len(outcome.processed) - 1
        suffix = f" ({remaining} remaining issue(s) not processed)" if remaining else ""
        _print_error(f"failed to {verb} {outcome.failed_key}: {outcome.error}{suffix}")
        raise typer.Exit(1)


def _print_issues(config: ClientConfig, issues: Sequence[Issue], output: OutputFormat) -> None:
    if output is OutputFormat.RAW:
        for issue in issues:
            typer.echo(_url(config, issue.key))
        return

    table = Table()
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Summary", style="white")
    table.add_column("Status", style="green")
    table.add_column("Assignee", style="blue")
    table.add_column("URL", style="magenta", no_wrap=True)
    for issue in issues:
        table.add_row(issue.key, issue.summary, issue.status, issue.assignee or "", _url(config, issue.key))
    console.print(table)


def build_list_jql(project: str, status: str, user: str | None = None, labels: Sequence[str] = ()) -> str:
    """Build the JQL behind ``jiwa ls``; user "empty" selects unassigned issues."""
    clauses = [f"project={project}", f'status="{status}"']
    if user == "empty":
        clauses.append("assignee is EMPTY")
    elif user:
        clauses.append(f'assignee="{user}"')
    if labels:
        clauses.append(f"labels in ({','.join(labels)})")
    return " AND ".join(clauses)


def _read_summary_description(source: str | None) -> tuple[str, str]:
    if source == "-" or (source is None and _stdin_is_piped()):
        text = sys.stdin.read()
    elif source:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise InvalidInputError(f"failed to read file contents: {e}") from e
    else:
        return edit_summary_description()

    summary, description = split_summary_description(text)
    if not summary:
        raise InvalidInputError("the summary line needs to be filled at least")
    return summary, description


# ============================================================================
# CREATE / EDIT / CAT
# ============================================================================
@app.command("create")
def create_issue(
        ctx: typer.Context,
        project: str | None = typer.Option(
            None, "--project", "-p", help="Project to create the issue in, defaults to \"defaultProject\""
        ),
        source: str | None = typer.Option(
            None, "--in", "-i", help="Read summary and description from a file path or \"-\" for stdin"
        ),
        issue_type: str = typer.Option("Task", "--type", "-t", help="Issue type name"),
        labels: list[str] | None = typer.Option(None, "--label", "-l", help="Label to set, repeatable"),
        component: str | None = typer.Option(None, "--component", "-c", help="Component name"),
):
    """Create an issue. The first line is the summary, the rest the description."""
    with _reporting_errors("failed to create issue"):
        config, client = _connect(ctx)
        project = project or config.default_project
        if not project:
            raise InvalidInputError("no --project given and no \"defaultProject\" configured")

        summary, description = _read_summary_description(source)
        issue = client.create_issue(
            project=project,
            summary=summary,
            description=description,
            issue_type=issue_type,
            labels=labels or None,
            component=component,
        )
        typer.echo(_url(config, issue.key))


@app.command("edit")
def edit_issue(ctx: typer.Context, issue: str | None = typer.Argument(None, help="Issue key or URL")):
    """Edit summary and description of an issue in $EDITOR."""
    with _reporting_errors("failed to edit issue"):
        config, client = _connect(ctx)
        key = _single_key(config, issue, "jiwa edit <issue ID>")

        current = client.get_issue(key)
        summary, description = edit_summary_description(f"{current.summary}\n{current.description}")

        client.update_issue(key, IssueUpdate(summary=summary, description=description))
        typer.echo(_url(config, key))


@app.command("cat")
def cat_issue(ctx: typer.Context, issue: str | None = typer.Argument(None, help="Issue key or URL")):
    """Print summary and description of an issue."""
    with _reporting_errors("failed to get issue"):
        config, client = _connect(ctx)
        key = _single_key(config, issue, "jiwa cat <issue ID>")
        fetched = client.get_issue(key)
        typer.echo(f"{fetched.summary}\n{fetched.description}")


def _single_key(config: ClientConfig, issue: str | None, usage: str) -> str:
    source = _input_source()
    if source is InputSource.ARGUMENTS and not issue:
        raise InvalidInputError(f"usage: {usage}")
    if source is InputSource.STDIN and issue:
        # an explicit argument wins over whatever is attached to stdin
        source = InputSource.ARGUMENTS
    keys = read_issue_keys(source, [issue] if issue else [], sys.stdin, config.base_url, config.endpoint_prefix)
    if len(keys) != 1:
        raise InvalidInputError(f"expected exactly one issue, got {len(keys)}")
    return keys[0]


# ============================================================================
# LIST / SEARCH
# ============================================================================
def list_issues(
        ctx: typer.Context,
        user: str | None = typer.Option(
            None, "--user", "-u", help="Assignee to list issues for, use \"empty\" to list unassigned issues"
        ),
        status: str = typer.Option("to do", "--status", "-s", help="Status of the issues you want to see"),
        project: str | None = typer.Option(None, "--project", "-p", help="Project to search in"),
        labels: list[str] | None = typer.Option(None, "--label", "-l", help="Only issues with this label"),
        output: OutputFormat = typer.Option(
            OutputFormat.RAW, "--output", "-o", help="\"raw\" for piping or \"table\" for nice formatting"
        ),
):
    """List issues of a project by status, assignee and labels."""
    with _reporting_errors("could not list issues"):
        config, client = _connect(ctx)
        project = project or config.default_project
        if not project:
            raise InvalidInputError("no --project given and no \"defaultProject\" configured")

        jql = build_list_jql(project, status, user, labels or [])
        logger.debug("Listing with JQL: %s", jql)
        _print_issues(config, client.search(jql).issues, output)


app.command("list")(list_issues)
app.command("ls", hidden=True)(list_issues)


@app.command("search")
def search_issues(
        ctx: typer.Context,
        jql: str = typer.Argument(..., help="JQL query"),
        output: OutputFormat = typer.Option(OutputFormat.RAW, "--output", "-o", help="\"raw\" or \"table\""),
):
    """Search issues with a raw JQL query."""
    with _reporting_errors("could not search issues"):
        config, client = _connect(ctx)
        _print_issues(config, client.search(jql).issues, output)


@app.command("issue-types")
def issue_types(ctx: typer.Context, project: str = typer.Argument(..., help="Project key")):
    """List the issue types available in a project."""
    with _reporting_errors(f"failed to get project {project}"):
        _, client = _connect(ctx)
        for issue_type in client.get_project(project).issue_types:
            typer.echo(issue_type.name)


# ============================================================================
# BATCH COMMANDS: MOVE / REASSIGN / LABEL / COMMENT
# ============================================================================
def move_issues(
        ctx: typer.Context,
        args: list[str] = typer.Argument(..., metavar="[ISSUE...] STATUS", help="Issue keys or URLs, then the status"),
):
    """Move issues to another status. Status names are matched case-insensitively."""
    with _reporting_errors("failed to move issues"):
        config, client = _connect(ctx)
        keys, status = _keys_and_value(config, _input_source(), args, "jiwa mv [<issue ID>...] <status>")
        _run_for_each(config, keys, "move", lambda key: client.transition_issue(key, status))


app.command("move")(move_issues)
app.command("mv", hidden=True)(move_issues)


@app.command("reassign")
def reassign_issues(
        ctx: typer.Context,
        args: list[str] = typer.Argument(..., metavar="[ISSUE...] USER", help="Issue keys or URLs, then the user"),
):
    """Assign issues to a user."""
    with _reporting_errors("failed to reassign issues"):
        config, client = _connect(ctx)
        keys, user = _keys_and_value(config, _input_source(), args, "jiwa reassign [<issue ID>...] <username>")
        _run_for_each(config, keys, "reassign", lambda key: client.assign_issue(key, user))


@app.command("label")
def label_issues(
        ctx: typer.Context,
        args: list[str] = typer.Argument(..., metavar="[ISSUE] LABEL...", help="Issue key or URL, then labels"),
        add: bool = typer.Option(False, "--add", "-a", help="Keep the existing labels and add the given ones"),
):
    """Set the labels of issues.

    WARNING: without --add the given labels REPLACE all existing labels of the issue.
    """
    with _reporting_errors("failed to label issues"):
        config, client = _connect(ctx)
        source = _input_source()
        if source is InputSource.STDIN:
            keys = read_issue_keys(source, [], sys.stdin, config.base_url, config.endpoint_prefix)
            labels = list(args)
        else:
            if len(args) < 2:
                raise InvalidInputError("usage: jiwa label <issue ID> <label> <label>...")
            keys = read_issue_keys(source, args[:1], None, config.base_url, config.endpoint_prefix)
            labels = list(args[1:])

        def apply_labels(key: str) -> None:
            wanted = labels
            if add:
                # label_issue replaces, so merging has to read first
                current = client.get_issue(key).labels
                wanted = list(dict.fromkeys([*current, *labels]))
            client.label_issue(key, wanted)

        _run_for_each(config, keys, "label", apply_labels)


@app.command("comment")
def comment_on_issues(
        ctx: typer.Context,
        issues: list[str] | None = typer.Argument(None, help="Issue keys or URLs"),
        message: str | None = typer.Option(None, "--message", "-m", help="Comment text, opens $EDITOR if omitted"),
):
    """Add the same comment to one or more issues."""
    with _reporting_errors("failed to comment"):
        config, client = _connect(ctx)
        source = _input_source()
        if source is InputSource.STDIN and issues:
            raise InvalidInputError("pass issues either as arguments or on stdin, not both")
        keys = read_issue_keys(source, issues or [], sys.stdin, config.base_url, config.endpoint_prefix)

        if message is None:
            if source is InputSource.STDIN:
                raise InvalidInputError("use --message when issues are piped in")
            message = edit_text()
        if not message.strip():
            raise InvalidInputError("cannot post an empty comment")

        _run_for_each(config, keys, "comment on", lambda key: client.comment_on_issue(key, message))


if __name__ == "__main__":
    app()

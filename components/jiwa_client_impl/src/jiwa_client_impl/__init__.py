"""Jira REST implementation of the issue tracker client."""

from jiwa_client_impl.config import ClientConfig, load_config_file, resolve_config
from jiwa_client_impl.jira_impl import IssueNotFoundError, JiraClient, JiraError, get_client
from jiwa_client_impl.jira_issue import JiraIssue
from jiwa_client_impl.transitions import find_transition

__all__ = [
    "ClientConfig",
    "IssueNotFoundError",
    "JiraClient",
    "JiraError",
    "JiraIssue",
    "find_transition",
    "get_client",
    "load_config_file",
    "resolve_config",
]

"""
Authentication
--------------
The client supports two credential modes:

1. HTTP Basic, when both username and password are set.
2. Bearer token (Jira personal access token), when only the token is set.

Basic wins when both are configured. With neither, every request fails with a
ConfigurationError before anything is sent.

Dependencies:
    requests

"""
#to avoid having to consider forward declarations, the below line must be first line in the file
from __future__ import annotations

import getpass
import json
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

import requests
from requests.auth import AuthBase, HTTPBasicAuth

from issue_client_interface.client import IssueTrackerClient
from issue_client_interface.errors import (
    AmbiguousOutcomeError,
    ApiError,
    InvalidInputError,
    InvalidResponseError,
    IssueNotFoundError as BaseIssueNotFoundError,
    TransportError,
)
from issue_client_interface.issue import (
    ISSUE_KEY_PATTERN,
    PROJECT_KEY_PATTERN,
    Comment,
    IssueUpdate,
    Project,
    SearchResult,
    Transition,
)
from jiwa_client_impl import transitions
from jiwa_client_impl.config import (
    CONFIG_PATH_ENV,
    DEFAULT_API_VERSION,
    DEFAULT_TIMEOUT,
    ClientConfig,
    load_config_file,
    resolve_config,
    validate_credentials,
)
from jiwa_client_impl.jira_issue import JiraIssue, build_comment, build_issue, build_project

logger = logging.getLogger(__name__)

#a timeout on these may have reached the server, so the outcome is unknown
_MUTATING_METHODS = frozenset({"POST", "PUT", "DELETE", "PATCH"})


class JiraError(ApiError):
    """Raised when the Jira API returns a status code above 299."""

    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        super().__init__(status_code, body, message or f"Jira API error {status_code}: {body}")


class IssueNotFoundError(JiraError, BaseIssueNotFoundError):
    """Raised when a requested Jira issue or project does not exist."""


class _BearerAuth(AuthBase):
    """Attach a personal access token as ``Authorization: Bearer``."""

    def __init__(self, token: str) -> None:
        self._token = token

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        request.headers["Authorization"] = f"Bearer {self._token}"
        return request


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------

class JiraClient(IssueTrackerClient):
    """
    Args:
        base_url:    Jira root URL including any endpoint prefix (e.g. 'https://myorg.atlassian.net/jira')
        username:    User name for HTTP Basic auth
        password:    Password for HTTP Basic auth
        token:       Personal access token, used when username+password are not both set
        api_version: REST API version, '2' unless configured otherwise
        timeout:     Per-call timeout in seconds
        session:     Optional requests.Session to send requests through
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str = "",
        password: str = "",
        token: str = "",
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._token = token
        self._api_version = api_version
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})

    @classmethod
    def from_config(cls, config: ClientConfig, *, session: requests.Session | None = None) -> JiraClient:
        return cls(
            config.browse_root,
            username=config.username,
            password=config.password,
            token=config.token,
            api_version=config.api_version,
            timeout=config.timeout,
            session=session,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_version(self) -> str:
        return self._api_version

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> JiraClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal HTTP helpers
    # ------------------------------------------------------------------

    def _url(self, endpoint: str) -> str:
        return f"{self._base_url}/rest/api/{self._api_version}/{endpoint.lstrip('/')}"

    def _auth(self) -> AuthBase:
        validate_credentials(self._username, self._password, self._token)
        if self._username and self._password:
            return HTTPBasicAuth(self._username, self._password)
        return _BearerAuth(self._token)

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        timeout: float | None = None,
    ) -> bytes:
        """Send one authenticated request and return the raw response body.

        Raises:
            ConfigurationError:    If no credentials are configured; nothing is sent.
            TransportError:        If no response was received.
            AmbiguousOutcomeError: If a mutating request timed out while waiting for the response.
            JiraError:             If the response status code is above 299.
        """
        auth = self._auth()
        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = requests.Request(method, self._url(endpoint), params=params, data=data, auth=auth)
        prepared = self._session.prepare_request(request)
        settings = self._session.merge_environment_settings(prepared.url, {}, None, None, None)
        effective_timeout = self._timeout if timeout is None else timeout

        logger.debug("%s %s", method, prepared.url)
        try:
            response = self._session.send(prepared, timeout=effective_timeout, **settings)
        except requests.exceptions.ConnectTimeout as e:
            # nothing reached the server
            raise TransportError(f"{method} {prepared.url}: connection timed out after {effective_timeout}s") from e
        except requests.exceptions.Timeout as e:
            if method.upper() in _MUTATING_METHODS:
                raise AmbiguousOutcomeError(
                    f"{method} {prepared.url} timed out after {effective_timeout}s; "
                    "the change may or may not have been applied"
                ) from e
            raise TransportError(f"{method} {prepared.url} timed out after {effective_timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {prepared.url} failed: {e}") from e

        logger.debug("%s %s -> %d", method, prepared.url, response.status_code)
        self._raise_for_status(response)
        return response.content

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if response.status_code <= 299:
            return
        body = response.text
        if response.status_code == 404:
            raise IssueNotFoundError(404, body, f"Resource not found: {response.url}: {body}")
        raise JiraError(response.status_code, body)

    @staticmethod
    def _decode(content: bytes) -> Any:
        # Jira PUT /issue returns 204 No Content on success
        if not content or not content.strip():
            return {}
        try:
            return json.loads(content)
        except ValueError as e:
            raise InvalidResponseError(
                f"failed to unmarshal response: {e}", body=content.decode("utf-8", errors="replace")
            ) from e

    def _get(self, path: str, params: Mapping[str, str] | None = None, *, timeout: float | None = None) -> Any:
        return self._decode(self._request("GET", path, params=params, timeout=timeout))

    def _post(self, path: str, body: dict, *, timeout: float | None = None) -> Any:
        return self._decode(self._request("POST", path, body=body, timeout=timeout))

    def _put(self, path: str, body: dict, *, timeout: float | None = None) -> Any:
        return self._decode(self._request("PUT", path, body=body, timeout=timeout))

    def _delete(self, path: str, *, timeout: float | None = None) -> None:
        self._request("DELETE", path, timeout=timeout)

    def _rich_text(self, text: str) -> Any:
        # API v3 only accepts Atlassian Document Format for rich text fields
        if self._api_version == "3":
            return _text_to_adf(text)
        return text

    def _build_issue(self, issue: dict) -> JiraIssue:
        return build_issue(issue, self._base_url)

    # ------------------------------------------------------------------
    # IssueTrackerClient contract
    # ------------------------------------------------------------------

    def create_issue(
        self,
        *,
        project: str,
        summary: str,
        description: str = "",
        issue_type: str = "Task",
        labels: Sequence[str] | None = None,
        component: str | None = None,
        assignee: str | None = None,
        timeout: float | None = None,
        ) -> JiraIssue:
        """Create a new Jira issue and return it as a JiraIssue."""
        _require_project_key(project)
        if not summary or not summary.strip():
            raise InvalidInputError("the summary line needs to be filled at least")
        if not issue_type:
            raise InvalidInputError("an issue type is required")

        #required fields: project, summary and issue type
        fields: dict[str, Any] = {
            "project": {"key": project},
            "summary": summary,
            "issuetype": {"name": issue_type},
        }
        if description:
            fields["description"] = self._rich_text(description)
        if labels:
            fields["labels"] = _validate_labels(labels)
        if component:
            fields["components"] = [{"name": component}]
        if assignee:
            fields["assignee"] = {"name": assignee}

        data = self._post("issue", {"fields": fields}, timeout=timeout)
        key = data.get("key") if isinstance(data, dict) else None
        if not key:
            raise InvalidResponseError("create response did not contain an issue key", body=json.dumps(data))

        logger.info("Created issue %s in %s", key, project)
        return JiraIssue(key, fields, self._base_url)

    def get_issue(self, key: str, *, timeout: float | None = None) -> JiraIssue:
        """Fetch a single Jira issue by key."""
        _require_issue_key(key)
        #_get returns the decoded json, _build_issue builds the Issue instance
        data = self._get(f"issue/{key}", timeout=timeout)
        if not isinstance(data, dict) or "key" not in data:
            raise InvalidResponseError(f"response for {key} is not an issue", body=json.dumps(data))
        return self._build_issue(data)

    def update_issue(self, key: str, update: IssueUpdate, *, timeout: float | None = None) -> None:
        """
        Args:
            key:    The Jira issue key
            update: An "IssueUpdate" dataclass instance with the desired changes

        Notes on usage:
            Fields left as "None" are not sent to the API and remain unchanged.
            Labels are replaced, not merged.
        """
        _require_issue_key(key)
        changed = update.set_fields()

        fields: dict[str, Any] = {}
        if "summary" in changed:
            fields["summary"] = changed["summary"]
        if "description" in changed:
            fields["description"] = self._rich_text(changed["description"])
        if "issue_type" in changed:
            fields["issuetype"] = {"name": changed["issue_type"]}
        if "labels" in changed:
            fields["labels"] = list(changed["labels"])
        if "assignee" in changed:
            fields["assignee"] = {"name": changed["assignee"]}

        if not fields:
            logger.debug("Nothing to update for %s", key)
            return

        self._put(f"issue/{key}", {"fields": fields}, timeout=timeout)
        logger.info("Updated %s (%s)", key, ", ".join(sorted(fields)))

    def delete_issue(self, key: str, *, timeout: float | None = None) -> None:
        _require_issue_key(key)
        self._delete(f"issue/{key}", timeout=timeout)
        logger.info("Deleted %s", key)

    def assign_issue(self, key: str, assignee: str | None, *, timeout: float | None = None) -> None:
        """Set fields.assignee.name; None clears the assignee."""
        _require_issue_key(key)
        if assignee is not None and not assignee.strip():
            raise InvalidInputError("assignee cannot be empty, pass None to unassign")

        value = {"name": assignee} if assignee is not None else None
        self._put(f"issue/{key}", {"fields": {"assignee": value}}, timeout=timeout)
        logger.info("Assigned %s to %s", key, assignee or "nobody")

    def label_issue(self, key: str, labels: Sequence[str], *, timeout: float | None = None) -> None:
        """Replace the labels of an issue with exactly the given ones."""
        _require_issue_key(key)
        if not labels:
            raise InvalidInputError("need to supply at least one label")

        self._put(f"issue/{key}", {"fields": {"labels": _validate_labels(labels)}}, timeout=timeout)
        logger.info("Labelled %s", key)

    def comment_on_issue(self, key: str, body: str, *, timeout: float | None = None) -> Comment:
        _require_issue_key(key)
        if not body or not body.strip():
            raise InvalidInputError("cannot post an empty comment")

        data = self._post(f"issue/{key}/comment", {"body": self._rich_text(body)}, timeout=timeout)
        logger.info("Commented on %s", key)
        if isinstance(data, dict) and data:
            return build_comment(data)
        return Comment(author="", created="", body=body)

    def search(self, jql: str, *, timeout: float | None = None) -> SearchResult:
        """Run a JQL search and return the single page of results Jira sends back."""
        if not jql or not jql.strip():
            raise InvalidInputError("cannot search with empty search query")

        data = self._get("search", params={"jql": jql}, timeout=timeout)
        if not isinstance(data, dict):
            raise InvalidResponseError("search response is not an object", body=json.dumps(data))

        issues = [self._build_issue(i) for i in data.get("issues") or [] if isinstance(i, dict)]
        return SearchResult(
            issues=issues,
            start_at=_int_field(data, "startAt", 0),
            max_results=_int_field(data, "maxResults", len(issues)),
            total=_int_field(data, "total", len(issues)),
        )

    def get_project(self, key: str, *, timeout: float | None = None) -> Project:
        _require_project_key(key)
        data = self._get(f"project/{key}", timeout=timeout)
        if not isinstance(data, dict):
            raise InvalidResponseError(f"failed to unmarshal project response for {key}", body=json.dumps(data))
        return build_project(data)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def list_issue_transitions(self, key: str, *, timeout: float | None = None) -> list[Transition]:
        """Ask Jira which transitions are available from the issue's current status."""
        _require_issue_key(key)
        data = self._get(f"issue/{key}/transitions", timeout=timeout)
        raw = (data.get("transitions") or []) if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raise InvalidResponseError(f"transitions response for {key} has no transition list", body=json.dumps(data))
        return [Transition(id=str(t.get("id", "")), name=t.get("name", "")) for t in raw if isinstance(t, dict)]

    def apply_transition(self, key: str, transition_id: str, *, timeout: float | None = None) -> None:
        _require_issue_key(key)
        if not transition_id:
            raise InvalidInputError("transition id cannot be empty")
        self._post(f"issue/{key}/transitions", {"transition": {"id": transition_id}}, timeout=timeout)

    def transition_issue(self, key: str, status: str, *, timeout: float | None = None) -> Transition:
        """Move the issue to the status named ``status`` (case-insensitive)."""
        _require_issue_key(key)
        return transitions.transition_issue(self, key, status, timeout=timeout)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def _require_issue_key(key: str) -> None:
    if not isinstance(key, str) or not ISSUE_KEY_PATTERN.fullmatch(key):
        raise InvalidInputError(f"issue key must match `{ISSUE_KEY_PATTERN.pattern}`, got {key!r}")


def _require_project_key(key: str) -> None:
    if not isinstance(key, str) or not PROJECT_KEY_PATTERN.fullmatch(key):
        raise InvalidInputError(f"project key must match `{PROJECT_KEY_PATTERN.pattern}`, got {key!r}")


def _int_field(data: Mapping[str, Any], name: str, default: int) -> int:
    value = data.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidResponseError(f"{name!r} in search response is not a number", body=json.dumps(data)) from e


def _validate_labels(labels: Sequence[str]) -> list[str]:
    """Return the labels in input order without duplicates."""
    if isinstance(labels, str):
        raise InvalidInputError("labels must be a list of strings, not a single string")
    for label in labels:
        if not label or any(ch.isspace() for ch in label):
            raise InvalidInputError(f"invalid label {label!r}: labels cannot be empty or contain whitespace")
    return list(dict.fromkeys(labels))


# ---------------------------------------------------------------------------
# ADF builder -  Jira v3 requires rich text data to be in this format
# ---------------------------------------------------------------------------

def _text_to_adf(text: str) -> dict:
    """
    Notes on usage:
        Jira Cloud's v3 API requires that certain fields, particularly description and comment
        bodies, are sent in Atlassian Document Format (ADF), otherwise they will be rejected
    """
    if not isinstance(text, str):
        raise InvalidInputError("Input must be a string")
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


# ---------------------------------------------------------------------------
# Get client
# ---------------------------------------------------------------------------

def get_client(
    *,
    config: ClientConfig | None = None,
    config_path: str | None = None,
    interactive: bool = False,
    environ: Mapping[str, str] | None = None,
) -> JiraClient:
    """Return a configured JiraClient.

    Reads the configuration file and the JIWA_* credential overrides unless a
    ready ClientConfig is passed. If "interactive = True" and the base URL or
    credentials are missing, the user will be prompted.

    Environment variables:
        JIWA_CONFIG:    Path of the configuration file.
        JIWA_USERNAME:  User name, overrides the file.
        JIWA_PASSWORD:  Password, overrides the file.
        JIWA_TOKEN:     Personal access token, overrides the file.
    """
    if config is None:
        env = dict(os.environ if environ is None else environ)
        file_values = load_config_file(config_path or env.get(CONFIG_PATH_ENV))
        if interactive:
            file_values = _prompt_for_missing(file_values, env)
        config = resolve_config(file_values, env)
    return JiraClient.from_config(config)


def _prompt_for_missing(file_values: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    values = dict(file_values)
    if not values.get("baseURL"):
        values["baseURL"] = input("Jira base URL (e.g. https://myorg.atlassian.net): ").strip()

    username = environ.get("JIWA_USERNAME", values.get("username", ""))
    password = environ.get("JIWA_PASSWORD", values.get("password", ""))
    token = environ.get("JIWA_TOKEN", values.get("token", ""))
    if (username and password) or token:
        return values

    if not username:
        values["username"] = input("Jira username: ").strip()
    values["password"] = getpass.getpass("Jira password or API token: ")
    return values

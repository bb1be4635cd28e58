"""Client configuration: loading the config file and merging environment overrides.

The configuration file is JSON and lives at ``~/.config/jiwa/config.json``::

    {
        "baseURL": "https://myorg.atlassian.net",
        "apiVersion": "2",
        "endpointPrefix": "",
        "username": "me",
        "password": "secret",
        "token": "",
        "defaultProject": "JIWA",
        "timeout": 5
    }

``username``, ``password`` and ``token`` can be overridden through the
JIWA_USERNAME, JIWA_PASSWORD and JIWA_TOKEN environment variables.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from issue_client_interface.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2"
DEFAULT_TIMEOUT = 5.0

CONFIG_PATH_ENV = "JIWA_CONFIG"

#environment variable -> config attribute
_ENV_OVERRIDES: dict[str, str] = {
    "JIWA_USERNAME": "username",
    "JIWA_PASSWORD": "password",
    "JIWA_TOKEN":    "token",
}

#config file key -> config attribute
_FILE_KEYS: dict[str, str] = {
    "baseURL":        "base_url",
    "apiVersion":     "api_version",
    "endpointPrefix": "endpoint_prefix",
    "username":       "username",
    "password":       "password",
    "token":          "token",
    "defaultProject": "default_project",
    "timeout":        "timeout",
}


def default_config_path() -> Path:
    return Path.home() / ".config" / "jiwa" / "config.json"


@dataclass(frozen=True)
class ClientConfig:
    """Validated, immutable client configuration."""

    base_url: str
    api_version: str = DEFAULT_API_VERSION
    endpoint_prefix: str = ""
    username: str = ""
    password: str = ""
    token: str = ""
    default_project: str = ""
    timeout: float = DEFAULT_TIMEOUT

    @property
    def browse_root(self) -> str:
        """Base URL plus endpoint prefix, the root every REST and browse path hangs off."""
        return self.base_url.rstrip("/") + self.endpoint_prefix.rstrip("/")

    @property
    def uses_basic_auth(self) -> bool:
        return bool(self.username and self.password)

    def __repr__(self) -> str:
        # keep secrets out of tracebacks and debug logs
        return (
            f"ClientConfig(base_url={self.base_url!r}, api_version={self.api_version!r}, "
            f"endpoint_prefix={self.endpoint_prefix!r}, username={self.username!r}, "
            f"default_project={self.default_project!r}, timeout={self.timeout!r})"
        )


def validate_credentials(username: str, password: str, token: str) -> None:
    """Raise ConfigurationError unless username+password or a token is set."""
    if username and password:
        return
    if token:
        return
    if username and not password:
        raise ConfigurationError(
            f"password for {username!r} is not set; set \"password\" (or JIWA_PASSWORD) or use a token instead"
        )
    raise ConfigurationError(
        "either \"username\" + \"password\" or \"token\" need to be set; they can also be supplied "
        "through the JIWA_USERNAME, JIWA_PASSWORD and JIWA_TOKEN environment variables"
    )


def load_config_file(path: str | Path | None = None) -> dict[str, Any]:
    """Read the raw JSON configuration file.

    Raises:
        ConfigurationError: If the file is missing or is not a JSON object.
    """
    config_path = Path(path) if path else default_config_path()
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as e:
        raise ConfigurationError(f"cannot locate configuration file, was it created under {config_path}?") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"failed to read configuration file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration file {config_path} must contain a JSON object")
    logger.debug("Loaded configuration from %s", config_path)
    return data


def resolve_config(file_values: Mapping[str, Any], environ: Mapping[str, str]) -> ClientConfig:
    """Merge file-sourced values with an environment snapshot and validate the result.

    Args:
        file_values: The parsed configuration file (keys as documented in this module).
        environ:     A snapshot of the environment; only the JIWA_* credential overrides are read.

    Returns:
        A validated ClientConfig.

    Raises:
        ConfigurationError: If the base URL or the credentials are missing, or a value has the wrong type.
    """
    values: dict[str, Any] = {}
    for file_key, attr in _FILE_KEYS.items():
        if file_values.get(file_key) not in (None, ""):
            values[attr] = file_values[file_key]

    for env_key, attr in _ENV_OVERRIDES.items():
        if env_key in environ:
            logger.debug("Using %s from the environment", env_key)
            values[attr] = environ[env_key]

    base_url = str(values.get("base_url", "")).strip()
    if not base_url:
        raise ConfigurationError("\"baseURL\" needs to be set in the configuration file")

    try:
        timeout = float(values.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"\"timeout\" must be a number of seconds, got {values['timeout']!r}") from e
    if timeout <= 0:
        raise ConfigurationError("\"timeout\" must be greater than zero")

    username = str(values.get("username", ""))
    password = str(values.get("password", ""))
    token = str(values.get("token", ""))
    validate_credentials(username, password, token)

    return ClientConfig(
        base_url=base_url.rstrip("/"),
        api_version=str(values.get("api_version", DEFAULT_API_VERSION)),
        endpoint_prefix=_normalize_prefix(str(values.get("endpoint_prefix", ""))),
        username=username,
        password=password,
        token=token,
        default_project=str(values.get("default_project", "")),
        timeout=timeout,
    )


def _normalize_prefix(prefix: str) -> str:
    prefix = prefix.strip().strip("/")
    return f"/{prefix}" if prefix else ""

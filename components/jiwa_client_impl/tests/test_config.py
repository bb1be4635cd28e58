"""Tests for loading and resolving the client configuration."""

import json

import pytest

from issue_client_interface.errors import ConfigurationError
from jiwa_client_impl.config import ClientConfig, load_config_file, resolve_config


def write_config(path, content):
    path.write_text(json.dumps(content))
    return path


def test_load_config_file_reads_json_object(tmp_path):
    config_file = write_config(tmp_path / "config.json", {"baseURL": "https://jira.example.com", "token": "t"})

    assert load_config_file(config_file) == {"baseURL": "https://jira.example.com", "token": "t"}


def test_load_config_file_defaults_to_home_location(tmp_path, monkeypatch):
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)
    config_dir = tmp_path / ".config" / "jiwa"
    config_dir.mkdir(parents=True)
    write_config(config_dir / "config.json", {"baseURL": "https://jira.example.com"})

    assert load_config_file()["baseURL"] == "https://jira.example.com"


def test_load_config_file_missing_raises(tmp_path):
    with pytest.raises(ConfigurationError) as exc_info:
        load_config_file(tmp_path / "nope.json")

    assert "cannot locate configuration file" in str(exc_info.value)


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_load_config_file_invalid_content_raises(tmp_path, content):
    config_file = tmp_path / "config.json"
    config_file.write_text(content)

    with pytest.raises(ConfigurationError):
        load_config_file(config_file)


def test_resolve_config_applies_defaults():
    config = resolve_config({"baseURL": "https://jira.example.com/", "token": "t"}, {})

    assert config == ClientConfig(base_url="https://jira.example.com", token="t")
    assert config.api_version == "2"
    assert config.timeout == 5.0
    assert config.endpoint_prefix == ""


def test_resolve_config_reads_every_file_key():
    config = resolve_config(
        {
            "baseURL": "https://jira.example.com",
            "apiVersion": "3",
            "endpointPrefix": "jira/",
            "username": "me",
            "password": "secret",
            "defaultProject": "JIWA",
            "timeout": 12,
        },
        {},
    )

    assert config.api_version == "3"
    assert config.endpoint_prefix == "/jira"
    assert config.browse_root == "https://jira.example.com/jira"
    assert config.default_project == "JIWA"
    assert config.timeout == 12.0
    assert config.uses_basic_auth


def test_environment_overrides_file_credentials():
    config = resolve_config(
        {"baseURL": "https://jira.example.com", "username": "file-user", "password": "file-pass"},
        {"JIWA_USERNAME": "env-user", "JIWA_PASSWORD": "env-pass", "JIWA_TOKEN": "env-token", "HOME": "/root"},
    )

    assert config.username == "env-user"
    assert config.password == "env-pass"
    assert config.token == "env-token"


def test_environment_only_credentials_are_enough():
    config = resolve_config({"baseURL": "https://jira.example.com"}, {"JIWA_TOKEN": "t"})

    assert config.token == "t"
    assert not config.uses_basic_auth


@pytest.mark.parametrize(
    "file_values",
    [
        {"baseURL": "https://jira.example.com"},
        {"baseURL": "https://jira.example.com", "username": "me"},
        {"baseURL": "https://jira.example.com", "password": "secret"},
        {"username": "me", "password": "secret"},
        {"baseURL": "https://jira.example.com", "token": "t", "timeout": "soon"},
        {"baseURL": "https://jira.example.com", "token": "t", "timeout": 0},
    ],
)
def test_resolve_config_rejects_incomplete_configuration(file_values):
    with pytest.raises(ConfigurationError):
        resolve_config(file_values, {})


def test_repr_hides_secrets():
    config = ClientConfig(base_url="https://jira.example.com", username="me", password="hunter2", token="tok")

    assert "hunter2" not in repr(config)
    assert "tok" not in repr(config).replace("token", "")

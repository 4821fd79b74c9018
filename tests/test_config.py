"""Tests for configuration loading and validation."""

import pytest

from teamcity_client.auth import CredentialsAuthorizer, GuestAuthorizer
from teamcity_client.config import Config, load_config
from teamcity_client.errors import AuthenticationError, ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TEAMCITY_URL", "TEAMCITY_USERNAME", "TEAMCITY_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


def test_load_config_from_environment(monkeypatch):
    """Verify URL and credentials are read from TEAMCITY_* variables."""
    monkeypatch.setenv("TEAMCITY_URL", "https://ci.example.com/")
    monkeypatch.setenv("TEAMCITY_USERNAME", "jdoe")
    monkeypatch.setenv("TEAMCITY_PASSWORD", "secret")

    config = load_config()

    assert config == Config(base_url="https://ci.example.com", username="jdoe", password="secret")
    assert isinstance(config.authorizer(), CredentialsAuthorizer)
    assert "secret" not in repr(config)


def test_explicit_arguments_override_environment(monkeypatch):
    """Verify explicit arguments take precedence over environment variables."""
    monkeypatch.setenv("TEAMCITY_URL", "https://env.example.com")

    config = load_config(base_url="http://ci.local:8111")

    assert config.base_url == "http://ci.local:8111"
    assert config.guest is True
    assert isinstance(config.authorizer(), GuestAuthorizer)


def test_guest_flag_ignores_credentials(monkeypatch):
    """Verify guest mode drops configured credentials."""
    monkeypatch.setenv("TEAMCITY_USERNAME", "jdoe")
    monkeypatch.setenv("TEAMCITY_PASSWORD", "secret")

    config = load_config(base_url="https://ci.example.com", guest=True)

    assert config.username is None
    assert config.password is None


def test_missing_url_raises_configuration_error():
    """Verify a missing server URL is a configuration error."""
    with pytest.raises(ConfigurationError):
        load_config()


@pytest.mark.parametrize("url", ["ci.example.com", "ftp://ci.example.com", "https://"])
def test_invalid_url_raises_configuration_error(url):
    """Verify URLs without an http(s) scheme and host are rejected."""
    with pytest.raises(ConfigurationError):
        load_config(base_url=url)


def test_username_without_password_raises_authentication_error():
    """Verify a username with no password is reported as an authentication error."""
    with pytest.raises(AuthenticationError):
        load_config(base_url="https://ci.example.com", username="jdoe")

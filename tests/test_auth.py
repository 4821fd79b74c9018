"""Tests for guest and credentialed authorizers."""

import pytest

from teamcity_client.auth import Authorizer, CredentialsAuthorizer, GuestAuthorizer


def test_guest_authorizer_resolves_guest_prefix_without_credentials():
    """Verify guest access uses the guestAuth prefix and supplies no credentials."""
    authorizer = GuestAuthorizer()

    assert authorizer.resolve_base_url("https://ci.example.com") == "https://ci.example.com/guestAuth/app/rest"
    assert authorizer.get_credentials() is None


def test_credentials_authorizer_resolves_http_auth_prefix_with_credentials():
    """Verify credentialed access uses the httpAuth prefix and supplies the user/password pair."""
    authorizer = CredentialsAuthorizer("jdoe", "secret")

    assert authorizer.resolve_base_url("https://ci.example.com") == "https://ci.example.com/httpAuth/app/rest"
    assert authorizer.get_credentials() == ("jdoe", "secret")


def test_trailing_slash_is_not_duplicated():
    """Verify a trailing slash on the server URL does not produce a double slash."""
    assert GuestAuthorizer().resolve_base_url("https://ci.example.com/") == "https://ci.example.com/guestAuth/app/rest"


def test_credentials_authorizer_repr_hides_password():
    """Verify the password never appears in the authorizer's repr."""
    assert "secret" not in repr(CredentialsAuthorizer("jdoe", "secret"))


def test_authorizer_is_abstract():
    """Verify the Authorizer capability interface cannot be instantiated directly."""
    with pytest.raises(TypeError):
        Authorizer()

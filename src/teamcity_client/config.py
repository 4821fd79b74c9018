"""Configuration parsing and validation for the TeamCity client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

from .auth import Authorizer, CredentialsAuthorizer, GuestAuthorizer
from .errors import AuthenticationError, ConfigurationError


@dataclass(frozen=True)
class Config:
    """Validated settings used to construct a ``TeamCityClient``."""

    base_url: str
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    @property
    def guest(self) -> bool:
        return self.username is None

    def authorizer(self) -> Authorizer:
        """Return the authorizer matching the configured access mode."""
        if self.username is None or self.password is None:
            return GuestAuthorizer()
        return CredentialsAuthorizer(self.username, self.password)


def load_config(
    base_url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    guest: bool = False,
) -> Config:
    """Build and validate client configuration.

    Explicit arguments take precedence over the ``TEAMCITY_URL``,
    ``TEAMCITY_USERNAME`` and ``TEAMCITY_PASSWORD`` environment variables.
    When ``guest`` is set, credentials are ignored.

    Raises:
        ConfigurationError: If no usable http(s) server URL is configured.
        AuthenticationError: If a username is configured without a password.
    """
    resolved_url = (base_url or os.getenv("TEAMCITY_URL", "")).strip()
    if not resolved_url:
        raise ConfigurationError(
            "Missing TeamCity server URL. Pass --url or set the 'TEAMCITY_URL' environment variable."
        )

    parsed = urlparse(resolved_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Invalid TeamCity server URL {resolved_url!r}: expected http(s)://host[:port]")

    if guest:
        return Config(base_url=resolved_url.rstrip("/"))

    resolved_username = (username or os.getenv("TEAMCITY_USERNAME", "")).strip() or None
    resolved_password = password if password is not None else os.getenv("TEAMCITY_PASSWORD")
    if resolved_username is None:
        return Config(base_url=resolved_url.rstrip("/"))

    if not resolved_password:
        raise AuthenticationError(
            f"Missing password for TeamCity user '{resolved_username}'. "
            "Set the 'TEAMCITY_PASSWORD' environment variable or use guest access."
        )

    return Config(
        base_url=resolved_url.rstrip("/"),
        username=resolved_username,
        password=resolved_password,
    )

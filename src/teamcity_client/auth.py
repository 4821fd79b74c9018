"""Authorization strategies that select the REST root and basic-auth credentials.

TeamCity serves the same REST API under two prefixes: ``/guestAuth/app/rest``
for anonymous access to public data and ``/httpAuth/app/rest`` for requests
carrying HTTP basic authentication.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

GUEST_PREFIX = "/guestAuth/app/rest"
HTTP_AUTH_PREFIX = "/httpAuth/app/rest"


class Authorizer(ABC):
    """Resolves the API root for a server URL and supplies credentials."""

    @abstractmethod
    def resolve_base_url(self, base_url: str) -> str:
        """Return the absolute REST root, ``base_url`` plus the access-mode prefix."""

    @abstractmethod
    def get_credentials(self) -> Optional[Tuple[str, str]]:
        """Return a ``(username, password)`` pair, or ``None`` for anonymous access."""


class GuestAuthorizer(Authorizer):
    """Anonymous access restricted to publicly visible data."""

    def resolve_base_url(self, base_url: str) -> str:
        return base_url.rstrip("/") + GUEST_PREFIX

    def get_credentials(self) -> Optional[Tuple[str, str]]:
        return None

    def __repr__(self) -> str:
        return "GuestAuthorizer()"


class CredentialsAuthorizer(Authorizer):
    """HTTP basic authentication with a username and password."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    def resolve_base_url(self, base_url: str) -> str:
        return base_url.rstrip("/") + HTTP_AUTH_PREFIX

    def get_credentials(self) -> Optional[Tuple[str, str]]:
        return self._username, self._password

    def __repr__(self) -> str:
        return f"CredentialsAuthorizer(username={self._username!r})"

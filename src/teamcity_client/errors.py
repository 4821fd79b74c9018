"""Custom exception types for the TeamCity REST client."""

from __future__ import annotations

from typing import Optional


class TeamCityError(Exception):
    """Base exception for all TeamCity client errors."""


class ConfigurationError(TeamCityError):
    """Raised when the server URL or client settings are missing or invalid."""


class AuthenticationError(ConfigurationError):
    """Raised when TeamCity credentials are incomplete."""


class TransportError(TeamCityError):
    """Raised when a request cannot be completed or returns a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code


class DecodeError(TransportError):
    """Raised when a response body is not JSON or does not have the expected shape."""


class DateParseError(TeamCityError, ValueError):
    """Raised when a raw build date does not match the TeamCity date layout."""

    def __init__(self, field: str, raw: str) -> None:
        super().__init__(f"Cannot parse {field} {raw!r}: expected layout YYYYMMDDThhmmss+hhmm")
        self.field = field
        self.raw = raw

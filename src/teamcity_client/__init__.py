"""Typed client for the TeamCity REST API."""

from .auth import Authorizer, CredentialsAuthorizer, GuestAuthorizer
from .client import TeamCityClient
from .config import Config, load_config
from .errors import (
    AuthenticationError,
    ConfigurationError,
    DateParseError,
    DecodeError,
    TeamCityError,
    TransportError,
)
from .models import (
    Build,
    BuildStatistics,
    BuildStatus,
    BuildType,
    Change,
    Project,
    Role,
    ServerLicensingData,
    User,
    UserGroup,
)

__version__ = "0.1.0"

__all__ = [
    "Authorizer",
    "AuthenticationError",
    "Build",
    "BuildStatistics",
    "BuildStatus",
    "BuildType",
    "Change",
    "Config",
    "ConfigurationError",
    "CredentialsAuthorizer",
    "DateParseError",
    "DecodeError",
    "GuestAuthorizer",
    "Project",
    "Role",
    "ServerLicensingData",
    "TeamCityClient",
    "TeamCityError",
    "TransportError",
    "User",
    "UserGroup",
    "load_config",
]

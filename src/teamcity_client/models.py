"""Domain models for TeamCity REST API payloads.

Every entity is an immutable snapshot decoded eagerly from a single response
body. Fields missing from the payload decode to zero values; payload members
of the wrong JSON type raise ``TypeError`` or ``ValueError``, which the client
reports as a decode error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import DateParseError

DATE_LAYOUT = "%Y%m%dT%H%M%S%z"
_DATE_PATTERN = re.compile(r"\d{8}T\d{6}[+-]\d{4}")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise TypeError(f"expected a scalar value, got {type(value).__name__}")
    return str(value)


def _number(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool) or isinstance(value, (dict, list)):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return int(value)


def _flag(value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"expected a boolean, got {type(value).__name__}")
    return value


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Convert frozen property data back into plain JSON structures."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


def _properties(value: Any) -> Tuple[Mapping[str, Any], ...]:
    return tuple(_object(item) for item in unwrap_items(value, "property"))


def _object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def unwrap_items(value: Any, key: str) -> List[Any]:
    """Return the item list of a collection member.

    TeamCity nests collections either as a bare array or as an envelope object
    such as ``{"count": 2, "group": [...]}``; both shapes are accepted.
    """
    if value is None:
        return []
    if isinstance(value, dict):
        value = value.get(key)
        if value is None:
            return []
    if not isinstance(value, list):
        raise TypeError(f"expected a list of '{key}' items, got {type(value).__name__}")
    return value


def _parse_date(field_name: str, raw: str) -> datetime:
    if not isinstance(raw, str) or not _DATE_PATTERN.fullmatch(raw):
        raise DateParseError(field_name, raw)
    try:
        return datetime.strptime(raw, DATE_LAYOUT)
    except (TypeError, ValueError) as exc:
        raise DateParseError(field_name, raw) from exc


def format_date(value: datetime) -> str:
    """Format a timezone-aware datetime with the TeamCity date layout."""
    return value.strftime(DATE_LAYOUT)


@dataclass(frozen=True, slots=True)
class Project:
    """A TeamCity project; the project tree is linked by ``parent_project_id``."""

    id: str
    name: str = ""
    description: str = ""
    parent_project_id: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "Project":
        data = _object(payload)
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            parent_project_id=_text(data.get("parentProjectId")),
        )


@dataclass(frozen=True, slots=True)
class BuildType:
    """A build configuration belonging to a project."""

    id: str
    name: str = ""
    description: str = ""
    project_id: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "BuildType":
        data = _object(payload)
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            project_id=_text(data.get("projectId")),
        )


class BuildStatus(Enum):
    UNKNOWN = 0
    SUCCESS = 1
    RUNNING = 2
    FAILURE = 3

    @classmethod
    def from_payload(cls, status: Any, state: Any = None) -> "BuildStatus":
        """Map the server's ``status``/``state`` pair onto a build status.

        A running build reports its provisional status in ``status``, so
        ``state == "running"`` takes precedence.
        """
        if isinstance(state, str) and state.lower() == "running":
            return cls.RUNNING
        if isinstance(status, int) and not isinstance(status, bool):
            try:
                return cls(status)
            except ValueError:
                return cls.UNKNOWN
        if isinstance(status, str):
            normalized = status.strip().upper()
            if normalized == "SUCCESS":
                return cls.SUCCESS
            if normalized in ("FAILURE", "ERROR"):
                return cls.FAILURE
            if normalized == "RUNNING":
                return cls.RUNNING
        return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class Build:
    """A single build; dates are kept as raw strings and parsed on request."""

    id: int
    number: str = ""
    status: BuildStatus = BuildStatus.UNKNOWN
    status_text: str = ""
    progress: int = 0
    build_type_id: str = ""
    queued_date_raw: str = ""
    start_date_raw: str = ""
    finish_date_raw: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "Build":
        data = _object(payload)
        progress = data.get("percentageComplete", data.get("progress"))
        return cls(
            id=_number(data.get("id")),
            number=_text(data.get("number")),
            status=BuildStatus.from_payload(data.get("status"), data.get("state")),
            status_text=_text(data.get("statusText")),
            progress=_number(progress),
            build_type_id=_text(data.get("buildTypeId")),
            queued_date_raw=_text(data.get("queuedDate")),
            start_date_raw=_text(data.get("startDate")),
            finish_date_raw=_text(data.get("finishDate")),
        )

    def queued_date(self) -> datetime:
        """Parse ``queued_date_raw``.

        Raises:
            DateParseError: If the raw value does not match ``DATE_LAYOUT``.
        """
        return _parse_date("queuedDate", self.queued_date_raw)

    def start_date(self) -> datetime:
        """Parse ``start_date_raw``; raises ``DateParseError`` when malformed."""
        return _parse_date("startDate", self.start_date_raw)

    def finish_date(self) -> datetime:
        """Parse ``finish_date_raw``; raises ``DateParseError`` when malformed."""
        return _parse_date("finishDate", self.finish_date_raw)


@dataclass(frozen=True, slots=True)
class BuildStatistics:
    """Free-form statistic properties of a build, in server order."""

    properties: Tuple[Mapping[str, Any], ...] = field(default=(), hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", tuple(_freeze(prop) for prop in self.properties))

    @classmethod
    def from_dict(cls, payload: Any) -> "BuildStatistics":
        data = _object(payload)
        return cls(properties=_properties(data.get("property")))

    def as_mapping(self) -> Dict[str, Any]:
        """Return ``{name: value}`` for properties that carry a ``name``."""
        return {
            prop["name"]: prop.get("value")
            for prop in self.properties
            if "name" in prop
        }


@dataclass(frozen=True, slots=True)
class Change:
    """A VCS change; ``date`` is the raw server timestamp."""

    id: int
    version: str = ""
    username: str = ""
    date: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "Change":
        data = _object(payload)
        return cls(
            id=_number(data.get("id")),
            version=_text(data.get("version")),
            username=_text(data.get("username")),
            date=_text(data.get("date")),
        )


@dataclass(frozen=True, slots=True)
class Role:
    """A role assignment of a user or group, optionally scoped to a project."""

    role_id: str
    scope: str = ""
    href: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "Role":
        data = _object(payload)
        return cls(
            role_id=_text(data.get("roleId")),
            scope=_text(data.get("scope")),
            href=_text(data.get("href")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"roleId": self.role_id}
        if self.scope:
            result["scope"] = self.scope
        if self.href:
            result["href"] = self.href
        return result


@dataclass(frozen=True, slots=True)
class User:
    """A TeamCity user with its roles, group memberships and properties."""

    id: int = 0
    username: str = ""
    name: str = ""
    email: str = ""
    roles: Tuple[Role, ...] = ()
    groups: Tuple["UserGroup", ...] = ()
    properties: Tuple[Mapping[str, Any], ...] = field(default=(), hash=False)
    has_password: bool = False
    password: str = ""
    last_login: str = ""
    realm: str = ""
    href: str = ""
    locator: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", tuple(_freeze(prop) for prop in self.properties))

    @classmethod
    def from_dict(cls, payload: Any) -> "User":
        data = _object(payload)
        return cls(
            id=_number(data.get("id")),
            username=_text(data.get("username")),
            name=_text(data.get("name")),
            email=_text(data.get("email")),
            roles=tuple(Role.from_dict(item) for item in unwrap_items(data.get("roles"), "role")),
            groups=tuple(
                UserGroup.from_dict(item) for item in unwrap_items(data.get("groups"), "group")
            ),
            properties=_properties(data.get("properties")),
            has_password=_flag(data.get("hasPassword")),
            password=_text(data.get("password")),
            last_login=_text(data.get("lastLogin")),
            realm=_text(data.get("realm")),
            href=_text(data.get("href")),
            locator=_text(data.get("locator")),
        )

    def property_value(self, name: str) -> Optional[Any]:
        """Return the value of the first property called ``name``, if any."""
        for prop in self.properties:
            if prop.get("name") == name:
                return prop.get("value")
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the populated fields into the server's user shape."""
        result: Dict[str, Any] = {}
        if self.id:
            result["id"] = self.id
        for key, value in (
            ("username", self.username),
            ("name", self.name),
            ("email", self.email),
            ("password", self.password),
            ("realm", self.realm),
            ("href", self.href),
            ("locator", self.locator),
        ):
            if value:
                result[key] = value
        if self.roles:
            result["roles"] = {"role": [role.to_dict() for role in self.roles]}
        if self.groups:
            result["groups"] = {"group": [group.to_dict() for group in self.groups]}
        if self.properties:
            result["properties"] = {"property": [thaw(prop) for prop in self.properties]}
        return result


@dataclass(frozen=True, slots=True)
class UserGroup:
    """A user group; parent groups are embedded by value."""

    key: str
    name: str = ""
    description: str = ""
    parent_groups: Tuple["UserGroup", ...] = ()
    users: Tuple[User, ...] = ()
    roles: Tuple[Role, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> "UserGroup":
        data = _object(payload)
        return cls(
            key=_text(data.get("key")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            parent_groups=tuple(
                cls.from_dict(item) for item in unwrap_items(data.get("parent-groups"), "group")
            ),
            users=tuple(User.from_dict(item) for item in unwrap_items(data.get("users"), "user")),
            roles=tuple(Role.from_dict(item) for item in unwrap_items(data.get("roles"), "role")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the group into the JSON body accepted by ``POST /userGroups``."""
        result: Dict[str, Any] = {"key": self.key, "name": self.name}
        if self.description:
            result["description"] = self.description
        if self.parent_groups:
            result["parent-groups"] = {"group": [group.to_dict() for group in self.parent_groups]}
        if self.users:
            result["users"] = {"user": [user.to_dict() for user in self.users]}
        if self.roles:
            result["roles"] = {"role": [role.to_dict() for role in self.roles]}
        return result


@dataclass(frozen=True, slots=True)
class ServerLicensingData:
    """Snapshot of the server's agent and build configuration license usage."""

    max_agents: int = 0
    agents_left: int = 0
    max_build_types: int = 0
    build_types_left: int = 0
    server_license_type: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "ServerLicensingData":
        data = _object(payload)
        return cls(
            max_agents=_number(data.get("maxAgents")),
            agents_left=_number(data.get("agentsLeft")),
            max_build_types=_number(data.get("maxBuildTypes")),
            build_types_left=_number(data.get("buildTypesLeft")),
            server_license_type=_text(data.get("serverLicenseType")),
        )

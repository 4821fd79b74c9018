"""TeamCity REST API client."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar
from urllib.parse import quote

import requests
from requests.auth import HTTPBasicAuth

from .auth import Authorizer, GuestAuthorizer
from .config import Config
from .errors import DecodeError, TransportError
from .models import (
    Build,
    BuildStatistics,
    BuildType,
    Change,
    Project,
    ServerLicensingData,
    User,
    UserGroup,
    unwrap_items,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Characters that carry meaning in the locator mini-syntax.
_LOCATOR_SAFE = ":,()"


def escape(value: Any) -> str:
    """Percent-escape an identifier for use inside a path segment or locator."""
    return quote(str(value), safe="")


def _count(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"count must be a positive integer, got {value!r}")
    return value


class TeamCityClient:
    """Small, typed client for the TeamCity REST API.

    Each accessor performs exactly one HTTP request. Failures are raised as
    ``TransportError`` (or its ``DecodeError`` subclass) and are never retried.
    """

    _TIMEOUT_SECONDS = 30
    _ERROR_BODY_LIMIT = 500

    def __init__(
        self,
        base_url: str,
        authorizer: Optional[Authorizer] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize a client for the server at ``base_url``.

        Args:
            base_url: Server URL, e.g. ``https://ci.example.com``.
            authorizer: Access mode; guest access when omitted.
            session: Optional caller-owned ``requests.Session``; it is used as
                is and left open by ``close()``.
        """
        self._authorizer = authorizer or GuestAuthorizer()
        self._root = self._authorizer.resolve_base_url(base_url)

        credentials = self._authorizer.get_credentials()
        self._auth = HTTPBasicAuth(*credentials) if credentials is not None else None
        self._headers = {"Accept": "application/json"}

        self._owns_session = session is None
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Config) -> "TeamCityClient":
        """Build a client from validated configuration."""
        return cls(config.base_url, authorizer=config.authorizer())

    @property
    def root_url(self) -> str:
        """The resolved REST root every request path is appended to."""
        return self._root

    def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "TeamCityClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the REST root."""
        return f"{self._root}/{path.lstrip('/')}"

    def _decode_response(self, method: str, url: str, response: requests.Response) -> Any:
        status_code = response.status_code
        if not 200 <= status_code < 300:
            body = (response.text or "")[: self._ERROR_BODY_LIMIT].strip()
            logger.error("%s %s returned %s", method, url, status_code)
            raise TransportError(
                f"TeamCity API request failed: {method} {url} returned {status_code}"
                + (f" - {body}" if body else ""),
                method=method,
                url=url,
                status_code=status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("%s %s returned a body that is not JSON", method, url)
            raise DecodeError(
                f"TeamCity API returned invalid JSON: {method} {url}",
                method=method,
                url=url,
                status_code=status_code,
            ) from exc

        logger.debug("%s %s: OK (%s)", method, url, status_code)
        return payload

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a GET request and return the decoded JSON body.

        Raises:
            TransportError: If the request fails or returns a non-2xx status.
            DecodeError: If the body is not valid JSON.
        """
        url = self._build_url(path)
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(
                url,
                params=params,
                headers=self._headers,
                auth=self._auth,
                timeout=self._TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.error("GET %s failed: %s", url, exc)
            raise TransportError(f"TeamCity request failed: GET {url}: {exc}", method="GET", url=url) from exc

        return self._decode_response("GET", url, response)

    def _post_json(self, path: str, body: Any, params: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a POST request with a JSON body and return the decoded JSON response."""
        url = self._build_url(path)
        logger.debug("POST %s params=%s", url, params)
        try:
            response = self._session.post(
                url,
                params=params,
                json=body,
                headers={**self._headers, "Content-Type": "application/json"},
                auth=self._auth,
                timeout=self._TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.error("POST %s failed: %s", url, exc)
            raise TransportError(f"TeamCity request failed: POST {url}: {exc}", method="POST", url=url) from exc

        return self._decode_response("POST", url, response)

    def _decode(self, method: str, path: str, decoder: Callable[[Any], T], payload: Any) -> T:
        """Run ``decoder`` over ``payload``, reporting shape mismatches as ``DecodeError``."""
        try:
            return decoder(payload)
        except (TypeError, ValueError, AttributeError) as exc:
            url = self._build_url(path)
            logger.error("Unexpected payload shape from %s %s: %s", method, url, exc)
            raise DecodeError(
                f"TeamCity API returned unexpected payload shape: {method} {url}: {exc}",
                method=method,
                url=url,
            ) from exc

    def _get_one(self, path: str, decoder: Callable[[Any], T], params: Optional[Dict[str, Any]] = None) -> T:
        return self._decode("GET", path, decoder, self._get_json(path, params=params))

    def _get_list(
        self,
        path: str,
        item_key: str,
        decoder: Callable[[Any], T],
        params: Optional[Dict[str, Any]] = None,
    ) -> List[T]:
        """GET a collection envelope ``{"count": n, item_key: [...]}`` and decode its items."""
        payload = self._get_json(path, params=params)

        def decode_envelope(data: Any) -> List[T]:
            if not isinstance(data, dict):
                raise TypeError(f"expected a '{item_key}' envelope object, got {type(data).__name__}")
            return [decoder(item) for item in unwrap_items(data, item_key)]

        return self._decode("GET", path, decode_envelope, payload)

    # Projects

    def get_project_by_id(self, project_id: str) -> Project:
        """Get a project by its ID."""
        return self._get_one(f"projects/id:{escape(project_id)}", Project.from_dict)

    def get_project_by_name(self, name: str) -> Project:
        """Get a project by its name.

        Raises:
            DecodeError: If the server returns no project with that name.
        """
        path = "projects"
        projects = self._get_list(path, "project", Project.from_dict, params={"locator": f"name:{escape(name)}"})
        if not projects:
            raise DecodeError(f"No project named {name!r} was returned by {self._build_url(path)}")
        return projects[0]

    def get_projects(self) -> List[Project]:
        """List all projects visible to the current access mode."""
        return self._get_list("projects", "project", Project.from_dict)

    # Build types

    def get_build_type_by_id(self, build_type_id: str) -> BuildType:
        """Get a build configuration by its ID."""
        return self._get_one(f"buildTypes/id:{escape(build_type_id)}", BuildType.from_dict)

    def get_build_types(self) -> List[BuildType]:
        """List all build configurations."""
        return self._get_list("buildTypes", "buildType", BuildType.from_dict)

    def get_build_types_for_project(self, project_id: str) -> List[BuildType]:
        """List the build configurations of a project."""
        return self._get_list(
            "buildTypes",
            "buildType",
            BuildType.from_dict,
            params={"locator": f"project:{escape(project_id)}"},
        )

    def get_build_type_statistics(self, build_id: int) -> BuildStatistics:
        """Get the statistic values reported by a build."""
        return self._get_one(f"builds/{escape(build_id)}/statistics", BuildStatistics.from_dict)

    # Builds

    def get_build_by_id(self, build_id: int) -> Build:
        return self._get_one(f"builds/id:{escape(build_id)}", Build.from_dict)

    def get_builds(self, count: int) -> List[Build]:
        """Get the ``count`` latest builds; the server applies the limit."""
        return self._get_list("builds", "build", Build.from_dict, params={"locator": f"count:{_count(count)}"})

    def get_builds_for_build_type(self, build_type_id: str, count: int) -> List[Build]:
        """Get the ``count`` latest builds of a build configuration."""
        locator = f"buildType:{escape(build_type_id)},count:{_count(count)}"
        return self._get_list("builds", "build", Build.from_dict, params={"locator": locator})

    # Changes

    def get_change_by_id(self, change_id: int) -> Change:
        return self._get_one(f"changes/id:{escape(change_id)}", Change.from_dict)

    def get_changes(self, count: int) -> List[Change]:
        """Get the ``count`` latest changes."""
        return self._get_list("changes", "change", Change.from_dict, params={"locator": f"count:{_count(count)}"})

    def get_changes_for_project(self, project_id: str, count: int) -> List[Change]:
        """Get the ``count`` latest changes of a project."""
        locator = f"project:{escape(project_id)},count:{_count(count)}"
        return self._get_list("changes", "change", Change.from_dict, params={"locator": locator})

    def get_changes_for_build(self, build_id: int) -> List[Change]:
        """Get the changes included in a build."""
        locator = f"build:(id:{escape(build_id)})"
        return self._get_list("changes", "change", Change.from_dict, params={"locator": locator})

    def get_changes_for_build_type_since_change(self, build_type_id: str, change_id: int) -> List[Change]:
        """Get the changes of a build configuration made after ``change_id``."""
        locator = f"buildType:(id:{escape(build_type_id)}),sinceChange:{escape(change_id)}"
        return self._get_list("changes", "change", Change.from_dict, params={"locator": locator})

    def get_changes_for_build_type_pending(self, build_type_id: str) -> List[Change]:
        """Get the changes of a build configuration not yet included in any build."""
        locator = f"buildType:(id:{escape(build_type_id)}),pending:true"
        return self._get_list("changes", "change", Change.from_dict, params={"locator": locator})

    # Users and groups

    def get_user_groups(self) -> List[UserGroup]:
        return self._get_list("userGroups", "group", UserGroup.from_dict)

    def get_user_group(self, key: str) -> UserGroup:
        """Get a user group by its unique key."""
        return self._get_one(f"userGroups/key:{escape(key)}", UserGroup.from_dict)

    def create_user_group(self, group: UserGroup) -> UserGroup:
        """Create a user group and return the server's representation of it."""
        path = "userGroups"
        return self._decode("POST", path, UserGroup.from_dict, self._post_json(path, group.to_dict()))

    def get_user(self, user_locator: str) -> User:
        """Get a user by locator, e.g. ``username:jdoe`` or ``id:12``."""
        return self._get_one(f"users/{quote(user_locator, safe=_LOCATOR_SAFE)}", User.from_dict)

    def update_user_groups(self, user_locator: str, groups: Sequence[UserGroup]) -> List[UserGroup]:
        """Post the group memberships of a user and return the groups the server reports."""
        path = f"users/{quote(user_locator, safe=_LOCATOR_SAFE)}/groups"
        body = [group.to_dict() for group in groups]
        payload = self._post_json(path, body)

        def decode_groups(data: Any) -> List[UserGroup]:
            return [UserGroup.from_dict(item) for item in unwrap_items(data, "group")]

        return self._decode("POST", path, decode_groups, payload)

    # Server

    def get_server_licensing_data(self) -> ServerLicensingData:
        """Get the server's license usage snapshot."""
        return self._get_one("server/licensingData", ServerLicensingData.from_dict)

"""Entry point for the ``teamcity-client`` command."""

from __future__ import annotations

import argparse
import dataclasses
import enum
import json
import logging
import sys
from typing import Any, Mapping, Optional, Sequence

from .cli import parse_args
from .client import TeamCityClient
from .config import load_config
from .errors import ConfigurationError, TeamCityError

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
        stream=sys.stderr,
    )


def to_jsonable(value: Any) -> Any:
    """Convert decoded entities into plain JSON-serializable structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, Mapping):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def run_command(client: TeamCityClient, args: argparse.Namespace) -> Any:
    """Dispatch the parsed command to the matching client accessor."""
    command = args.command

    if command == "projects":
        return client.get_projects()
    if command == "project":
        if args.by_name:
            return client.get_project_by_name(args.project_id)
        return client.get_project_by_id(args.project_id)
    if command == "build-types":
        if args.project_id:
            return client.get_build_types_for_project(args.project_id)
        return client.get_build_types()
    if command == "builds":
        if args.build_type_id:
            return client.get_builds_for_build_type(args.build_type_id, args.count)
        return client.get_builds(args.count)
    if command == "statistics":
        return client.get_build_type_statistics(args.build_id)
    if command == "changes":
        if args.build_type_id and args.since_change is not None:
            return client.get_changes_for_build_type_since_change(args.build_type_id, args.since_change)
        if args.build_type_id and args.pending:
            return client.get_changes_for_build_type_pending(args.build_type_id)
        if args.build_id is not None:
            return client.get_changes_for_build(args.build_id)
        if args.project_id:
            return client.get_changes_for_project(args.project_id, args.count)
        return client.get_changes(args.count)
    if command == "user":
        return client.get_user(args.locator)
    if command == "groups":
        return client.get_user_groups()
    if command == "licensing":
        return client.get_server_licensing_data()

    raise ConfigurationError(f"Unknown command: {command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one query and print its result.

    Returns:
        ``0`` on success, ``1`` when the API request fails and ``2`` when the
        configuration is invalid.
    """
    args = parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = load_config(base_url=args.url, username=args.username, guest=args.guest)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    logger.debug("Using %s access to %s", "guest" if config.guest else "authenticated", config.base_url)

    try:
        with TeamCityClient.from_config(config) as client:
            result = run_command(client, args)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except TeamCityError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(to_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

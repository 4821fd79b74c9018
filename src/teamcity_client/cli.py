"""Command-line argument parsing for the TeamCity client."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a single TeamCity query.

    Returns:
        Parsed arguments with connection settings in ``url``, ``username``
        and ``guest`` and the selected query in ``command``.
    """
    parser = argparse.ArgumentParser(
        prog="teamcity-client",
        description="Query a TeamCity server's REST API and print the results as JSON.",
    )

    parser.add_argument("--url", default=None, help="TeamCity server URL (default: $TEAMCITY_URL).")
    parser.add_argument(
        "--username",
        default=None,
        help="User for HTTP basic auth (default: $TEAMCITY_USERNAME); password is read from $TEAMCITY_PASSWORD.",
    )
    parser.add_argument("--guest", action="store_true", help="Use guest access and ignore credentials.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP requests to stderr.")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("projects", help="List projects.")

    project = commands.add_parser("project", help="Show one project.")
    project.add_argument("project_id", help="Project ID.")
    project.add_argument("--by-name", action="store_true", help="Treat the argument as a project name.")

    build_types = commands.add_parser("build-types", help="List build configurations.")
    build_types.add_argument("--project", dest="project_id", default=None, help="Only those of this project.")

    builds = commands.add_parser("builds", help="List the latest builds.")
    builds.add_argument("--build-type", dest="build_type_id", default=None, help="Only builds of this build type.")
    builds.add_argument("--count", type=_positive_int, default=10, help="Number of builds (default: 10).")

    statistics = commands.add_parser("statistics", help="Show the statistics of a build.")
    statistics.add_argument("build_id", type=_positive_int, help="Build ID.")

    changes = commands.add_parser("changes", help="List changes.")
    scope = changes.add_mutually_exclusive_group()
    scope.add_argument("--project", dest="project_id", default=None, help="Only changes of this project.")
    scope.add_argument("--build", dest="build_id", type=_positive_int, default=None, help="Changes in this build.")
    scope.add_argument("--build-type", dest="build_type_id", default=None, help="Changes of this build type.")
    changes.add_argument(
        "--since-change",
        type=_positive_int,
        default=None,
        help="With --build-type: changes made after this change ID.",
    )
    changes.add_argument("--pending", action="store_true", help="With --build-type: changes not yet built.")
    changes.add_argument("--count", type=_positive_int, default=10, help="Number of changes (default: 10).")

    user = commands.add_parser("user", help="Show a user.")
    user.add_argument("locator", help="User locator, e.g. username:jdoe.")

    commands.add_parser("groups", help="List user groups.")
    commands.add_parser("licensing", help="Show server licensing data.")

    args = parser.parse_args(argv)

    if args.command == "changes":
        filtered = args.since_change is not None or args.pending
        if filtered and args.build_type_id is None:
            parser.error("--since-change and --pending require --build-type")
        if args.build_type_id is not None and not filtered:
            parser.error("--build-type requires --since-change or --pending")
        if args.since_change is not None and args.pending:
            parser.error("--since-change and --pending are mutually exclusive")

    return args

"""Tests for command dispatch and the entry point."""

import json
from argparse import Namespace
from unittest.mock import Mock, patch

import pytest

from teamcity_client.cli import parse_args
from teamcity_client.errors import TransportError
from teamcity_client.main import main, run_command, to_jsonable
from teamcity_client.models import Build, BuildStatus, Project


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TEAMCITY_URL", "TEAMCITY_USERNAME", "TEAMCITY_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    "argv, method, call_args",
    [
        (["projects"], "get_projects", ()),
        (["project", "Web"], "get_project_by_id", ("Web",)),
        (["project", "Web App", "--by-name"], "get_project_by_name", ("Web App",)),
        (["build-types"], "get_build_types", ()),
        (["build-types", "--project", "Web"], "get_build_types_for_project", ("Web",)),
        (["builds", "--count", "3"], "get_builds", (3,)),
        (["builds", "--build-type", "bt", "--count", "2"], "get_builds_for_build_type", ("bt", 2)),
        (["statistics", "77"], "get_build_type_statistics", (77,)),
        (["changes"], "get_changes", (10,)),
        (["changes", "--project", "Web", "--count", "4"], "get_changes_for_project", ("Web", 4)),
        (["changes", "--build", "55"], "get_changes_for_build", (55,)),
        (["changes", "--build-type", "bt", "--since-change", "9"], "get_changes_for_build_type_since_change", ("bt", 9)),
        (["changes", "--build-type", "bt", "--pending"], "get_changes_for_build_type_pending", ("bt",)),
        (["user", "username:jdoe"], "get_user", ("username:jdoe",)),
        (["groups"], "get_user_groups", ()),
        (["licensing"], "get_server_licensing_data", ()),
    ],
)
def test_run_command_dispatches_to_accessor(argv, method, call_args):
    """Verify each command calls exactly the matching client accessor."""
    client = Mock()

    result = run_command(client, parse_args(argv))

    getattr(client, method).assert_called_once_with(*call_args)
    assert result is getattr(client, method).return_value


def test_to_jsonable_converts_entities():
    """Verify entities and enums become plain JSON structures."""
    value = [Build(id=1, status=BuildStatus.SUCCESS)]

    converted = to_jsonable(value)

    assert converted[0]["status"] == "SUCCESS"
    assert json.loads(json.dumps(converted)) == converted


def test_main_prints_json(capsys):
    """Verify a successful query prints the decoded entities as JSON and returns 0."""
    client = Mock()
    client.__enter__ = Mock(return_value=client)
    client.__exit__ = Mock(return_value=False)
    client.get_projects.return_value = [Project(id="Web", name="Web App")]

    with patch("teamcity_client.main.TeamCityClient.from_config", return_value=client) as from_config:
        exit_code = main(["--url", "https://ci.example.com", "projects"])

    assert exit_code == 0
    assert from_config.call_args.args[0].base_url == "https://ci.example.com"
    output = json.loads(capsys.readouterr().out)
    assert output == [{"id": "Web", "name": "Web App", "description": "", "parent_project_id": ""}]


def test_main_returns_1_on_transport_error(capsys):
    """Verify API failures are reported on stderr with exit code 1."""
    client = Mock()
    client.__enter__ = Mock(return_value=client)
    client.__exit__ = Mock(return_value=False)
    client.get_server_licensing_data.side_effect = TransportError("GET x returned 401", status_code=401)

    with patch("teamcity_client.main.TeamCityClient.from_config", return_value=client):
        exit_code = main(["--url", "https://ci.example.com", "licensing"])

    assert exit_code == 1
    assert "401" in capsys.readouterr().err


def test_main_returns_2_without_url(capsys):
    """Verify missing configuration exits with code 2 before any request."""
    with patch("teamcity_client.main.TeamCityClient") as client_cls:
        exit_code = main(["projects"])

    assert exit_code == 2
    client_cls.from_config.assert_not_called()
    assert "TEAMCITY_URL" in capsys.readouterr().err

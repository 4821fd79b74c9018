"""Shared fixtures and fake HTTP responses for client tests."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from teamcity_client.auth import CredentialsAuthorizer
from teamcity_client.client import TeamCityClient

BASE_URL = "https://ci.example.com"
GUEST_ROOT = BASE_URL + "/guestAuth/app/rest"
AUTH_ROOT = BASE_URL + "/httpAuth/app/rest"


def make_response(status_code: int = 200, payload=None, text: str = "", json_error: bool = False):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = {}
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def guest_client() -> TeamCityClient:
    return TeamCityClient(BASE_URL)


@pytest.fixture
def auth_client() -> TeamCityClient:
    return TeamCityClient(BASE_URL, authorizer=CredentialsAuthorizer("admin", "s3cret"))

"""Shared fixtures for the metrohero tests."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import requests

DATA_DIR = Path(__file__).parent / "data"
BASE_URL = "https://api.test/v1"


def get_test_data(filename: str):
    """Load a JSON fixture from tests/data."""
    with open(DATA_DIR / filename, "r", encoding="utf-8") as f:
        return json.load(f)


def make_response(status: int = 200, payload=None, invalid_json: bool = False) -> MagicMock:
    """Build a fake requests.Response with the given status and JSON body."""
    response = MagicMock()
    response.status_code = status
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = payload
    return response


def make_session(routes=None, error: Exception = None) -> MagicMock:
    """
    Build a fake requests.Session.

    Args:
        routes: {path: response} where path is relative to BASE_URL.
            Unknown paths answer with HTTP 404.
        error: If set, every request raises this exception instead.
    """
    routes = routes or {}
    session = MagicMock(spec=requests.Session)
    session.headers = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        if error is not None:
            raise error
        path = url.split("/v1", 1)[1]
        return routes.get(path, make_response(404))

    session.get.side_effect = fake_get
    return session


def default_routes() -> dict:
    """Routes for a working API with the bundled fixtures."""
    return {
        "/metrorail/stations/C05/trains": make_response(
            200, get_test_data("station_train_predictions.json")
        ),
        "/metrorail/stations/C05/tags": make_response(200, get_test_data("station_tags.json")),
        "/metrorail/trips/K03/C02": make_response(200, get_test_data("tripinfo.json")),
    }

import importlib
import logging
import sys

import pytest


@pytest.fixture
def app_module(monkeypatch):
    monkeypatch.setenv("API_KEY", "secret")
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    sys.modules.pop("app", None)

    module = importlib.import_module("app")
    yield module

    root.handlers = handlers
    root.setLevel(level)
    sys.modules.pop("app", None)


def test_requests_without_api_key_are_rejected(app_module):
    client = app_module.app.test_client()

    assert client.get("/").status_code == 403
    assert client.post("/esri2geojson", json={"x": 1, "y": 2}).status_code == 403


def test_requests_with_api_key_are_served(app_module):
    client = app_module.app.test_client()

    assert client.get("/?api_key=secret").status_code == 200

    response = client.post("/esri2geojson?api_key=secret", json={"x": 1, "y": 2})
    assert response.status_code == 200
    assert response.get_json() == {"type": "Point", "coordinates": [1, 2]}


def test_missing_api_key_exits(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    sys.modules.pop("app", None)

    try:
        with pytest.raises(SystemExit):
            importlib.import_module("app")
    finally:
        root.handlers = handlers
        root.setLevel(level)
        sys.modules.pop("app", None)

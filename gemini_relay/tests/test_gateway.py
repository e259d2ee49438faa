import logging

import pytest

from gemini_relay.gateway.server import configure_logging


@pytest.mark.parametrize("path", ["/analyze", "/", "/ping", "/does-not-exist"])
def test_options_preflight(client, path):
    response = client.options(path)
    assert response.status_code == 204
    assert response.data == b""
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"


def test_browser_preflight(client):
    response = client.options("/analyze", headers={
        "Origin": "http://localhost:5500",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Content-Type",
    })
    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_json_responses_allow_any_origin(client):
    response = client.get("/ping", headers={"Origin": "http://example.com"})
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_unknown_path(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}


@pytest.mark.parametrize("method, path", [
    ("get", "/analyze"),
    ("post", "/ping"),
    ("delete", "/"),
])
def test_unsupported_method_is_not_found(client, method, path):
    response = getattr(client, method)(path)
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}


def test_missing_credential_logs_warning(caplog):
    from gemini_relay.config import RelayConfig
    from gemini_relay.gateway.server import create_app

    with caplog.at_level("WARNING"):
        create_app(RelayConfig(gemini_api_key=None))
    assert "GEMINI_API_KEY" in caplog.text


def test_error_responses_allow_any_origin(client):
    response = client.post("/analyze", json={}, headers={"Origin": "http://example.com"})
    assert response.status_code == 400
    assert response.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.parametrize("level, expected", [
    ("debug", logging.DEBUG),
    ("WARNING", logging.WARNING),
    ("BASIC_FORMAT", logging.INFO),
    ("nonsense", logging.INFO),
])
def test_configure_logging_level(mocker, level, expected):
    mock_basic_config = mocker.patch("gemini_relay.gateway.server.logging.basicConfig")

    configure_logging(level)

    _, kwargs = mock_basic_config.call_args
    assert kwargs["level"] == expected

import pytest
from unittest.mock import MagicMock

from gemini_relay.config import RelayConfig
from gemini_relay.gateway.server import create_app

TEST_CONFIG = RelayConfig(
    gemini_api_key="test_key",
    gemini_model="test-model",
    gemini_api_base="http://upstream.test/v1beta",
)


@pytest.fixture
def config():
    return TEST_CONFIG


@pytest.fixture
def app(config):
    app = create_app(config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_upstream(mocker):
    """
    Stubs the single outbound call. Returns the patched requests.post.
    """
    mock_post = mocker.patch("gemini_relay.relay_service.gemini_client.requests.post")

    def respond(status_code=200, json_body=None, text=""):
        mock_resp = MagicMock()
        mock_resp.status_code = status_code
        mock_resp.ok = 200 <= status_code < 300
        mock_resp.text = text
        mock_resp.json.return_value = json_body
        mock_post.return_value = mock_resp
        return mock_resp

    mock_post.respond = respond
    return mock_post

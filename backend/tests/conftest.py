import base64

import pytest
from unittest.mock import MagicMock

from backend.gateway.server import create_app


@pytest.fixture
def app():
    app = create_app()
    app.config["TESTING"] = True
    return app

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def image_base64():
    return base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg-bytes").decode("ascii")

@pytest.fixture
def mock_gemini(mocker):
    """
    Replaces the module-level Gemini client used by the relay.
    """
    mock_client = MagicMock()
    mock_response = MagicMock()
    mock_response.text = "# Reflection Subject: The Quiet Hour"
    mock_client.models.generate_content.return_value = mock_response
    mocker.patch("backend.relay_service.routes.client", mock_client)
    return mock_client

import base64

import pytest
import requests
from unittest.mock import MagicMock

from backend.client.form import (
    VibeForm,
    ValidationError,
    data_url_payload,
    file_to_base64,
    file_to_data_url,
    MISSING_INPUT_MESSAGE,
    SERVER_ERROR_FALLBACK,
    UNEXPECTED_ERROR_FALLBACK,
)


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg-bytes")
    return str(path)

@pytest.fixture
def session():
    session = MagicMock()
    response = MagicMock()
    response.ok = True
    response.json.return_value = {"output": "# Report"}
    session.post.return_value = response
    return session


def test_data_url_payload_splits_on_first_comma():
    assert data_url_payload("data:image/png;base64,abc,def") == "abc,def"
    assert data_url_payload("no-comma") == ""

def test_file_to_data_url(image_file):
    data_url = file_to_data_url(image_file)
    assert data_url.startswith("data:image/jpeg;base64,")
    assert base64.b64decode(data_url.split(",", 1)[1]) == b"\xff\xd8\xff\xe0fake-jpeg-bytes"

def test_submit_without_file_makes_no_request(session):
    form = VibeForm("http://localhost:5050", session=session)

    assert form.submit(None, "Nostalgia") is None
    assert form.error == MISSING_INPUT_MESSAGE
    assert form.loading is False
    session.post.assert_not_called()

def test_submit_without_keyword_makes_no_request(session, image_file):
    form = VibeForm("http://localhost:5050", session=session)

    form.submit(image_file, "")
    assert form.error == MISSING_INPUT_MESSAGE
    session.post.assert_not_called()

def test_validate_raises():
    form = VibeForm("http://localhost:5050", session=MagicMock())
    with pytest.raises(ValidationError):
        form.validate("", "Nostalgia")

def test_submit_sends_data_url_payload(session, image_file):
    form = VibeForm("http://localhost:5050/", session=session)

    result = form.submit(image_file, "Nostalgia")
    assert result == "# Report"
    assert form.result == "# Report"
    assert form.error is None
    assert form.loading is False

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args[0] == "http://localhost:5050/api/relay"
    expected = file_to_data_url(image_file).split(",", 1)[1]
    assert kwargs["json"] == {"imageBase64": expected, "vibeKeyword": "Nostalgia"}
    assert file_to_base64(image_file) == expected

def test_submit_surfaces_server_message(session, image_file):
    session.post.return_value.ok = False
    session.post.return_value.json.return_value = {"message": "AI Generation Failed: boom."}
    form = VibeForm("http://localhost:5050", session=session)

    assert form.submit(image_file, "Nostalgia") is None
    assert form.error == "AI Generation Failed: boom."
    assert form.result == ""

def test_submit_server_error_fallback(session, image_file):
    session.post.return_value.ok = False
    session.post.return_value.json.side_effect = ValueError("no json")
    form = VibeForm("http://localhost:5050", session=session)

    form.submit(image_file, "Nostalgia")
    assert form.error == SERVER_ERROR_FALLBACK

def test_submit_transport_failure(session, image_file):
    session.post.side_effect = requests.ConnectionError("connection refused")
    form = VibeForm("http://localhost:5050", session=session)

    form.submit(image_file, "Nostalgia")
    assert form.error == "connection refused"
    assert form.loading is False

def test_submit_missing_file_on_disk(session, tmp_path):
    form = VibeForm("http://localhost:5050", session=session)

    form.submit(str(tmp_path / "missing.jpg"), "Nostalgia")
    assert form.error
    session.post.assert_not_called()

def test_submit_success_without_json_body(session, image_file):
    session.post.return_value.json.side_effect = ValueError("no json")
    form = VibeForm("http://localhost:5050", session=session)

    assert form.submit(image_file, "Nostalgia") is None
    assert form.error == UNEXPECTED_ERROR_FALLBACK
    assert form.result == ""

@pytest.mark.parametrize("body", [["x"], "abc", 5, {}])
def test_submit_success_with_unexpected_body(session, image_file, body):
    session.post.return_value.json.return_value = body
    form = VibeForm("http://localhost:5050", session=session)

    assert form.submit(image_file, "Nostalgia") is None
    assert form.error == UNEXPECTED_ERROR_FALLBACK

def test_submit_error_with_non_object_body(session, image_file):
    session.post.return_value.ok = False
    session.post.return_value.json.return_value = ["x"]
    form = VibeForm("http://localhost:5050", session=session)

    form.submit(image_file, "Nostalgia")
    assert form.error == SERVER_ERROR_FALLBACK

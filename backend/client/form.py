"""
Python rendition of the Visual Storyteller form.
Reads an image, sends it with a vibe keyword to the relay, and keeps the
same three pieces of state the browser form does: loading, error, result.

Usage:
    form = VibeForm("http://localhost:5050")
    form.submit("photo.jpg", "Nostalgia")
    print(form.error or form.result)
"""

import base64
import logging
import mimetypes
from typing import Optional

import requests

RELAY_PATH = "/api/relay"

MISSING_INPUT_MESSAGE = "Please upload an image and enter a Vibe Keyword!"
SERVER_ERROR_FALLBACK = "Server error. Check server logs."
UNEXPECTED_ERROR_FALLBACK = "An unexpected error occurred during Vibe Check."


class ValidationError(Exception):
    """Raised when the form is submitted without an image or keyword."""


class RelayError(Exception):
    """Raised when the relay answers with a non-2xx status or an unreadable body."""


def file_to_data_url(image_path: str) -> str:
    """
    Read a file into a data URL, e.g. 'data:image/jpeg;base64,/9j/4AAQ...'.
    """
    mime_type = mimetypes.guess_type(image_path)[0] or "application/octet-stream"
    with open(image_path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def data_url_payload(data_url: str) -> str:
    """
    Return the portion of a data URL after the first comma.
    """
    return data_url.split(",", 1)[1] if "," in data_url else ""


def file_to_base64(image_path: str) -> str:
    return data_url_payload(file_to_data_url(image_path))


class VibeForm:
    """
    Client-side form state and submission.

    Args:
        base_url (str): Gateway root, e.g. 'http://localhost:5050'.
        session (requests.Session, optional): Session used for the POST.
    """

    def __init__(self, base_url: str, session: Optional[requests.Session] = None) -> None:
        self.relay_url = base_url.rstrip("/") + RELAY_PATH
        self.session = session or requests.Session()
        self.loading: bool = False
        self.error: Optional[str] = None
        self.result: str = ""

    def validate(self, image_path: Optional[str], vibe_keyword: Optional[str]) -> None:
        if not image_path or not vibe_keyword:
            raise ValidationError(MISSING_INPUT_MESSAGE)

    def send(self, image_base64: str, vibe_keyword: str) -> str:
        """
        POST the payload to the relay once and return its 'output' text.

        Raises:
            RelayError: On a non-2xx response, carrying the server's message or a fallback,
                or on a 2xx response without a JSON object holding 'output'.
            requests.RequestException: On transport failure.
        """
        response = self.session.post(
            self.relay_url,
            json={"imageBase64": image_base64, "vibeKeyword": vibe_keyword},
        )
        try:
            data = response.json()
        except ValueError:
            raise RelayError(SERVER_ERROR_FALLBACK if not response.ok else UNEXPECTED_ERROR_FALLBACK)

        if not isinstance(data, dict):
            data = {}

        if not response.ok:
            raise RelayError(data.get("message") or SERVER_ERROR_FALLBACK)

        if "output" not in data:
            raise RelayError(UNEXPECTED_ERROR_FALLBACK)

        return data["output"]

    def submit(self, image_path: Optional[str], vibe_keyword: Optional[str]) -> Optional[str]:
        """
        Validate, encode and send. Failures end up in `self.error`, never raised.

        Returns:
            str: The Markdown report, or None when the submission failed.
        """
        self.loading = True
        self.error = None
        self.result = ""

        try:
            self.validate(image_path, vibe_keyword)
            image_base64 = file_to_base64(image_path)
            self.result = self.send(image_base64, vibe_keyword)
            return self.result
        except (ValidationError, RelayError) as e:
            self.error = str(e)
        except (requests.RequestException, OSError) as e:
            logging.error(f"Vibe Check request failed: {e}")
            self.error = str(e) or UNEXPECTED_ERROR_FALLBACK
        finally:
            self.loading = False

        return None

import base64
import json
import os
import tempfile
from io import BytesIO

import pytest
import requests
from PIL import Image

# Keep test runs out of ~/.imagemage/logs; must be set before logging initializes
os.environ.setdefault("IMAGEMAGE_LOG_DIR", tempfile.mkdtemp(prefix="imagemage-test-logs-"))

from imagemage.config import API_KEY_ENV_VARS  # noqa: E402
from imagemage.logging_utils import setup_logging  # noqa: E402

setup_logging(debug=False)

TEST_API_KEY = "test-key-123"


def make_png_bytes(size=(8, 8), color=(200, 40, 40, 255), fmt="PNG") -> bytes:
    mode = "RGB" if fmt == "JPEG" else "RGBA"
    if mode == "RGB":
        color = color[:3]
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_png_b64(size=(8, 8), color=(200, 40, 40, 255)) -> str:
    return base64.b64encode(make_png_bytes(size, color)).decode("utf-8")


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload if payload is not None else {})
        self.text = text

    def json(self):
        return json.loads(self.text)


def image_response(image_b64: str, status_code: int = 200) -> FakeResponse:
    return FakeResponse(status_code, {
        "candidates": [{
            "content": {"role": "model", "parts": [
                {"text": "Here is your image."},
                {"inlineData": {"mimeType": "image/png", "data": image_b64}},
            ]}
        }]
    })


def error_response(status_code: int, message: str, status: str = "ERROR") -> FakeResponse:
    return FakeResponse(status_code, {
        "error": {"code": status_code, "message": message, "status": status}
    })


class FakePost:
    """Stand-in for requests.post that replays queued responses and records calls."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if not self.responses:
            raise AssertionError("unexpected request: no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def payloads(self):
        return [call["json"] for call in self.calls]


@pytest.fixture
def clean_env(monkeypatch):
    for name in API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    return monkeypatch


@pytest.fixture
def api_key(clean_env):
    clean_env.setenv("GEMINI_API_KEY", TEST_API_KEY)
    return TEST_API_KEY


@pytest.fixture
def fake_post(monkeypatch):
    fake = FakePost()
    monkeypatch.setattr(requests, "post", fake)
    return fake


@pytest.fixture
def png_b64():
    return make_png_b64()

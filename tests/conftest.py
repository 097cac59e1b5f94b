"""
Shared pytest fixtures.

Gemini is never called for real: `fake_gemini` plugs an httpx.MockTransport
into GeminiClient, records every outbound request and answers with whatever
the test queued. The `client` fixture is a TestClient over a fresh app with
the settings / client dependencies overridden, so no env vars are needed.
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from shopsnap.api.routes_identify import get_gemini_client
from shopsnap.core.config import Settings, get_settings
from shopsnap.core.gemini import GeminiClient, UploadedImage
from shopsnap.main import create_app

TEST_KEY = "test-key-123"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def gemini_envelope(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class FakeGemini:
    """Stands in for generativelanguage.googleapis.com."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._status = 200
        self._body: Any = gemini_envelope("")
        self._error: Optional[Exception] = None

    def reply_text(self, text: str) -> None:
        self.reply_json(gemini_envelope(text))

    def reply_json(self, body: Any, status: int = 200) -> None:
        self._status, self._body = status, body

    def reply_raw(self, body: str, status: int) -> None:
        self._status, self._body = status, body

    def fail_with(self, error: Exception) -> None:
        self._error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if isinstance(self._body, str):
            return httpx.Response(self._status, text=self._body)
        return httpx.Response(self._status, json=self._body)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)

    def client(self, api_key: str = TEST_KEY) -> GeminiClient:
        return GeminiClient(api_key, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, GEMINI_API_KEY=TEST_KEY, GEMINI_MODEL="")


@pytest.fixture
def png_image() -> UploadedImage:
    return UploadedImage(data=PNG_BYTES, mime_type="image/png")


@pytest.fixture
def client(fake_gemini, test_settings):
    app = create_app(test_settings)
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_gemini_client] = lambda: fake_gemini.client(test_settings.GEMINI_API_KEY)
    with TestClient(app) as c:
        yield c

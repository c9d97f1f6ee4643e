"""Tests for dreambig.core.google_clients — token, vision, and Imagen clients.

HTTP calls go through ``httpx.MockTransport``; google-auth credential
loading is replaced with ``monkeypatch`` so no network access occurs.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from dreambig.core import google_clients
from dreambig.core.config import DreamBigConfig
from dreambig.core.errors import UpstreamError
from dreambig.core.google_clients import (
    GeminiVisionClient,
    GeneratedImage,
    GoogleTokenProvider,
    ImagenClient,
    describe_imagen_status,
)
from dreambig.core.prompt_composer import AgeBracket, PosterSelection
from dreambig.core.security import PhotoPayload

PHOTO = PhotoPayload(subtype="png", data="AAAA")
SELECTION = PosterSelection.from_values("doctor", "merlion-park", "saving the day")
PAYLOAD = {"instances": [{"prompt": "p"}], "parameters": {"sampleCount": 1}}


def _http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGeneratedImage:
    def test_data_url(self):
        assert GeneratedImage("BBBB").data_url == "data:image/png;base64,BBBB"
        assert GeneratedImage("CCCC", "image/jpeg").data_url == "data:image/jpeg;base64,CCCC"


class TestImagenClient:
    """``:predict`` calls and response unwrapping."""

    def test_success(self, test_config: DreamBigConfig, fake_google):
        client = ImagenClient(_http(fake_google), test_config)
        image = asyncio.run(client.predict("imagen-4.0-ultra-generate-001", PAYLOAD, "tok"))
        assert image == GeneratedImage("BBBB", "image/png")

    def test_request_shape(self, test_config: DreamBigConfig, fake_google):
        client = ImagenClient(_http(fake_google), test_config)
        asyncio.run(client.predict("imagen-3.0-capability-001", PAYLOAD, "tok"))
        request = fake_google.requests[0]
        assert request.method == "POST"
        assert str(request.url) == test_config.imagen_endpoint("imagen-3.0-capability-001")
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == PAYLOAD

    def test_mime_type_defaults_to_png(self, test_config, fake_google):
        fake_google.imagen = (200, {"predictions": [{"bytesBase64Encoded": "BBBB"}]})
        client = ImagenClient(_http(fake_google), test_config)
        image = asyncio.run(client.predict("m", PAYLOAD, "tok"))
        assert image.mime_type == "image/png"

    @pytest.mark.parametrize(
        "status, fragment",
        [
            (400, "Bad request"),
            (401, "Authentication error"),
            (403, "Permission denied"),
            (429, "Rate limit exceeded"),
            (500, "server error"),
            (503, "server error"),
            (418, "Imagen API error: 418"),
        ],
    )
    def test_http_errors(self, test_config, fake_google, status, fragment):
        fake_google.imagen = (status, {"error": {"message": "nope"}})
        client = ImagenClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match=fragment) as exc_info:
            asyncio.run(client.predict("m", PAYLOAD, "tok"))
        assert exc_info.value.status_code == status

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"predictions": []},
            {"predictions": [{"mimeType": "image/png"}]},
            {"predictions": "BBBB"},
            ["BBBB"],
        ],
    )
    def test_malformed_response(self, test_config, fake_google, body):
        fake_google.imagen = (200, body)
        client = ImagenClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match="Invalid response format"):
            asyncio.run(client.predict("m", PAYLOAD, "tok"))

    def test_network_error(self, test_config, fake_google):
        fake_google.imagen_error = httpx.ConnectError("connection refused")
        client = ImagenClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match="Unable to reach Imagen API"):
            asyncio.run(client.predict("m", PAYLOAD, "tok"))

    def test_non_json_body(self, test_config):
        client = ImagenClient(_http(lambda request: httpx.Response(200, text="<html>")), test_config)
        with pytest.raises(UpstreamError, match="Invalid response format"):
            asyncio.run(client.predict("m", PAYLOAD, "tok"))

    def test_describe_status_success_range_falls_through(self):
        assert describe_imagen_status(302) == "Imagen API error: 302"


class TestGeminiVisionClient:
    """Vision sub-call requests and reply handling."""

    def test_success(self, test_config, fake_google):
        client = GeminiVisionClient(_http(fake_google), test_config)
        result = asyncio.run(client.describe_subject(PHOTO, SELECTION))
        assert result.text.startswith("A cheerful child")
        assert result.age_bracket is AgeBracket.CHILD

    def test_request_shape(self, test_config, fake_google):
        client = GeminiVisionClient(_http(fake_google), test_config)
        asyncio.run(client.describe_subject(PHOTO, SELECTION))
        request = fake_google.requests[0]
        assert request.url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
        assert request.headers["x-goog-api-key"] == "test-gemini-key"
        parts = json.loads(request.content)["contents"][0]["parts"]
        assert parts[1] == {"inlineData": {"mimeType": "image/png", "data": "AAAA"}}
        assert "Merlion Park" in parts[0]["text"]

    def test_prose_reply(self, test_config, fake_google):
        fake_google.set_vision_reply("A teenager with a ponytail.")
        client = GeminiVisionClient(_http(fake_google), test_config)
        result = asyncio.run(client.describe_subject(PHOTO, SELECTION))
        assert result.age_bracket is AgeBracket.TEEN

    def test_http_error(self, test_config, fake_google):
        fake_google.vision = (403, {"error": "forbidden"})
        client = GeminiVisionClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match="403"):
            asyncio.run(client.describe_subject(PHOTO, SELECTION))

    def test_empty_candidates(self, test_config, fake_google):
        fake_google.vision = (200, {"candidates": []})
        client = GeminiVisionClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match="no description"):
            asyncio.run(client.describe_subject(PHOTO, SELECTION))

    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": ["oops"]},
            {"candidates": {"a": 1}},
            {"candidates": [{"content": ["parts"]}]},
            {"candidates": [{"content": {"parts": "text"}}]},
        ],
    )
    def test_malformed_candidates(self, test_config, fake_google, body):
        fake_google.vision = (200, body)
        client = GeminiVisionClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match="no description"):
            asyncio.run(client.describe_subject(PHOTO, SELECTION))

    def test_network_error(self, test_config, fake_google):
        fake_google.vision_error = httpx.ReadTimeout("timed out")
        client = GeminiVisionClient(_http(fake_google), test_config)
        with pytest.raises(UpstreamError, match="Network error"):
            asyncio.run(client.describe_subject(PHOTO, SELECTION))


class FakeCredentials:
    def __init__(self) -> None:
        self.token: str | None = None
        self.refreshes = 0

    @property
    def valid(self) -> bool:
        return self.token is not None

    def refresh(self, request) -> None:
        self.refreshes += 1
        self.token = f"token-{self.refreshes}"


class TestGoogleTokenProvider:
    """Credential loading and token caching."""

    def test_inline_service_account(self, monkeypatch, test_config):
        credentials = FakeCredentials()
        captured = {}

        def fake_from_info(info, scopes):
            captured["info"] = info
            captured["scopes"] = scopes
            return credentials

        monkeypatch.setattr(
            google_clients.service_account.Credentials,
            "from_service_account_info",
            fake_from_info,
        )
        provider = GoogleTokenProvider(test_config)
        assert asyncio.run(provider.get_token()) == "token-1"
        assert asyncio.run(provider.get_token()) == "token-1"
        assert credentials.refreshes == 1
        assert captured["info"] == {"type": "service_account"}
        assert captured["scopes"] == ["https://www.googleapis.com/auth/cloud-platform"]

    def test_application_default_credentials(self, monkeypatch):
        cfg = DreamBigConfig(
            google_project_id="p", google_application_credentials="/keys/sa.json", _env_file=None
        )
        credentials = FakeCredentials()
        monkeypatch.setattr(
            google_clients.google.auth, "default", lambda scopes: (credentials, "p")
        )
        assert asyncio.run(GoogleTokenProvider(cfg).get_token()) == "token-1"

    def test_invalid_inline_json(self):
        cfg = DreamBigConfig(
            google_project_id="p", google_vertex_credentials_json="{not json", _env_file=None
        )
        with pytest.raises(UpstreamError, match="Google Cloud authentication failed"):
            asyncio.run(GoogleTokenProvider(cfg).get_token())

    def test_refresh_failure_resets_cache(self, monkeypatch, test_config):
        class BrokenCredentials(FakeCredentials):
            def refresh(self, request) -> None:
                raise RuntimeError("invalid_grant")

        monkeypatch.setattr(
            google_clients.service_account.Credentials,
            "from_service_account_info",
            lambda info, scopes: BrokenCredentials(),
        )
        provider = GoogleTokenProvider(test_config)
        with pytest.raises(UpstreamError, match="invalid_grant"):
            asyncio.run(provider.get_token())
        assert provider._credentials is None

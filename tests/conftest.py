"""Shared pytest fixtures for Dream Big SG tests."""

from __future__ import annotations

import json
from collections.abc import Generator
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from dreambig.api.main import create_app
from dreambig.api.orchestrator import GenerationOrchestrator
from dreambig.core.config import DreamBigConfig
from dreambig.core.errors import UpstreamError
from dreambig.core.google_clients import GeminiVisionClient, ImagenClient
from dreambig.core.security import InMemoryRateLimiter

FIXED_NOW = datetime(2025, 8, 9, 10, 30, tzinfo=timezone.utc)

VISION_DESCRIPTION = (
    "A cheerful child with short black hair, round face, and a wide smile, "
    "wearing a blue school shirt."
)


class StaticTokenProvider:
    """Token provider stand-in that never touches google-auth."""

    def __init__(self, token: str = "test-token", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.calls = 0

    async def get_token(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.token


class FakeGoogleApis:
    """``httpx.MockTransport`` handler emulating Gemini and Vertex AI Imagen.

    Responses are configured as ``(status, json_body)`` tuples and rebuilt
    for every request.  Set ``*_error`` to make the transport raise instead.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.imagen: tuple[int, object] = (
            200,
            {"predictions": [{"bytesBase64Encoded": "BBBB", "mimeType": "image/png"}]},
        )
        self.vision: tuple[int, object] = (
            200,
            vision_body({"description": VISION_DESCRIPTION, "age_bracket": "child"}),
        )
        self.imagen_error: Exception | None = None
        self.vision_error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "generativelanguage.googleapis.com":
            if self.vision_error is not None:
                raise self.vision_error
            status, body = self.vision
        else:
            if self.imagen_error is not None:
                raise self.imagen_error
            status, body = self.imagen
        return httpx.Response(status, json=body)

    def set_vision_reply(self, reply: dict | str) -> None:
        self.vision = (200, vision_body(reply))

    def requests_to(self, host_fragment: str) -> list[httpx.Request]:
        return [r for r in self.requests if host_fragment in r.url.host]

    def imagen_payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests_to("aiplatform")]


def vision_body(reply: dict | str) -> dict:
    """Wrap a vision reply in the Gemini ``generateContent`` response shape."""
    text = reply if isinstance(reply, str) else json.dumps(reply)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any deployment settings from the environment.

    Every configuration field maps to an unprefixed variable name, so a
    developer shell with ``GOOGLE_PROJECT_ID`` set would otherwise leak
    into the tests.
    """
    for name in DreamBigConfig.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)


@pytest.fixture
def test_config() -> DreamBigConfig:
    """Create a complete configuration that never reads ``.env``.

    Returns:
        DreamBigConfig with a project id, inline credentials, and a vision key
    """
    return DreamBigConfig(
        google_project_id="test-project",
        google_location="us-central1",
        google_vertex_credentials_json=json.dumps({"type": "service_account"}),
        gemini_api_key="test-gemini-key",
        _env_file=None,
    )


@pytest.fixture
def fake_google() -> FakeGoogleApis:
    return FakeGoogleApis()


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    return StaticTokenProvider()


@pytest.fixture
def make_orchestrator(fake_google: FakeGoogleApis, token_provider: StaticTokenProvider):
    """Factory building an orchestrator around the fake Google APIs.

    Args:
        fake_google: Transport handler shared with the test
        token_provider: Static bearer token source

    Returns:
        Callable taking a config (and optional rate limiter) and returning
        a :class:`GenerationOrchestrator`
    """

    def _make(config: DreamBigConfig, rate_limiter: InMemoryRateLimiter | None = None):
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_google))
        return GenerationOrchestrator(
            config=config,
            rate_limiter=rate_limiter or InMemoryRateLimiter.from_config(config),
            token_provider=token_provider,
            vision_client=GeminiVisionClient(http, config),
            imagen_client=ImagenClient(http, config),
            now=lambda: FIXED_NOW,
        )

    return _make


@pytest.fixture
def make_client(make_orchestrator) -> Generator:
    """Factory building a ``TestClient`` for a given configuration."""
    clients: list[TestClient] = []

    def _make(config: DreamBigConfig, rate_limiter: InMemoryRateLimiter | None = None) -> TestClient:
        app = create_app(config, orchestrator=make_orchestrator(config, rate_limiter))
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def test_client(make_client, test_config: DreamBigConfig) -> TestClient:
    """TestClient for an app wired to the fake Google APIs."""
    return make_client(test_config)


@pytest.fixture
def upstream_failure() -> UpstreamError:
    return UpstreamError("Imagen API server error. Please try again later.", status_code=500)

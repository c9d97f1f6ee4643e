"""Clients for the Google services the poster route depends on.

Three collaborators are wrapped here, each raising :class:`UpstreamError`
on any failure so the orchestrator has a single failure path:

- :class:`GoogleTokenProvider`: OAuth bearer tokens for Vertex AI, from an
  inline service-account key or Application Default Credentials
- :class:`GeminiVisionClient`: describes the photographed subject
- :class:`ImagenClient`: calls an Imagen model's ``:predict`` endpoint

The HTTP clients share one ``httpx.AsyncClient`` owned by the application
lifespan.  Tests pass a client built on ``httpx.MockTransport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import google.auth
import httpx
from fastapi.concurrency import run_in_threadpool
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from dreambig.core.config import CLOUD_PLATFORM_SCOPE, DreamBigConfig
from dreambig.core.errors import UpstreamError
from dreambig.core.prompt_composer import (
    PosterSelection,
    SubjectDescription,
    compose_vision_instruction,
    parse_vision_reply,
)
from dreambig.core.security import PhotoPayload

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_IMAGE_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class GeneratedImage:
    """An image returned by Imagen.

    Attributes:
        data: Base64-encoded image bytes.
        mime_type: Declared MIME type, ``image/png`` when Imagen omits it.
    """

    data: str
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


# ---------------------------------------------------------------------------
# Access tokens.
# ---------------------------------------------------------------------------


class GoogleTokenProvider:
    """Supplies bearer tokens for Vertex AI calls.

    The credentials object is created on first use and refreshed whenever the
    cached token is missing or expired.  google-auth refreshes synchronously,
    so the refresh runs in the thread pool.
    """

    def __init__(self, config: DreamBigConfig) -> None:
        self.config = config
        self._credentials: Any = None

    def _load_credentials(self) -> Any:
        info = self.config.service_account_info()
        if info is not None:
            logger.debug("Using inline service-account credentials")
            return service_account.Credentials.from_service_account_info(
                info, scopes=[CLOUD_PLATFORM_SCOPE]
            )
        logger.debug("Using Application Default Credentials")
        credentials, _project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
        return credentials

    def _fetch_token(self) -> str:
        if self._credentials is None:
            self._credentials = self._load_credentials()
        if not self._credentials.valid:
            self._credentials.refresh(GoogleAuthRequest())
        return self._credentials.token

    async def get_token(self) -> str:
        """Return a valid access token.

        Raises:
            UpstreamError: If credentials cannot be loaded or refreshed.
        """
        try:
            token = await run_in_threadpool(self._fetch_token)
        except Exception as exc:
            self._credentials = None
            raise UpstreamError(f"Google Cloud authentication failed: {exc}") from exc
        if not token:
            raise UpstreamError("Google Cloud authentication returned no access token")
        return token


# ---------------------------------------------------------------------------
# Gemini vision.
# ---------------------------------------------------------------------------


def _first_candidate_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    for part in parts:
        if isinstance(part, dict) and part.get("text"):
            return str(part["text"]).strip()
    return ""


class GeminiVisionClient:
    """Describes the person in the uploaded photo with a Gemini model."""

    def __init__(self, http: httpx.AsyncClient, config: DreamBigConfig) -> None:
        self._http = http
        self.config = config

    def endpoint(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.config.gemini_vision_model}:generateContent"

    def build_request(self, photo: PhotoPayload, selection: PosterSelection) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": compose_vision_instruction(selection)},
                        {"inlineData": {"mimeType": photo.mime_type, "data": photo.data}},
                    ],
                }
            ],
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
            },
        }

    async def describe_subject(
        self, photo: PhotoPayload, selection: PosterSelection
    ) -> SubjectDescription:
        """Ask Gemini to describe the subject and estimate their age bracket.

        Raises:
            UpstreamError: On network errors, non-2xx replies, or empty output.
        """
        try:
            response = await self._http.post(
                self.endpoint(),
                headers={"x-goog-api-key": self.config.gemini_api_key or ""},
                json=self.build_request(photo, selection),
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error calling Gemini vision: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(
                f"Gemini vision error: {response.status_code}", status_code=response.status_code
            )

        try:
            text = _first_candidate_text(response.json())
        except ValueError as exc:
            raise UpstreamError("Gemini vision returned invalid JSON") from exc
        if not text:
            raise UpstreamError("Gemini vision returned no description")

        description = parse_vision_reply(text)
        logger.info(
            f"Vision description ready ({len(description.text)} chars, "
            f"age bracket {description.age_bracket.value})"
        )
        return description


# ---------------------------------------------------------------------------
# Imagen.
# ---------------------------------------------------------------------------


def describe_imagen_status(status_code: int) -> str:
    """Map an Imagen HTTP status to a human-readable failure message."""
    if status_code == 400:
        return "Bad request to Imagen API. The prompt or parameters may be invalid."
    if status_code == 401:
        return "Authentication error with Imagen API. Please check credentials."
    if status_code == 403:
        return "Permission denied by Imagen API. Check your quota and permissions."
    if status_code == 429:
        return "Rate limit exceeded. Please try again in a few moments."
    if status_code >= 500:
        return "Imagen API server error. Please try again later."
    return f"Imagen API error: {status_code}"


class ImagenClient:
    """Calls an Imagen model through the Vertex AI ``:predict`` endpoint."""

    def __init__(self, http: httpx.AsyncClient, config: DreamBigConfig) -> None:
        self._http = http
        self.config = config

    async def predict(self, model_id: str, payload: dict[str, Any], token: str) -> GeneratedImage:
        """Send *payload* to *model_id* and unwrap the first prediction.

        Raises:
            UpstreamError: On network errors, non-2xx replies, or a reply
                without ``predictions[0].bytesBase64Encoded``.
        """
        endpoint = self.config.imagen_endpoint(model_id)
        try:
            response = await self._http.post(
                endpoint,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
        except httpx.HTTPError as exc:
            logger.error(f"Network error calling Imagen model {model_id}: {exc}")
            raise UpstreamError("Network error: Unable to reach Imagen API. Please try again.") from exc

        if not response.is_success:
            logger.error(
                f"Imagen API HTTP error {response.status_code}: {response.text[:500]}"
            )
            raise UpstreamError(
                describe_imagen_status(response.status_code), status_code=response.status_code
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise UpstreamError("Invalid response format from Imagen API") from exc

        predictions = result.get("predictions") if isinstance(result, dict) else None
        first = predictions[0] if isinstance(predictions, list) and predictions else None
        if not isinstance(first, dict) or not first.get("bytesBase64Encoded"):
            raise UpstreamError("Invalid response format from Imagen API")

        return GeneratedImage(
            data=first["bytesBase64Encoded"],
            mime_type=first.get("mimeType") or DEFAULT_IMAGE_MIME_TYPE,
        )

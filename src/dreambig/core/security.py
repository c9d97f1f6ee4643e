"""Input hardening and request admission for the poster route.

This module groups the checks that run before any upstream call:

- :func:`validate_environment`: required configuration is present
- :class:`InMemoryRateLimiter`: per-client rolling-window admission
- :func:`sanitize_text`: strip markup and script vectors from free text
- :func:`parse_data_url`: decode the selfie data URI
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from dreambig.core.config import DreamBigConfig
from dreambig.core.errors import InvalidPhotoError

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 1000

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)

_DATA_URL = re.compile(r"^data:image/(\w+);base64,(.+)$")


# ---------------------------------------------------------------------------
# Text sanitization.
# ---------------------------------------------------------------------------


def sanitize_text(value: str) -> str:
    """Remove markup and script vectors from user text.

    Angle brackets, ``javascript:`` schemes, and inline event-handler
    attributes (``onclick=`` ...) are removed until none remain, so removals
    cannot splice a new match together (``javajavascript:script:``).  The
    result is truncated to 1000 characters and trimmed.  Applying the
    function twice gives the same result as applying it once.

    Args:
        value: Raw user-supplied text.

    Returns:
        The sanitized text.
    """
    previous = None
    cleaned = value
    while cleaned != previous:
        previous = cleaned
        cleaned = _ANGLE_BRACKETS.sub("", cleaned)
        cleaned = _JAVASCRIPT_SCHEME.sub("", cleaned)
        cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned[:MAX_TEXT_LENGTH].strip()


def sanitize_optional(value: str | None) -> str | None:
    return None if value is None else sanitize_text(value)


# ---------------------------------------------------------------------------
# Photo decoding.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PhotoPayload:
    """A decoded ``data:image/<subtype>;base64,<data>`` URI.

    Attributes:
        subtype: Image subtype, e.g. ``"png"``.
        data: The base64 payload, unchanged.
    """

    subtype: str
    data: str

    @property
    def mime_type(self) -> str:
        return f"image/{self.subtype}"


def parse_data_url(value: str) -> PhotoPayload:
    """Split an image data URI into subtype and base64 payload.

    Raises:
        InvalidPhotoError: If *value* is not ``data:image/<type>;base64,<data>``.
    """
    match = _DATA_URL.match(value)
    if not match or not match.group(2):
        raise InvalidPhotoError("Invalid image data format")
    return PhotoPayload(subtype=match.group(1), data=match.group(2))


# ---------------------------------------------------------------------------
# Environment validation.
# ---------------------------------------------------------------------------


def validate_environment(config: DreamBigConfig) -> list[str]:
    """Check that the settings needed to call Vertex AI are present.

    Returns:
        Human-readable problems; empty when the configuration is usable.
    """
    errors: list[str] = []
    if not config.google_project_id:
        errors.append("GOOGLE_PROJECT_ID environment variable is required")
    if not config.google_vertex_credentials_json and not config.google_application_credentials:
        errors.append(
            "Google Cloud credentials are required "
            "(either GOOGLE_VERTEX_CREDENTIALS_JSON or GOOGLE_APPLICATION_CREDENTIALS)"
        )
    return errors


# ---------------------------------------------------------------------------
# Rate limiting.
# ---------------------------------------------------------------------------


ANONYMOUS_CLIENT = "anonymous"


def client_id_from_forwarded(forwarded_for: str | None) -> str:
    """Return the rate-limit key from an ``X-Forwarded-For`` header.

    The first entry is the originating client; a missing or blank header
    maps every caller to one shared ``"anonymous"`` bucket.
    """
    if not forwarded_for:
        return ANONYMOUS_CLIENT
    return forwarded_for.split(",")[0].strip() or ANONYMOUS_CLIENT


class RateLimiterBase(ABC):
    """Admission control keyed by client identifier.

    Implementations backed by a shared store (e.g. a TTL cache) can be
    injected into the orchestrator for multi-instance deployments.
    """

    @abstractmethod
    def is_allowed(self, key: str) -> bool:
        """Record a request for *key* and return whether it is admitted."""

    @abstractmethod
    def remaining(self, key: str) -> int:
        """Return how many more requests *key* may make in the current window."""


class InMemoryRateLimiter(RateLimiterBase):
    """Rolling-window limiter holding request timestamps in process memory.

    Only admitted requests are recorded, so a rejected client regains
    capacity as soon as its oldest admitted request leaves the window.

    Args:
        max_requests: Requests admitted per key within one window.
        window_seconds: Window length in seconds.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, list[float]] = {}

    @classmethod
    def from_config(cls, config: DreamBigConfig) -> InMemoryRateLimiter:
        return cls(config.rate_limit_max_requests, config.rate_limit_window_seconds)

    def _recent(self, key: str, now: float) -> list[float]:
        recent = [t for t in self._requests.get(key, []) if now - t < self.window_seconds]
        if not recent:
            # Drop idle clients so the table only holds live windows.
            self._requests.pop(key, None)
        return recent

    def is_allowed(self, key: str) -> bool:
        now = self._clock()
        recent = self._recent(key, now)
        if len(recent) >= self.max_requests:
            self._requests[key] = recent
            logger.info(f"Rate limit reached for client {key}")
            return False
        recent.append(now)
        self._requests[key] = recent
        return True

    def remaining(self, key: str) -> int:
        recent = self._recent(key, self._clock())
        return max(0, self.max_requests - len(recent))

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()

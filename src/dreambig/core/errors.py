"""Exception types raised while serving a poster request.

Errors that reach the client derive from :class:`DreamBigError` and carry the
HTTP status and JSON body they render to.  :class:`UpstreamError` is internal:
the orchestrator catches it and applies the configured failure policy.
"""

from __future__ import annotations

from typing import Any


class DreamBigError(Exception):
    """Base class for errors rendered as ``{"error": ...}`` JSON responses.

    The message is intended to be displayed directly to the user.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> dict[str, Any]:
        """Return the JSON body for this error."""
        return {"error": self.message}


class ConfigurationError(DreamBigError):
    """Required server configuration (project id, credentials) is missing."""

    status_code = 500

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Server configuration error")
        self.errors = errors


class RequestValidationFailed(DreamBigError):
    """The request body failed schema validation."""

    status_code = 400

    def __init__(self, message: str = "Invalid request data", details: list | None = None) -> None:
        super().__init__(message)
        self.details = details

    def payload(self) -> dict[str, Any]:
        body = super().payload()
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidPhotoError(DreamBigError):
    """The selfie is missing or is not an image data URI."""

    status_code = 400


class RateLimitExceeded(DreamBigError):
    """The client exhausted its requests for the current window."""

    status_code = 429

    def __init__(self, remaining_attempts: int) -> None:
        super().__init__("Rate limit exceeded")
        self.remaining_attempts = remaining_attempts

    def payload(self) -> dict[str, Any]:
        return {"error": self.message, "remainingAttempts": self.remaining_attempts}


class UpstreamGenerationError(DreamBigError):
    """Upstream generation failed and the policy is ``propagate``."""

    status_code = 502

    def __init__(self, api_error: str) -> None:
        super().__init__("Image generation failed")
        self.api_error = api_error

    def payload(self) -> dict[str, Any]:
        return {"error": self.message, "apiError": self.api_error}


class UpstreamError(Exception):
    """A Google API call (token, vision, or Imagen) failed.

    Attributes:
        status_code: HTTP status returned upstream, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

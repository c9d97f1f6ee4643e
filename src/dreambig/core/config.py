"""Configuration management for the Dream Big SG poster service.

This module provides centralized configuration management using Pydantic
Settings.  Configuration is loaded from environment variables and an optional
``.env`` file in the working directory.

Environment Variable Loading
-----------------------------
The Google-facing settings keep the variable names the deployment already
uses (``GOOGLE_PROJECT_ID``, ``IMAGEN_MODEL_ID`` ...), so no prefix is applied.
Values are resolved in the following priority order:

1. Keyword arguments passed to :class:`DreamBigConfig` (tests)
2. Environment variables
3. ``.env`` file in the working directory
4. Default values defined on the class

Example .env file::

    GOOGLE_PROJECT_ID=dream-big-sg
    GOOGLE_LOCATION=us-central1
    GEMINI_API_KEY=...
    GOOGLE_VERTEX_CREDENTIALS_JSON={"type": "service_account", ...}
    UPSTREAM_FAILURE_POLICY=fallback

Global Configuration Instance
------------------------------
A global ``config`` instance is created at import time and is the default
used by :mod:`dreambig.api.main`.  Tests build their own instances with
``_env_file=None`` and inject them through ``create_app``.

Credentials
-----------
Vertex AI calls need a bearer token.  Two sources are supported:

- ``GOOGLE_VERTEX_CREDENTIALS_JSON``: the service-account key inlined as JSON
- ``GOOGLE_APPLICATION_CREDENTIALS``: path to a key file, picked up by
  Application Default Credentials discovery

At least one of them must be present for a request to be served.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class DreamBigConfig(BaseSettings):
    """Main configuration for the Dream Big SG poster service.

    Attributes
    ----------
    Google Cloud:
        google_project_id : str | None
            Cloud project that hosts the Imagen models (required at request time)
        google_location : str
            Vertex AI region used for both the host name and the resource path
        google_vertex_credentials_json : str | None
            Inline service-account key JSON
        google_application_credentials : str | None
            Path to a key file for Application Default Credentials

    Models:
        imagen_model_id : str
            Model for the ``detailed`` (text-to-image) variant
        imagen_model_id_3 : str
            Model for the ``face-match`` (reference image) variant
        gemini_api_key : str | None
            API key for the Gemini vision sub-call
        gemini_vision_model : str
            Gemini model used to describe the uploaded photo
        vision_enabled : bool
            Turn the vision sub-call off entirely

    Generation:
        safety_filter_level : str
            Imagen ``safetyFilterLevel`` parameter
        output_dimension : int
            Square output size in pixels; ``0`` omits ``outputDimension``
        http_timeout_seconds : float
            Timeout applied to every outbound HTTP call

    Policies:
        rate_limit_max_requests : int
            Requests admitted per client within one window
        rate_limit_window_seconds : float
            Length of the rolling rate-limit window
        upstream_failure_policy : Literal["fallback", "propagate"]
            ``fallback`` returns a placeholder poster on upstream failure,
            ``propagate`` surfaces the failure as HTTP 502

    Server:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Bind port for uvicorn
        log_level : str
            Root log level configured by the CLI

    Examples
    --------
    Create a custom configuration:

        >>> custom_config = DreamBigConfig(
        ...     google_project_id="dream-big-sg",
        ...     upstream_failure_policy="propagate",
        ...     _env_file=None,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google Cloud
    google_project_id: str | None = Field(
        default=None,
        description="Google Cloud project id hosting the Imagen models",
    )
    google_location: str = Field(
        default="us-central1",
        description="Vertex AI region",
    )
    google_vertex_credentials_json: str | None = Field(
        default=None,
        description="Inline service-account key JSON",
    )
    google_application_credentials: str | None = Field(
        default=None,
        description="Path to a service-account key file (ADC)",
    )

    # Model selection
    imagen_model_id: str = Field(
        default="imagen-4.0-ultra-generate-001",
        description="Imagen model for the detailed variant",
    )
    imagen_model_id_3: str = Field(
        default="imagen-3.0-capability-001",
        description="Imagen model for the face-match variant",
    )
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Gemini vision sub-call",
    )
    gemini_vision_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model that describes the uploaded photo",
    )
    vision_enabled: bool = Field(
        default=True,
        description="Run the vision sub-call before prompt composition",
    )

    # Generation parameters
    safety_filter_level: str = Field(
        default="block_few",
        description="Imagen safetyFilterLevel",
    )
    output_dimension: int = Field(
        default=4096,
        ge=0,
        le=8192,
        description="Square output dimension in pixels (0 to omit)",
    )
    http_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for outbound HTTP calls",
    )

    # Policies
    rate_limit_max_requests: int = Field(
        default=5,
        ge=1,
        description="Requests admitted per client per window",
    )
    rate_limit_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Rolling rate-limit window in seconds",
    )
    upstream_failure_policy: Literal["fallback", "propagate"] = Field(
        default="fallback",
        description="What to return when the upstream generation fails",
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8000,
        ge=1024,
        le=65535,
        description="Server port",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the CLI",
    )

    @property
    def vision_available(self) -> bool:
        """Whether the vision sub-call can run with the current settings."""
        return self.vision_enabled and bool(self.gemini_api_key)

    def service_account_info(self) -> dict[str, Any] | None:
        """Parse the inline service-account JSON.

        Returns:
            The decoded key dictionary, or ``None`` when no inline key is set.

        Raises:
            ValueError: If the inline value is not a JSON object.
        """
        if not self.google_vertex_credentials_json:
            return None
        info = json.loads(self.google_vertex_credentials_json)
        if not isinstance(info, dict):
            raise ValueError("GOOGLE_VERTEX_CREDENTIALS_JSON must be a JSON object")
        return info

    def imagen_endpoint(self, model_id: str) -> str:
        """Build the Vertex AI ``:predict`` URL for *model_id*."""
        region = self.google_location
        return (
            f"https://{region}-aiplatform.googleapis.com/v1/projects/{self.google_project_id}"
            f"/locations/{region}/publishers/google/models/{model_id}:predict"
        )


# Global configuration instance
# Loaded once at import time from the environment and .env file.
config = DreamBigConfig()

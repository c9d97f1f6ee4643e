"""Poster generation orchestration.

:class:`GenerationOrchestrator` runs one poster request through a strict,
sequential pipeline::

    Validating -> RateLimited | Invalid            (terminal, error)
               -> Authorizing -> Composing -> Calling
               -> Succeeded | FallbackSynthesized  (terminal)

1. Environment check (500 when project id or credentials are missing).
2. Rate limit check keyed by client identifier (429).
3. Schema validation and text sanitization (400).
4. Selfie data URI decoding (400).
5. Vision sub-call describing the subject.  Failure is non-fatal: a fixed
   description is used instead.
6. Prompt composition for the selected variant.
7. Payload shaping by the variant strategy.
8. Access token and ``:predict`` call.
9. Response unwrapping.
10. On any upstream failure in steps 8-9, apply the failure policy:
    ``fallback`` returns a placeholder poster with ``success: true`` and
    ``metadata.fallback``; ``propagate`` raises a 502 error.

There are no retries.  "Generate Again" in the UI simply sends a new
request, usually with the next model variant.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from dreambig.api.models import PosterRequest
from dreambig.core.config import DreamBigConfig
from dreambig.core.errors import (
    ConfigurationError,
    InvalidPhotoError,
    RateLimitExceeded,
    RequestValidationFailed,
    UpstreamError,
    UpstreamGenerationError,
)
from dreambig.core.google_clients import GeminiVisionClient, GoogleTokenProvider, ImagenClient
from dreambig.core.model_variants import ModelVariantBase, VariantRegistry, variant_registry
from dreambig.core.placeholder import render_placeholder
from dreambig.core.prompt_composer import (
    PosterSelection,
    SubjectDescription,
    compose_prompt,
    fallback_subject_description,
)
from dreambig.core.security import (
    PhotoPayload,
    RateLimiterBase,
    parse_data_url,
    sanitize_optional,
    sanitize_text,
    validate_environment,
)

logger = logging.getLogger(__name__)

PROMPT_PREVIEW_LENGTH = 300
DESCRIPTION_PREVIEW_LENGTH = 200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _preview(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


@dataclass
class GenerationResult:
    """Outcome of a poster request.

    Attributes:
        success: Always ``True`` for rendered results, including fallbacks.
        image_url: Generated image or placeholder as a data URI.
        metadata: Diagnostic fields returned to the client.
    """

    success: bool
    image_url: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return bool(self.metadata.get("fallback"))

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "imageUrl": self.image_url, "metadata": self.metadata}


class GenerationOrchestrator:
    """Coordinates validation, prompt composition, and the upstream calls.

    All collaborators are injected so tests can replace the Google clients
    and the rate limiter.

    Args:
        config: Service configuration.
        rate_limiter: Admission control shared across requests.
        token_provider: Source of Vertex AI bearer tokens.
        vision_client: Gemini client used to describe the subject.
        imagen_client: Imagen ``:predict`` client.
        registry: Model variants available to ``selectedModel``.
        now: UTC clock used for metadata timestamps.
    """

    def __init__(
        self,
        config: DreamBigConfig,
        rate_limiter: RateLimiterBase,
        token_provider: GoogleTokenProvider,
        vision_client: GeminiVisionClient,
        imagen_client: ImagenClient,
        registry: VariantRegistry = variant_registry,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.rate_limiter = rate_limiter
        self.token_provider = token_provider
        self.vision_client = vision_client
        self.imagen_client = imagen_client
        self.registry = registry
        self.now = now

    # --- Admission ---------------------------------------------------------

    def check_environment(self) -> None:
        errors = validate_environment(self.config)
        if errors:
            logger.error(f"Environment validation failed: {errors}")
            raise ConfigurationError(errors)

    def check_rate_limit(self, client_id: str) -> None:
        if not self.rate_limiter.is_allowed(client_id):
            raise RateLimitExceeded(self.rate_limiter.remaining(client_id))

    @staticmethod
    def validate(body: Any) -> PosterRequest:
        """Validate the raw JSON body against :class:`PosterRequest`.

        Raises:
            RequestValidationFailed: With pydantic's field errors as details.
        """
        try:
            return PosterRequest.model_validate(body)
        except ValidationError as exc:
            details = exc.errors(include_url=False, include_context=False, include_input=False)
            raise RequestValidationFailed(details=details) from exc

    @staticmethod
    def decode_photo(request: PosterRequest) -> PhotoPayload:
        if not request.selfie_data_url:
            raise InvalidPhotoError("Camera photo is required")
        return parse_data_url(request.selfie_data_url)

    # --- Pipeline ----------------------------------------------------------

    async def generate(self, body: Any, client_id: str) -> GenerationResult:
        """Run one poster request end to end.

        Args:
            body: Decoded JSON request body (validated here, after the
                environment and rate-limit checks).
            client_id: Rate-limit key, usually the forwarded client IP.

        Returns:
            The generated poster, or a placeholder under the ``fallback`` policy.

        Raises:
            ConfigurationError: Required configuration is missing.
            RateLimitExceeded: The client is over its request budget.
            RequestValidationFailed: The body does not match the schema.
            InvalidPhotoError: The selfie is missing or malformed.
            UpstreamGenerationError: Generation failed under ``propagate``.
        """
        self.check_environment()
        self.check_rate_limit(client_id)

        request = self.validate(body)
        client_prompt = sanitize_text(request.prompt)
        selection = PosterSelection.from_values(
            career=sanitize_optional(request.career),
            location=sanitize_optional(request.background),
            activity=sanitize_optional(request.activity),
        )
        logger.info(
            f"Poster request validated: career={selection.career!r}, "
            f"location={selection.location!r}, model={request.selected_model}"
        )

        photo = self.decode_photo(request)
        variant = self.registry.get(request.selected_model)
        model_id = variant.model_id(self.config)

        try:
            return await self._generate_with_upstream(request, selection, photo, variant, model_id)
        except UpstreamError as exc:
            return self._handle_upstream_failure(exc, request, selection, client_prompt, model_id)

    async def describe_subject(
        self, photo: PhotoPayload, selection: PosterSelection
    ) -> SubjectDescription:
        """Run the vision sub-call, substituting a generic description on failure."""
        if not self.config.vision_available:
            logger.info("Vision sub-call disabled, using generic subject description")
            return fallback_subject_description(selection)
        try:
            return await self.vision_client.describe_subject(photo, selection)
        except UpstreamError as exc:
            logger.warning(f"Vision sub-call failed, using generic subject description: {exc}")
            return fallback_subject_description(selection)

    async def _generate_with_upstream(
        self,
        request: PosterRequest,
        selection: PosterSelection,
        photo: PhotoPayload,
        variant: ModelVariantBase,
        model_id: str,
    ) -> GenerationResult:
        subject = await self.describe_subject(photo, selection)

        prompt = compose_prompt(selection, variant.name, subject)
        logger.debug(f"Composed prompt for {variant.name}:\n{prompt}")

        payload = variant.build_payload(prompt, photo, request.aspect, self.config)

        token = await self.token_provider.get_token()
        logger.info(f"Calling Imagen model {model_id} ({variant.name})")
        image = await self.imagen_client.predict(model_id, payload, token)
        logger.info(f"Imagen returned {image.mime_type} image")

        return GenerationResult(
            success=True,
            image_url=image.data_url,
            metadata={
                "modelUsed": model_id,
                "modelType": variant.name,
                "selectedModel": variant.name,
                "prompt": _preview(prompt, PROMPT_PREVIEW_LENGTH),
                "superheroDescription": _preview(subject.text, DESCRIPTION_PREVIEW_LENGTH),
                "descriptionSource": subject.source,
                "ageBracket": subject.age_bracket.value,
                "timestamp": self.now().isoformat(),
                "hasUploadedPhoto": True,
                "aspectRatio": request.aspect,
                "apiProvider": variant.api_provider,
                "mimeType": image.mime_type,
                "generationType": variant.generation_type,
                "modelVersion": variant.model_version,
                "approach": variant.approach,
                "fallback": False,
            },
        )

    def _handle_upstream_failure(
        self,
        exc: UpstreamError,
        request: PosterRequest,
        selection: PosterSelection,
        client_prompt: str,
        model_id: str,
    ) -> GenerationResult:
        message = str(exc) or "Unknown error"
        logger.error(f"Upstream generation failed: {message}")

        if self.config.upstream_failure_policy == "propagate":
            raise UpstreamGenerationError(message) from exc

        generated_at = self.now()
        logger.info("Falling back to placeholder poster")
        return GenerationResult(
            success=True,
            image_url=render_placeholder(selection, generated_at=generated_at),
            metadata={
                "modelUsed": model_id,
                "selectedModel": request.selected_model,
                "prompt": client_prompt,
                "timestamp": generated_at.isoformat(),
                "hasUploadedPhoto": True,
                "aspectRatio": request.aspect,
                "fallback": True,
                "apiError": message,
            },
        )

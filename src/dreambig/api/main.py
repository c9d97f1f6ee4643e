"""Dream Big SG poster service — FastAPI Application.

This module is the single entry point for the web service.  It defines the
``create_app`` factory, the module-level ``app`` instance, all REST API
routes, and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
The service is a stateless request/response pipeline:

- **Configuration** comes from environment variables and ``.env`` via
  :class:`~dreambig.core.config.DreamBigConfig`.
- **Poster generation** is performed by
  :class:`~dreambig.api.orchestrator.GenerationOrchestrator`, which owns the
  rate limiter and the Google clients for the lifetime of the app.
- **Outbound HTTP** goes through one shared ``httpx.AsyncClient`` opened and
  closed by the application lifespan.
- **Catalogue data** (locations, careers, mission options) is served to the
  wizard UI via ``GET /api/config``.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
POST      ``/api/imagen``               Generate a superhero poster
GET       ``/api/imagen``               405, POST only
GET       ``/api/config``               Variants, aspect ratios, catalogue
GET       ``/api/careers``              Career search (``?q=``)
POST      ``/api/prompt/compile``       Preview the composed prompt
POST      ``/api/mission``              Build the mission sentence
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    dreambig

Direct invocation::

    python -m dreambig.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import get_args

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dreambig import __version__
from dreambig.api.models import AspectRatio, CompilePromptRequest, MissionRequest
from dreambig.api.orchestrator import GenerationOrchestrator
from dreambig.core.catalog import (
    ACTION_OPTIONS,
    CAREERS,
    LOCATIONS,
    POWER_OPTIONS,
    WHO_WHAT_OPTIONS,
    build_mission_sentence,
    search_careers,
)
from dreambig.core.config import DreamBigConfig, config
from dreambig.core.errors import DreamBigError, RequestValidationFailed
from dreambig.core.google_clients import GeminiVisionClient, GoogleTokenProvider, ImagenClient
from dreambig.core.model_variants import variant_registry
from dreambig.core.prompt_composer import (
    PosterSelection,
    SubjectDescription,
    compose_poster_brief,
    compose_prompt,
)
from dreambig.core.security import InMemoryRateLimiter, client_id_from_forwarded

logger = logging.getLogger(__name__)

router = APIRouter()


def build_orchestrator(app_config: DreamBigConfig, http: httpx.AsyncClient) -> GenerationOrchestrator:
    """Wire the production collaborators around a shared HTTP client."""
    return GenerationOrchestrator(
        config=app_config,
        rate_limiter=InMemoryRateLimiter.from_config(app_config),
        token_provider=GoogleTokenProvider(app_config),
        vision_client=GeminiVisionClient(http, app_config),
        imagen_client=ImagenClient(http, app_config),
    )


# ---------------------------------------------------------------------------
# Poster generation.
# ---------------------------------------------------------------------------


@router.post("/api/imagen")
async def generate_poster(request: Request) -> dict:
    """Generate a superhero poster from the wizard selection and selfie.

    The body is read as raw JSON and validated by the orchestrator so that
    the environment and rate-limit checks run first.  Known failures are
    rendered by the :class:`DreamBigError` handler; anything else becomes a
    generic 500.

    Returns:
        ``{"success": true, "imageUrl": ..., "metadata": {...}}``.  The
        image is a placeholder SVG when ``metadata.fallback`` is true.
    """
    orchestrator: GenerationOrchestrator = request.app.state.orchestrator
    client_id = client_id_from_forwarded(request.headers.get("x-forwarded-for"))

    try:
        body = await request.json()
    except ValueError:
        # Reported as a schema failure after admission checks.
        body = None

    try:
        result = await orchestrator.generate(body, client_id)
    except DreamBigError:
        raise
    except Exception:
        logger.error("Unexpected error while generating poster", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to generate image"})

    return result.to_dict()


@router.get("/api/imagen")
async def generate_poster_get() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={
            "error": "Method not allowed. Use POST to generate images.",
            "supportedMethods": ["POST"],
        },
        headers={"Allow": "POST"},
    )


# ---------------------------------------------------------------------------
# Wizard support routes.
# ---------------------------------------------------------------------------


@router.get("/api/config")
async def get_config(request: Request) -> dict:
    """Return the catalogue and generation options for the wizard UI.

    The response includes:

    - ``version`` — API version string.
    - ``models`` — available model variants in "Surprise Me" order.
    - ``aspect_ratios`` — accepted ``aspect`` values.
    - ``locations``, ``careers`` — the static catalogue.
    - ``mission_options`` — the three mission-builder slots.
    - ``rate_limit`` — requests allowed per window.
    """
    app_config: DreamBigConfig = request.app.state.config
    return {
        "version": __version__,
        "models": [
            variant_registry.get_variant_info(name) for name in variant_registry.list_available()
        ],
        "aspect_ratios": list(get_args(AspectRatio)),
        "locations": [location.to_dict() for location in LOCATIONS],
        "careers": [career.to_dict() for career in CAREERS],
        "mission_options": {
            "actions": [option.to_dict() for option in ACTION_OPTIONS],
            "who": [option.to_dict() for option in WHO_WHAT_OPTIONS],
            "powers": [option.to_dict() for option in POWER_OPTIONS],
        },
        "rate_limit": {
            "max_requests": app_config.rate_limit_max_requests,
            "window_seconds": app_config.rate_limit_window_seconds,
        },
    }


@router.get("/api/careers")
async def get_careers(q: str = "") -> dict:
    """Search the career catalogue by label and category."""
    matches = search_careers(q)
    return {"careers": [career.to_dict() for career in matches], "count": len(matches)}


@router.post("/api/prompt/compile")
async def compile_prompt(req: CompilePromptRequest) -> dict:
    """Preview the composed prompt without calling any upstream service.

    Args:
        req: Selection and variant to preview.  A subject description may be
            supplied to see how it is prepended.

    Returns:
        Dictionary with ``compiled_prompt``, ``poster_brief``, and the
        ``next_model`` the "Surprise Me" button would switch to.
    """
    selection = PosterSelection.from_values(req.career, req.background, req.activity)
    subject = SubjectDescription(text=req.subject_description) if req.subject_description else None
    return {
        "compiled_prompt": compose_prompt(selection, req.selected_model, subject),
        "poster_brief": compose_poster_brief(selection),
        "next_model": variant_registry.next_variant(req.selected_model),
    }


@router.post("/api/mission")
async def build_mission(req: MissionRequest) -> dict:
    """Turn the mission-builder slots into the activity sentence."""
    try:
        sentence = build_mission_sentence(req.action, req.who, req.power)
    except KeyError as exc:
        raise RequestValidationFailed(message=exc.args[0]) from exc
    return {"activity": sentence}


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


async def _render_dreambig_error(request: Request, exc: DreamBigError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


async def _render_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Same envelope as the poster route instead of FastAPI's 422 ``detail``.
    error = RequestValidationFailed(details=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.payload())


def create_app(
    app_config: DreamBigConfig | None = None,
    orchestrator: GenerationOrchestrator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_config: Settings to serve with.  Defaults to the global
            :data:`~dreambig.core.config.config`.
        orchestrator: Pre-built orchestrator (tests inject one with fake
            upstream clients).  When omitted, the lifespan builds one around
            a shared ``httpx.AsyncClient``.

    Returns:
        The configured application.
    """
    app_config = app_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the shared HTTP client on startup and close it on shutdown."""
        if app.state.orchestrator is not None:
            yield
            return

        # --- Startup -------------------------------------------------------
        async with httpx.AsyncClient(timeout=app_config.http_timeout_seconds) as http:
            app.state.orchestrator = build_orchestrator(app_config, http)
            logger.info(
                f"Poster service ready (variants: {', '.join(variant_registry.list_available())}, "
                f"failure policy: {app_config.upstream_failure_policy})"
            )

            yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        app.state.orchestrator = None
        logger.info("HTTP client closed on shutdown.")

    app = FastAPI(
        title="Dream Big SG",
        description="Superhero career poster generation backed by Google Imagen.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = app_config
    app.state.orchestrator = orchestrator

    # The wizard UI is served from a separate origin during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DreamBigError, _render_dreambig_error)
    app.add_exception_handler(RequestValidationError, _render_validation_error)
    app.include_router(router)
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port, and log level from
    :data:`~dreambig.core.config.config` (``SERVER_HOST``, ``SERVER_PORT``,
    ``LOG_LEVEL``).  Defaults to ``0.0.0.0:8000``.

    This function is registered as the ``dreambig`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "dreambig.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()

"""Dream Big SG — FastAPI REST API layer.

This package contains the FastAPI application and the Pydantic request
models that validate incoming JSON.

Modules
-------
main
    FastAPI application with all route handlers, error rendering, and the
    ``main()`` CLI entry point.
models
    Pydantic models for API request validation.
orchestrator
    The sequential generation pipeline behind ``POST /api/imagen``.
"""

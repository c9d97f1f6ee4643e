"""Pydantic request models for the Dream Big SG API.

These models define the JSON schema for the API endpoints.  The wizard UI
sends camelCase keys, so fields carry camelCase aliases while the Python
attributes stay snake_case; both spellings are accepted on input.

Models
------
PosterRequest
    Payload for ``POST /api/imagen``: the wizard selection, the selfie, and
    the model variant to call.
CompilePromptRequest
    Payload for ``POST /api/prompt/compile``: a selection to preview.
MissionRequest
    Payload for ``POST /api/mission``: the three mission-builder slots.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AspectRatio = Literal["1:1", "4:3", "3:4", "16:9"]
ModelVariantName = Literal["detailed", "face-match"]


class PosterRequest(BaseModel):
    """Request body for the ``POST /api/imagen`` endpoint.

    Attributes:
        prompt: Optional poster brief composed by the wizard.  Sanitized and kept
            for diagnostics; the model prompt is composed server-side.
        career: Career value (e.g. ``"doctor"``) or custom free text.
        background: Location tag (e.g. ``"merlion-park"``).
        activity: What the hero is doing.
        aspect: Output aspect ratio.  Defaults to ``"4:3"``.
        selfie_data_url: The selfie as ``data:image/<type>;base64,<data>``.
            Optional in the schema so that a missing photo is reported with a
            dedicated message; the orchestrator requires it.
        selected_model: Model variant to call.  Defaults to ``"detailed"``.
        seed: Accepted for compatibility; Imagen ignores it.
        bg_hint: Accepted for compatibility; duplicates ``background``.
    """

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(
        default="",
        description="Poster brief composed by the client.",
    )
    career: str | None = Field(
        default=None,
        description="Career value or custom career text.",
    )
    background: str | None = Field(
        default=None,
        description="Location tag (e.g. 'merlion-park').",
    )
    activity: str | None = Field(
        default=None,
        description="Activity or mission sentence.",
    )
    aspect: AspectRatio = Field(
        default="4:3",
        description="Output aspect ratio.",
    )
    selfie_data_url: str | None = Field(
        default=None,
        alias="selfieDataUrl",
        description="Selfie as an image data URI (required).",
    )
    selected_model: ModelVariantName = Field(
        default="detailed",
        alias="selectedModel",
        description="Model variant: 'detailed' or 'face-match'.",
    )
    seed: int | None = Field(
        default=None,
        description="Ignored; kept for client compatibility.",
    )
    bg_hint: str | None = Field(
        default=None,
        alias="bgHint",
        description="Ignored; kept for client compatibility.",
    )


class CompilePromptRequest(BaseModel):
    """Request body for the ``POST /api/prompt/compile`` endpoint.

    Attributes:
        career: Career value or custom text.
        background: Location tag.
        activity: Activity text.
        selected_model: Variant whose template should be previewed.
        subject_description: Optional subject description to include.
    """

    model_config = ConfigDict(populate_by_name=True)

    career: str | None = None
    background: str | None = None
    activity: str | None = None
    selected_model: ModelVariantName = Field(default="detailed", alias="selectedModel")
    subject_description: str | None = Field(default=None, alias="subjectDescription")


class MissionRequest(BaseModel):
    """Request body for the ``POST /api/mission`` endpoint."""

    action: str = Field(..., description="Action option id (e.g. 'rescue').")
    who: str = Field(..., description="Who/what option id (e.g. 'animals').")
    power: str = Field(..., description="Power option id (e.g. 'kindness').")

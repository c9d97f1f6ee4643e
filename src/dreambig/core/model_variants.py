"""Model variant strategies and registry.

Each Imagen configuration the service can call is a *variant*.  Variants need
materially different request bodies, so each one owns its payload shaping
instead of the route branching on a string:

- **detailed**: text-to-image.  The instance is just ``{prompt}``.
- **face-match**: subject-reference editing.  The instance carries the photo
  as a reference image so the subject's identity is preserved.

Variant Pattern
---------------
A variant encapsulates:

- the model id it calls (read from configuration)
- the ``instances`` entry it sends
- the ``parameters`` block it sends
- descriptive metadata returned to the client

Usage Example
-------------
    >>> from dreambig.core.model_variants import variant_registry
    >>> variant = variant_registry.get("face-match")
    >>> payload = variant.build_payload(prompt, photo, "4:3", config)

See Also
--------
- GenerationOrchestrator: selects the variant from ``selectedModel``
- DreamBigConfig: model ids and shared generation parameters
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Literal

from dreambig.core.config import DreamBigConfig
from dreambig.core.prompt_composer import DETAILED, FACE_MATCH
from dreambig.core.security import PhotoPayload

logger = logging.getLogger(__name__)


class ModelVariantBase(ABC):
    """Abstract base class for model variants.

    Attributes
    ----------
    name : str
        Discriminator sent by the client as ``selectedModel``
    label : str
        Name shown in the model picker
    description : str
        Short description for the model picker
    generation_type : str
        Whether the variant generates from text or edits a reference image
    api_provider : str
        Human-readable provider chain, returned in metadata
    model_version : str
        Model family tag, returned in metadata
    approach : str
        Pipeline tag, returned in metadata
    """

    name: str = "base"
    label: str = "Base Variant"
    description: str = "Base class for model variants"
    generation_type: Literal[
        "text-to-image-superhero-creation", "image-to-image-superhero-transformation"
    ] = "text-to-image-superhero-creation"
    api_provider: str = ""
    model_version: str = ""
    approach: str = ""

    @abstractmethod
    def model_id(self, config: DreamBigConfig) -> str:
        """Return the Imagen model id this variant calls."""

    @abstractmethod
    def build_instance(self, prompt: str, photo: PhotoPayload) -> dict[str, Any]:
        """Return the single ``instances`` entry for the predict request."""

    def build_parameters(self, aspect_ratio: str, config: DreamBigConfig) -> dict[str, Any]:
        """Return the ``parameters`` block shared by all variants.

        Args:
            aspect_ratio: One of ``1:1``, ``4:3``, ``3:4``, ``16:9``.
            config: Supplies the safety level and output dimension.
        """
        parameters: dict[str, Any] = {
            "sampleCount": 1,
            "aspectRatio": aspect_ratio,
            "safetyFilterLevel": config.safety_filter_level,
        }
        if config.output_dimension:
            parameters["outputDimension"] = {
                "widthPixels": config.output_dimension,
                "heightPixels": config.output_dimension,
            }
        return parameters

    def build_payload(
        self,
        prompt: str,
        photo: PhotoPayload,
        aspect_ratio: str,
        config: DreamBigConfig,
    ) -> dict[str, Any]:
        """Assemble the full ``:predict`` request body."""
        return {
            "instances": [self.build_instance(prompt, photo)],
            "parameters": self.build_parameters(aspect_ratio, config),
        }

    def info(self) -> dict[str, str]:
        return {
            "id": self.name,
            "label": self.label,
            "description": self.description,
            "generation_type": self.generation_type,
        }


class DetailedVariant(ModelVariantBase):
    """Text-to-image generation with a long structured prompt."""

    name = DETAILED
    label = "Fancy and Detailed"
    description = "Creates artistic, detailed superhero imagery with creative flair"
    generation_type = "text-to-image-superhero-creation"
    api_provider = "Google Vertex AI Imagen 4 + Gemini Vision"
    model_version = "imagen-4-text-generation"
    approach = "gemini-analysis -> imagen-4-text-to-image-generation"

    def model_id(self, config: DreamBigConfig) -> str:
        return config.imagen_model_id

    def build_instance(self, prompt: str, photo: PhotoPayload) -> dict[str, Any]:
        # The photo only informs the prompt through the vision description.
        return {"prompt": prompt}


class FaceMatchVariant(ModelVariantBase):
    """Subject-reference editing that keeps the photographed face."""

    name = FACE_MATCH
    label = "Face Match"
    description = "Embeds your actual photo into the poster for realistic representation"
    generation_type = "image-to-image-superhero-transformation"
    api_provider = "Google Vertex AI Imagen 3 + Gemini Vision"
    model_version = "imagen-3-with-reference-image"
    approach = "gemini-analysis -> imagen-3-reference-image-transformation"

    subject_description = "person to transform into superhero"

    def model_id(self, config: DreamBigConfig) -> str:
        return config.imagen_model_id_3

    def build_instance(self, prompt: str, photo: PhotoPayload) -> dict[str, Any]:
        return {
            "prompt": prompt,
            "referenceImages": [
                {
                    "referenceType": "REFERENCE_TYPE_SUBJECT",
                    "referenceId": 1,
                    "referenceImage": {"bytesBase64Encoded": photo.data},
                    "subjectImageConfig": {
                        "subjectType": "SUBJECT_TYPE_PERSON",
                        "subjectDescription": self.subject_description,
                    },
                }
            ],
        }

    def build_parameters(self, aspect_ratio: str, config: DreamBigConfig) -> dict[str, Any]:
        parameters = super().build_parameters(aspect_ratio, config)
        parameters["personGeneration"] = "ALLOW_ALL"
        return parameters


class VariantRegistry:
    """Registry of model variants keyed by their ``selectedModel`` name.

    Notes
    -----
    - Variants are stateless, so the registry stores one instance per name
    - Registry order is the round-robin order used by "Surprise Me"
    """

    def __init__(self) -> None:
        self._variants: dict[str, ModelVariantBase] = {}

    def register(self, variant: ModelVariantBase) -> None:
        """Register a variant instance, replacing any variant with the same name."""
        if variant.name in self._variants:
            logger.warning(f"Model variant '{variant.name}' is already registered, overwriting")
        self._variants[variant.name] = variant
        logger.debug(f"Registered model variant: {variant.name}")

    def get(self, name: str) -> ModelVariantBase:
        """Return the variant registered under *name*.

        Raises
        ------
        KeyError
            If no variant is registered under *name*
        """
        if name not in self._variants:
            available = ", ".join(self.list_available())
            raise KeyError(f"Model variant '{name}' not found. Available variants: {available}")
        return self._variants[name]

    def list_available(self) -> list[str]:
        return list(self._variants.keys())

    def get_variant_info(self, name: str) -> dict[str, str] | None:
        variant = self._variants.get(name)
        return variant.info() if variant else None

    def next_variant(self, current: str | None) -> str:
        """Return the variant after *current* in round-robin order.

        Unknown or missing values start from the first registered variant.
        """
        names = self.list_available()
        if current not in self._variants:
            return names[0]
        return names[(names.index(current) + 1) % len(names)]


# Global variant registry instance
variant_registry = VariantRegistry()
variant_registry.register(DetailedVariant())
variant_registry.register(FaceMatchVariant())

"""Core functionality for superhero poster generation.

This package provides the components the HTTP layer wires together:

- **DreamBigConfig**: Configuration management using Pydantic Settings
- **config**: Global configuration instance (loads from environment variables)
- **Prompt composer**: Pure templating of the image-model prompt
- **Model variants**: One strategy per Imagen configuration, plus a registry
- **Google clients**: Token provider, Gemini vision, Imagen predict
- **Placeholder**: Locally rendered fallback poster

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - Google variable names are used as-is (no prefix)

2. **Domain Layer** (catalog.py, prompt_composer.py, model_variants.py):
   - Static catalogue of locations, careers, and mission options
   - Deterministic prompt templates per variant
   - Registry pattern for variant discovery

3. **Boundary Layer** (security.py, google_clients.py, placeholder.py):
   - Sanitization, photo decoding, and rate limiting
   - Outbound calls, each failing with ``UpstreamError``
   - The SVG fallback poster

Usage Example
-------------
    from dreambig.core import config, variant_registry
    from dreambig.core.prompt_composer import PosterSelection, compose_prompt

    selection = PosterSelection.from_values("doctor", "merlion-park", "saving the day")
    variant = variant_registry.get("detailed")
    prompt = compose_prompt(selection, variant.name)
"""

from dreambig.core.config import DreamBigConfig, config
from dreambig.core.model_variants import ModelVariantBase, variant_registry

__all__ = [
    "ModelVariantBase",
    "variant_registry",
    "DreamBigConfig",
    "config",
]

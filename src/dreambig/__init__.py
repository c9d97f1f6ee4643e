"""Dream Big SG - superhero career poster generation service."""

__version__ = "0.3.0"

from dreambig.core.config import DreamBigConfig, config

__all__ = [
    "DreamBigConfig",
    "config",
]

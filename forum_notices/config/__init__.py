"""
Configuration module for forum sources.

Provides:
- YAML config loading with validation
- Source, pipeline and challenge-marker definitions
- Environment variable substitution
"""

from .loader import (
    ConfigLoader,
    PipelineSettings,
    load_challenge_signatures,
    load_settings,
    load_sources,
)

__all__ = [
    "ConfigLoader",
    "PipelineSettings",
    "load_challenge_signatures",
    "load_settings",
    "load_sources",
]

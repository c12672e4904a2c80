"""Configuration loading utilities for fovlab."""

from .schema import (
    StudyConfig,
    load_config,
)

__all__ = ["StudyConfig", "load_config"]

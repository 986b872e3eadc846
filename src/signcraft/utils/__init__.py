"""Utility functions for signcraft.

This module provides utility functions including:

- Logging setup and configuration
- Per-run generation statistics
"""

from signcraft.utils.logging import (
    GenerationStats,
    PipelineLogger,
    configure_logging,
)

__all__ = [
    "GenerationStats",
    "PipelineLogger",
    "configure_logging",
]

"""Configuration management for signcraft.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults. Out-of-range
values are clamped to safe bounds instead of being rejected.

Key classes:
- SamplingConfig: Curve flattening settings
- TracingConfig: Threshold, thinning and contour tracing settings
- ConnectorConfig: Stroke stitching settings
- BackingPlateConfig: Mounting plate settings record
- LithophaneConfig: Heightfield settings record
- LoggingConfig: Logging settings
- SignCraftSettings: Main application settings
"""

from signcraft.config.settings import (
    BackingPlateConfig,
    ConnectorConfig,
    ExtrusionConfig,
    FrameConfig,
    HolePattern,
    LithophaneConfig,
    LoggingConfig,
    PlateShape,
    SamplingConfig,
    SignCraftSettings,
    TracingConfig,
    TubeConfig,
    get_default_settings,
)

__all__ = [
    "BackingPlateConfig",
    "ConnectorConfig",
    "ExtrusionConfig",
    "FrameConfig",
    "HolePattern",
    "LithophaneConfig",
    "LoggingConfig",
    "PlateShape",
    "SamplingConfig",
    "SignCraftSettings",
    "TracingConfig",
    "TubeConfig",
    "get_default_settings",
]

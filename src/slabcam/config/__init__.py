"""Configuration management for slabcam.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- CalibrationConfig: Marker calibration settings
- BufferConfig: Safety-margin buffering settings
- MachiningParameters: Immutable per-job machining parameters
- LoggingConfig: Logging settings
- SlabcamSettings: Main application settings
"""

from slabcam.config.settings import (
    BufferConfig,
    CalibrationConfig,
    LoggingConfig,
    MachiningParameters,
    OffsetMethod,
    PathDirection,
    SlabcamSettings,
    get_default_settings,
)

__all__ = [
    "BufferConfig",
    "CalibrationConfig",
    "LoggingConfig",
    "MachiningParameters",
    "OffsetMethod",
    "PathDirection",
    "SlabcamSettings",
    "get_default_settings",
]

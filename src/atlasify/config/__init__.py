"""Configuration management for atlasify.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- FlattenConfig: Curve flattening tolerance and depth bound
- ProjectionConfig: Inverse projection solver settings
- DocumentConfig: Drawing structure (rim and shape group ids)
- ProcessingConfig: Worker pool and ring post-processing settings
- OutputConfig: GeoJSON and mapshaper settings
- LoggingConfig: Logging settings
- AtlasifySettings: Main application settings
"""

from atlasify.config.settings import (
    AtlasifySettings,
    DocumentConfig,
    FlattenConfig,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
    ProjectionConfig,
    get_default_settings,
)

__all__ = [
    "AtlasifySettings",
    "DocumentConfig",
    "FlattenConfig",
    "LoggingConfig",
    "OutputConfig",
    "ProcessingConfig",
    "ProjectionConfig",
    "get_default_settings",
]

"""Configuration settings for Atlasify."""

from pathlib import Path

from pydantic import BaseModel, Field


class FlattenConfig(BaseModel):
    """Configuration for cubic curve flattening.

    The tolerance is expressed in squared drawing units and compared against
    the control-polygon deviation of each sub-curve.
    """

    tolerance: float = Field(
        default=0.01,
        gt=0.0,
        description="Maximum squared deviation before a curve is subdivided",
    )
    max_depth: int = Field(
        default=24,
        ge=0,
        le=64,
        description="Maximum subdivision depth for degenerate curves",
    )


class ProjectionConfig(BaseModel):
    """Configuration for the inverse Winkel Tripel solver."""

    epsilon: float = Field(
        default=1e-12,
        gt=0.0,
        description="Residual bound for convergence and origin shortcut",
    )
    max_iterations: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Newton-Raphson iteration cap",
    )


class DocumentConfig(BaseModel):
    """Where the map content lives inside the drawing."""

    rim_id: str = Field(
        default="Rim",
        description="Id of the element outlining the projected globe",
    )
    group_ids: list[str] = Field(
        default_factory=lambda: ["Country_Shapes", "Substate_Shapes"],
        description="Ids of the groups holding region shapes",
    )
    ignored_id_prefixes: list[str] = Field(
        default_factory=lambda: ["_x2A_", "Islands_", "Mainland_", "_x3C_Path_x3E"],
        description="Element ids with these prefixes never name a region",
    )
    excluded_id_suffix: str = Field(
        default="_x2B_",
        description="Shapes whose naming id ends with this suffix are skipped",
    )


class ProcessingConfig(BaseModel):
    """Configuration for map processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )
    unloop_rings: bool = Field(
        default=False,
        description="Collapse each projected ring to its largest simple face",
    )


class OutputConfig(BaseModel):
    """Configuration for GeoJSON output."""

    indent: int | None = Field(
        default=2,
        description="JSON indentation (None = compact)",
    )
    run_mapshaper: bool = Field(
        default=False,
        description="Clean the output with mapshaper",
    )
    mapshaper_command: str = Field(
        default="mapshaper",
        description="mapshaper executable",
    )
    mapshaper_args: list[str] = Field(
        default_factory=lambda: [
            "-clean",
            "allow-empty",
            "rewind",
            "gap-fill-area=0",
            "snap-interval=0.005",
        ],
        description="Arguments placed between the input and the -o option",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class AtlasifySettings(BaseModel):
    """Main application settings."""

    flatten: FlattenConfig = Field(default_factory=FlattenConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    document: DocumentConfig = Field(default_factory=DocumentConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> AtlasifySettings:
    """Get default application settings."""
    return AtlasifySettings()

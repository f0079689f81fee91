"""Configuration settings for Slabcam."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class PathDirection(str, Enum):
    """Requested sweep direction for surfacing passes."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    AUTO = "auto"


class OffsetMethod(str, Enum):
    """Vertex displacement method used when buffering a contour."""

    BISECTOR = "bisector"
    CENTROID = "centroid"


class CalibrationConfig(BaseModel):
    """Configuration for the pixel to machine calibration."""

    apply_rotation: bool = Field(
        default=True,
        description="Derive orientation from the X-axis marker (False forces 0 rad)",
    )
    min_marker_distance_px: float = Field(
        default=10.0,
        gt=0.0,
        description="Minimum pixel distance between origin and the other markers",
    )
    min_axis_sine: float = Field(
        default=0.1,
        gt=0.0,
        lt=1.0,
        description="Minimum sine of the angle between the X-axis and scale marker directions",
    )


class BufferConfig(BaseModel):
    """Configuration for contour buffering (safety margin)."""

    method: OffsetMethod = Field(
        default=OffsetMethod.BISECTOR,
        description="Vertex displacement method",
    )
    simplify_base_epsilon: float = Field(
        default=0.5,
        ge=0.0,
        description="Douglas-Peucker tolerance applied after buffering (mm)",
    )
    simplify_margin_factor: float = Field(
        default=0.05,
        ge=0.0,
        description="Additional tolerance per mm of margin",
    )
    miter_limit: float = Field(
        default=4.0,
        ge=1.0,
        le=20.0,
        description="Maximum corner displacement as a multiple of the margin",
    )

    def simplify_epsilon(self, distance: float) -> float:
        """Get the simplification tolerance for a buffer distance.

        Args:
            distance: Buffer distance in mm

        Returns:
            Douglas-Peucker epsilon in mm
        """
        return self.simplify_base_epsilon + distance * self.simplify_margin_factor


class MachiningParameters(BaseModel):
    """Machining parameters for one surfacing job.

    Immutable: a job receives one value and never writes back to it.
    Cutting depth is a magnitude; the emitter derives the negative Z itself.
    """

    model_config = ConfigDict(frozen=True)

    safety_height_mm: float = Field(default=10.0, gt=0.0, description="Retract height")
    feed_rate_mm_per_min: float = Field(default=1000.0, gt=0.0, description="Cutting feed")
    plunge_rate_mm_per_min: float = Field(default=500.0, gt=0.0, description="Plunge feed")
    cutting_depth_mm: float = Field(default=1.0, ge=0.0, description="Total depth to remove")
    depth_passes: int = Field(default=1, ge=1, description="Number of depth levels")
    tool_diameter_mm: float = Field(default=25.4, gt=0.0, description="Cutter diameter")
    stepover_mm: float = Field(
        default=0.0,
        ge=0.0,
        description="Distance between passes (0 = 75% of tool diameter)",
    )
    spindle_speed_rpm: int = Field(default=18000, ge=0, description="Spindle speed")
    margin_mm: float = Field(default=0.0, ge=0.0, description="Safety margin around the slab")
    path_direction: PathDirection = Field(
        default=PathDirection.AUTO,
        description="Sweep direction",
    )
    bridge_gaps: bool = Field(
        default=True,
        description="Cut each pass straight across gaps instead of lifting over them",
    )
    return_to_home: bool = Field(
        default=True,
        description="Rapid to X0 Y0 at the end of the program",
    )

    @property
    def effective_stepover_mm(self) -> float:
        """Stepover actually used between passes."""
        if self.stepover_mm > 0:
            return self.stepover_mm
        return 0.75 * self.tool_diameter_mm

    @property
    def depth_per_pass_mm(self) -> float:
        """Depth removed by each depth level."""
        return self.cutting_depth_mm / self.depth_passes

    def depth_levels(self) -> list[float]:
        """Z target of every depth level, shallowest first.

        Returns:
            Negative (or zero) Z values, one per depth pass
        """
        step = self.depth_per_pass_mm
        return [-(step * k) + 0.0 for k in range(1, self.depth_passes + 1)]


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


class SlabcamSettings(BaseModel):
    """Main application settings."""

    calibration: CalibrationConfig = Field(default_factory=CalibrationConfig)
    buffer: BufferConfig = Field(default_factory=BufferConfig)
    machining: MachiningParameters = Field(default_factory=MachiningParameters)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> SlabcamSettings:
    """Get default application settings."""
    return SlabcamSettings()

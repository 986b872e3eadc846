"""Configuration settings for SignCraft."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

MIN_HOLE_SPACING = 1.0


class PlateShape(str, Enum):
    """Outline of a backing plate."""

    RECTANGLE = "rectangle"
    ROUNDED_RECT = "rounded-rect"
    SQUARE = "square"
    CIRCLE = "circle"
    HEXAGON = "hexagon"


class HolePattern(str, Enum):
    """Mounting hole layout policy."""

    NONE = "none"
    CORNERS = "corners"
    GRID = "grid"
    PERIMETER = "perimeter"


class SamplingConfig(BaseModel):
    """Configuration for curve flattening."""

    resolution: int = Field(
        default=100,
        description="Curve resolution; fixed sampling uses max(10, resolution // 10) steps",
    )
    adaptive_tolerance: float | None = Field(
        default=None,
        description="Max chord deviation for adaptive Bezier flattening (None = fixed-step)",
    )
    simplify_tolerance: float = Field(
        default=0.5,
        description="Douglas-Peucker tolerance applied after sampling",
    )

    @field_validator("resolution")
    @classmethod
    def _clamp_resolution(cls, value: int) -> int:
        return max(1, min(value, 10_000))

    @field_validator("adaptive_tolerance")
    @classmethod
    def _positive_tolerance(cls, value: float | None) -> float | None:
        if value is None or value <= 0:
            return None
        return value

    @field_validator("simplify_tolerance")
    @classmethod
    def _clamp_simplify(cls, value: float) -> float:
        return max(0.0, value)


class TracingConfig(BaseModel):
    """Configuration for raster thresholding, thinning and contour tracing."""

    threshold: int = Field(
        default=128,
        description="8-bit threshold; darker pixels are foreground",
    )
    min_contour_length: int = Field(
        default=10,
        description="Contours with this many points or fewer are discarded as noise",
    )
    max_resolution: int = Field(
        default=512,
        description="Images are downscaled so neither side exceeds this many pixels",
    )
    max_thinning_iterations: int = Field(
        default=1000,
        description="Safety cap on Zhang-Suen passes",
    )
    pixel_size: float = Field(
        default=0.5,
        description="Millimeters per raster pixel when converting traced paths",
    )

    @field_validator("threshold")
    @classmethod
    def _clamp_threshold(cls, value: int) -> int:
        return max(0, min(value, 255))

    @field_validator("min_contour_length", "max_thinning_iterations")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        return max(0, value)

    @field_validator("max_resolution")
    @classmethod
    def _clamp_resolution(cls, value: int) -> int:
        return max(16, min(value, 2048))

    @field_validator("pixel_size")
    @classmethod
    def _positive_pixel(cls, value: float) -> float:
        return value if value > 0 else 0.5


class ConnectorConfig(BaseModel):
    """Configuration for stitching stroke paths into continuous paths."""

    max_gap_distance: float = Field(
        default=50.0,
        description="Endpoints further apart than this start a new continuous path",
    )
    simplify_tolerance: float = Field(
        default=0.5,
        description="Douglas-Peucker tolerance applied to each bridge curve",
    )
    bridge_segments: int = Field(
        default=10,
        description="Samples along each Bezier bridge",
    )

    @field_validator("max_gap_distance", "simplify_tolerance")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return max(0.0, value)

    @field_validator("bridge_segments")
    @classmethod
    def _min_segments(cls, value: int) -> int:
        return max(1, value)


class TubeConfig(BaseModel):
    """Configuration for tubes swept along centerlines."""

    radius: float = Field(default=3.0, description="Tube radius in mm")
    segments: int = Field(default=12, description="Facets around the tube")
    capped: bool = Field(default=True, description="Close tube ends")

    @field_validator("radius")
    @classmethod
    def _positive_radius(cls, value: float) -> float:
        return value if value > 0 else 3.0

    @field_validator("segments")
    @classmethod
    def _min_segments(cls, value: int) -> int:
        return max(3, value)


class ExtrusionConfig(BaseModel):
    """Configuration for solid extrusion of outlines."""

    depth: float = Field(default=5.0, description="Extrusion depth in mm")
    scale: float = Field(default=1.0, description="Scale applied to input coordinates")

    @field_validator("depth", "scale")
    @classmethod
    def _positive(cls, value: float) -> float:
        return value if value > 0 else 1.0


class BackingPlateConfig(BaseModel):
    """Settings record for a mounting plate with holes."""

    shape: PlateShape = Field(default=PlateShape.RECTANGLE, description="Plate outline")
    width: float = Field(default=200.0, description="Plate width in mm")
    height: float = Field(default=100.0, description="Plate height in mm")
    thickness: float = Field(default=3.0, description="Plate thickness in mm")
    corner_radius: float = Field(default=0.0, description="Corner radius in mm for rounded-rect plates")
    hole_pattern: HolePattern = Field(default=HolePattern.CORNERS, description="Hole layout")
    hole_diameter: float = Field(default=4.0, description="Hole diameter in mm")
    hole_inset: float = Field(default=10.0, description="Hole distance from the plate edge in mm")
    grid_spacing: float = Field(default=50.0, description="Hole pitch for grid/perimeter layouts")
    segments: int = Field(default=32, description="Facets used for round outlines")
    hole_segments: int = Field(default=16, description="Facets used for each hole wall")

    @field_validator("width", "height", "thickness")
    @classmethod
    def _positive_dimension(cls, value: float) -> float:
        return max(value, 0.1)

    @field_validator("corner_radius", "hole_diameter", "hole_inset")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return max(value, 0.0)

    @field_validator("grid_spacing")
    @classmethod
    def _positive_spacing(cls, value: float) -> float:
        return max(value, MIN_HOLE_SPACING)

    @field_validator("segments", "hole_segments")
    @classmethod
    def _min_segments(cls, value: int) -> int:
        return max(3, value)


class FrameConfig(BaseModel):
    """Rectangular frame around a heightfield."""

    thickness: float = Field(default=3.0, description="Frame width outward from the edge in mm")
    depth: float = Field(default=6.0, description="Frame height in mm")


class LithophaneConfig(BaseModel):
    """Settings record for luminance heightfields."""

    base_thickness: float = Field(default=0.8, description="Thickness of the brightest pixel in mm")
    max_depth: float = Field(default=2.4, description="Extra thickness of the darkest pixel in mm")
    width: float = Field(default=100.0, description="Physical width in mm")
    height: float = Field(default=100.0, description="Physical height in mm")
    invert: bool = Field(default=False, description="Invert luminance before mapping to depth")
    smoothing: int = Field(default=0, description="Gaussian blur kernel radius in samples")
    add_frame: bool = Field(default=False, description="Emit a frame around the perimeter")
    frame_thickness: float = Field(default=3.0, description="Frame width in mm")
    max_resolution: int = Field(default=200, description="Max samples across the image width")

    @field_validator("base_thickness", "max_depth", "frame_thickness")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return max(value, 0.0)

    @field_validator("width", "height")
    @classmethod
    def _positive_dimension(cls, value: float) -> float:
        return max(value, 1.0)

    @field_validator("smoothing")
    @classmethod
    def _clamp_smoothing(cls, value: int) -> int:
        return max(0, min(value, 10))

    @field_validator("max_resolution")
    @classmethod
    def _clamp_resolution(cls, value: int) -> int:
        return max(2, min(value, 1000))

    def frame(self) -> FrameConfig | None:
        """Frame settings, or None when the frame is disabled."""
        if not self.add_frame:
            return None
        return FrameConfig(
            thickness=self.frame_thickness,
            depth=self.base_thickness + self.max_depth,
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


class SignCraftSettings(BaseModel):
    """Main application settings."""

    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    connector: ConnectorConfig = Field(default_factory=ConnectorConfig)
    tube: TubeConfig = Field(default_factory=TubeConfig)
    extrusion: ExtrusionConfig = Field(default_factory=ExtrusionConfig)
    plate: BackingPlateConfig = Field(default_factory=BackingPlateConfig)
    lithophane: LithophaneConfig = Field(default_factory=LithophaneConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> SignCraftSettings:
    """Get default application settings."""
    return SignCraftSettings()

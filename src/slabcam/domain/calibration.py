"""Calibration types linking image pixels to machine millimetres.

The three physical markers establish the machine frame: the origin marker
is machine (0, 0), the X-axis marker lies on +X, and the scale marker lies
on +Y. Image pixels grow downward while machine Y grows upward.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from slabcam.domain.contour import Contour, Point


class MarkerRole(str, Enum):
    """Role of a calibration marker."""

    ORIGIN = "origin"
    X_AXIS = "x_axis"
    SCALE = "scale"


@dataclass(frozen=True, slots=True)
class MarkerPoint:
    """A detected marker position in pixel space.

    Attributes:
        x: Pixel column
        y: Pixel row (grows downward)
        role: Which marker this is
    """

    x: int
    y: int
    role: MarkerRole

    def to_point(self) -> Point:
        """Pixel position as a Point."""
        return Point(float(self.x), float(self.y))


@dataclass(frozen=True)
class MarkerDetectionResult:
    """Markers delivered by the external marker detector.

    Attributes:
        markers: Detected markers, expected one per role
        debug_artifact: Opaque detector output, never inspected here
    """

    markers: tuple[MarkerPoint, ...]
    debug_artifact: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class MachineCoordinateSystem:
    """Affine pixel <-> machine mapping derived from the markers.

    Attributes:
        origin_px: Pixel position of the origin marker
        orientation_rad: Angle of the X-axis marker in pixel space, in (-pi, pi]
        pixel_to_mm_ratio: Millimetres per pixel, always positive
    """

    origin_px: Point
    orientation_rad: float
    pixel_to_mm_ratio: float

    def __post_init__(self) -> None:
        if not self.pixel_to_mm_ratio > 0:
            raise ValueError(f"pixel_to_mm_ratio must be positive, got {self.pixel_to_mm_ratio}")
        if not -math.pi < self.orientation_rad <= math.pi:
            raise ValueError(f"orientation_rad must be in (-pi, pi], got {self.orientation_rad}")

    def pixel_to_machine(self, point: Point) -> Point:
        """Convert a pixel point to machine millimetres.

        Translates by the origin, rotates by -orientation in pixel space,
        flips Y to point upward, then scales.
        """
        px = point.x - self.origin_px.x
        py = point.y - self.origin_px.y

        cos_a = math.cos(self.orientation_rad)
        sin_a = math.sin(self.orientation_rad)
        rx = px * cos_a + py * sin_a
        ry = -px * sin_a + py * cos_a

        return Point(rx * self.pixel_to_mm_ratio, -ry * self.pixel_to_mm_ratio)

    def machine_to_pixel(self, point: Point) -> Point:
        """Convert machine millimetres to a pixel point (exact inverse)."""
        rx = point.x / self.pixel_to_mm_ratio
        ry = -point.y / self.pixel_to_mm_ratio

        cos_a = math.cos(self.orientation_rad)
        sin_a = math.sin(self.orientation_rad)
        px = rx * cos_a - ry * sin_a
        py = rx * sin_a + ry * cos_a

        return Point(px + self.origin_px.x, py + self.origin_px.y)

    def pixels_to_machine(self, points: list[Point]) -> list[Point]:
        """Convert a list of pixel points to machine coordinates."""
        return [self.pixel_to_machine(p) for p in points]

    def machine_to_pixels(self, points: list[Point]) -> list[Point]:
        """Convert a list of machine points to pixel coordinates."""
        return [self.machine_to_pixel(p) for p in points]

    def contour_to_machine(self, contour: Contour) -> Contour:
        """Map a pixel contour into machine space."""
        return Contour(points=tuple(self.pixel_to_machine(p) for p in contour.points))

    def verify_round_trip(self, point: Point, tolerance: float = 1e-3) -> bool:
        """Check that a pixel point survives pixel -> machine -> pixel."""
        back = self.machine_to_pixel(self.pixel_to_machine(point))
        return abs(back.x - point.x) < tolerance and abs(back.y - point.y) < tolerance

    @property
    def orientation_degrees(self) -> float:
        """Orientation in degrees, for display."""
        return math.degrees(self.orientation_rad)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "origin_px": self.origin_px.to_dict(),
            "orientation_rad": self.orientation_rad,
            "pixel_to_mm_ratio": self.pixel_to_mm_ratio,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MachineCoordinateSystem":
        """Deserialize from dictionary."""
        return cls(
            origin_px=Point.from_dict(data["origin_px"]),
            orientation_rad=data["orientation_rad"],
            pixel_to_mm_ratio=data["pixel_to_mm_ratio"],
        )

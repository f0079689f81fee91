"""Core geometric types for contour representation.

This module defines the fundamental geometric types used throughout slabcam:
- Point: A 2D point in pixel or machine space
- Contour: A closed outline of the slab, stored without a repeated first point
- SlabContourResult: Contour handed over by the external contour detector
"""

import math
from dataclasses import dataclass, field
from typing import Any

from slabcam.exceptions import InvalidContourError

EPSILON = 1e-10


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate (pixels or mm depending on the space)
        y: Y coordinate (pixels or mm depending on the space)
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def almost_equals(self, other: "Point", tolerance: float = EPSILON) -> bool:
        """Check whether both coordinates match within tolerance."""
        return abs(self.x - other.x) <= tolerance and abs(self.y - other.y) <= tolerance

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class Contour:
    """A closed contour representing the slab boundary.

    The ring is logically closed but stored without duplicating the first
    point. Consumers that need an explicit ring use closed_points().
    A trailing copy of the first point is tolerated and ignored by
    open_points().

    Attributes:
        points: Points forming the contour
    """

    points: tuple[Point, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def is_closed(self) -> bool:
        """Check if the last point repeats the first one."""
        return len(self.points) > 1 and self.points[0].almost_equals(self.points[-1])

    def open_points(self) -> list[Point]:
        """Points of the ring without a repeated closing point."""
        if self.is_closed():
            return list(self.points[:-1])
        return list(self.points)

    def closed_points(self) -> list[Point]:
        """Points of the ring with the first point appended exactly once."""
        points = self.open_points()
        if points:
            points.append(points[0])
        return points

    def validate(self) -> None:
        """Raise if the contour is unusable.

        Raises:
            InvalidContourError: If fewer than 3 distinct points remain
        """
        distinct = len(set(self.open_points()))
        if distinct < 3:
            raise InvalidContourError(
                f"Contour needs at least 3 distinct points, got {distinct}"
            )

    def signed_area(self) -> float:
        """Calculate signed area using shoelace formula.

        The sign of the area indicates winding direction:
        - Positive area: counter-clockwise winding (y-up)
        - Negative area: clockwise winding (y-up)

        Returns:
            Signed area of the contour
        """
        points = self.open_points()
        n = len(points)
        if n < 3:
            return 0.0

        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += points[i].x * points[j].y
            area -= points[j].x * points[i].y

        return area / 2.0

    def area(self) -> float:
        """Unsigned enclosed area."""
        return abs(self.signed_area())

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the contour.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)

        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]

        return (min(xs), min(ys), max(xs), max(ys))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary representation of the contour
        """
        return {"points": [p.to_dict() for p in self.points]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contour":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a contour

        Returns:
            Contour instance
        """
        return cls(points=tuple(Point.from_dict(p) for p in data["points"]))

    @classmethod
    def from_tuples(cls, coords: list[tuple[float, float]]) -> "Contour":
        """Build a contour from (x, y) pairs."""
        return cls(points=tuple(Point(float(x), float(y)) for x, y in coords))


@dataclass(frozen=True)
class SlabContourResult:
    """Slab outline as delivered by the external contour detector.

    Attributes:
        pixel_contour: Contour in image pixel coordinates
        machine_contour: Same contour already mapped to machine mm, if the
            detector performed the transform itself
    """

    pixel_contour: Contour
    machine_contour: Contour | None = None

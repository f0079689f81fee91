"""Toolpath types produced by the planner and consumed by the emitter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from slabcam.domain.contour import Point


class SweepAxis(str, Enum):
    """Resolved sweep direction of a toolpath.

    HORIZONTAL passes run along X at constant Y; VERTICAL passes run along Y
    at constant X.
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box in machine millimetres."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @classmethod
    def from_points(cls, points: list[Point]) -> "BoundingBox":
        """Smallest box containing all points.

        Raises:
            ValueError: If points is empty
        """
        if not points:
            raise ValueError("Cannot compute bounding box of no points")
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class ToolpathPass:
    """One sweep across the slab.

    Points are stored as consecutive (start, end) pairs; each pair is one cut
    segment. A bridged pass holds exactly one pair, an unbridged pass may
    hold several separated by gaps outside the material.

    Attributes:
        index: Sweep-line index the pass was generated from
        coordinate: Constant coordinate of the sweep (Y or X)
        points: Segment endpoints in cutting order
    """

    index: int
    coordinate: float
    points: tuple[Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    def segments(self) -> list[tuple[Point, Point]]:
        """Cut segments as (start, end) pairs."""
        return [(self.points[i], self.points[i + 1]) for i in range(0, len(self.points) - 1, 2)]

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    def cut_length(self) -> float:
        """Total length of the cut segments (gaps excluded)."""
        return sum(a.distance_to(b) for a, b in self.segments())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "index": self.index,
            "coordinate": self.coordinate,
            "points": [p.to_dict() for p in self.points],
        }


@dataclass(frozen=True)
class Toolpath:
    """Ordered surfacing passes for a single depth level.

    The emitter repeats the same passes at every depth level.

    Attributes:
        passes: Passes in increasing sweep index order
        axis: Resolved sweep direction
        bounding_box: Box the sweep lines were generated over
        stepover: Distance between adjacent sweep lines
        bridge_gaps: Whether passes were bridged across gaps
    """

    passes: tuple[ToolpathPass, ...]
    axis: SweepAxis
    bounding_box: BoundingBox
    stepover: float
    bridge_gaps: bool = True
    skipped_lines: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "passes", tuple(self.passes))

    def __len__(self) -> int:
        return len(self.passes)

    def __iter__(self):
        return iter(self.passes)

    def is_empty(self) -> bool:
        return not self.passes

    def all_points(self) -> list[Point]:
        """Every pass point in cutting order."""
        return [p for toolpath_pass in self.passes for p in toolpath_pass.points]

    def segment_count(self) -> int:
        return sum(len(p.segments()) for p in self.passes)

    def cut_length(self) -> float:
        """Cut length of one depth level."""
        return sum(p.cut_length() for p in self.passes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "axis": self.axis.value,
            "bounding_box": [
                self.bounding_box.min_x,
                self.bounding_box.min_y,
                self.bounding_box.max_x,
                self.bounding_box.max_y,
            ],
            "stepover": self.stepover,
            "bridge_gaps": self.bridge_gaps,
            "passes": [p.to_dict() for p in self.passes],
        }

"""Safety-margin buffering of slab contours.

Grows a closed contour outward by a margin so the cutter clears the slab
edge. This is an approximation of a Minkowski sum: every vertex is pushed
independently, after which near-collinear vertices introduced by the push
are removed with Douglas-Peucker. Self-intersections caused by buffering
tight concave notches are not detected or repaired.

Vertex displacement is pluggable:
- BisectorOffset: push along the angle bisector (default)
- CentroidOffset: push radially away from the vertex centroid

Key classes:
- OffsetStrategy: Protocol implemented by displacement methods
- PolygonBuffer: Normalises winding, displaces, closes and simplifies
"""

import math
from typing import Protocol

from slabcam.config import BufferConfig, OffsetMethod
from slabcam.core.geometry import (
    EPSILON,
    centroid,
    close_ring,
    ensure_counter_clockwise,
    simplify,
)
from slabcam.domain import Contour, Point

# Below this bisector length the vertex is treated as straight.
BISECTOR_GUARD = 1e-6


class OffsetStrategy(Protocol):
    """Displaces the vertices of a counter-clockwise ring outward."""

    def offset(self, ring: list[Point], distance: float) -> list[Point]:
        """Return the displaced open ring (may drop degenerate vertices)."""
        ...


class BisectorOffset:
    """Moves each vertex along its angle bisector.

    The bisector foot is found by interpolating between the neighbours
    weighted by the adjacent edge lengths (angle bisector theorem), which
    avoids any trigonometry. Convex vertices move away from the foot and
    reflex vertices toward it; on a counter-clockwise ring both directions
    point out of the material. The displacement is stretched by
    1/sin(half angle) so straight edges end up exactly `distance` away,
    capped at `miter_limit` times the distance.
    """

    def __init__(self, miter_limit: float = 4.0) -> None:
        self.miter_limit = miter_limit

    def offset(self, ring: list[Point], distance: float) -> list[Point]:
        n = len(ring)
        result: list[Point] = []

        for i in range(n):
            prev = ring[i - 1]
            curr = ring[i]
            nxt = ring[(i + 1) % n]

            d1 = curr.distance_to(prev)
            d2 = curr.distance_to(nxt)
            if d1 < EPSILON or d2 < EPSILON:
                continue

            weight = d1 / (d1 + d2)
            foot_x = prev.x + (nxt.x - prev.x) * weight
            foot_y = prev.y + (nxt.y - prev.y) * weight

            vx = foot_x - curr.x
            vy = foot_y - curr.y
            length = math.hypot(vx, vy)

            if length < BISECTOR_GUARD:
                # Straight vertex: use the outward normal of prev -> next.
                cx = nxt.x - prev.x
                cy = nxt.y - prev.y
                chord = math.hypot(cx, cy)
                if chord < EPSILON:
                    continue
                ux, uy = cy / chord, -cx / chord
                stretch = 1.0
            else:
                ux, uy = vx / length, vy / length
                cross = (nxt.x - curr.x) * (curr.y - prev.y) - (nxt.y - curr.y) * (curr.x - prev.x)
                if cross < 0:
                    ux, uy = -ux, -uy

                ex = (prev.x - curr.x) / d1
                ey = (prev.y - curr.y) / d1
                sin_half = abs(ex * uy - ey * ux)
                stretch = min(1.0 / max(sin_half, EPSILON), self.miter_limit)

            step = distance * stretch
            result.append(Point(curr.x + ux * step, curr.y + uy * step))

        return result


class CentroidOffset:
    """Moves each vertex radially away from the vertex centroid.

    Only sensible for roughly convex, star-shaped outlines; concave bays are
    pushed sideways rather than outward.
    """

    def offset(self, ring: list[Point], distance: float) -> list[Point]:
        center = centroid(ring)
        result: list[Point] = []

        for point in ring:
            vx = point.x - center.x
            vy = point.y - center.y
            length = math.hypot(vx, vy)
            if length < BISECTOR_GUARD:
                result.append(point)
                continue
            result.append(Point(point.x + vx / length * distance, point.y + vy / length * distance))

        return result


def get_offset_strategy(method: OffsetMethod, config: BufferConfig | None = None) -> OffsetStrategy:
    """Build the displacement strategy for a configured method.

    Args:
        method: Requested method
        config: Buffer settings supplying strategy parameters

    Returns:
        A new strategy instance

    Raises:
        ValueError: If the method is unknown
    """
    config = config or BufferConfig()
    if method == OffsetMethod.BISECTOR:
        return BisectorOffset(miter_limit=config.miter_limit)
    if method == OffsetMethod.CENTROID:
        return CentroidOffset()
    raise ValueError(f"Unknown offset method: {method}")


class PolygonBuffer:
    """Expands closed contours by a margin.

    Example:
        buffer = PolygonBuffer()
        expanded = buffer.buffer(contour, 10.0)
    """

    def __init__(
        self,
        config: BufferConfig | None = None,
        strategy: OffsetStrategy | None = None,
    ) -> None:
        """Initialize the buffer.

        Args:
            config: Buffer settings (defaults when None)
            strategy: Displacement strategy; built from config.method when None
        """
        self.config = config or BufferConfig()
        self.strategy = strategy or get_offset_strategy(self.config.method, self.config)

    def buffer(self, contour: Contour, distance: float) -> Contour:
        """Grow a contour by distance.

        Args:
            contour: Closed contour (open or explicitly closed storage)
            distance: Margin in mm; zero or negative leaves the contour as is

        Returns:
            Buffered contour stored as an explicitly closed ring, or the
            input unchanged when distance <= 0 or fewer than 3 usable
            vertices exist
        """
        if distance <= 0:
            return contour

        ring = _drop_repeated(ensure_counter_clockwise(contour.open_points()))
        if len(ring) < 3:
            return contour

        displaced = self.strategy.offset(ring, distance)
        if len(displaced) < 3:
            return contour

        simplified = simplify(close_ring(displaced), self.config.simplify_epsilon(distance))
        if len(simplified) < 4:
            return Contour(points=tuple(close_ring(displaced)))

        return Contour(points=tuple(simplified))


def _drop_repeated(ring: list[Point]) -> list[Point]:
    """Remove consecutive duplicate vertices (including across the seam)."""
    result: list[Point] = []
    for point in ring:
        if result and point.almost_equals(result[-1], EPSILON):
            continue
        result.append(point)
    while len(result) > 1 and result[0].almost_equals(result[-1], EPSILON):
        result.pop()
    return result


def buffer_polygon(
    contour: Contour,
    margin_mm: float,
    config: BufferConfig | None = None,
) -> Contour:
    """Grow a contour by a safety margin (functional entry point)."""
    return PolygonBuffer(config).buffer(contour, margin_mm)

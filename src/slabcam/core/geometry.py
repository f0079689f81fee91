"""Geometric operations for contour buffering and toolpath planning.

This module provides core mathematical utilities for:
- Signed area calculation (shoelace formula)
- Ring closure and winding normalisation
- Line segment intersection parameters
- Point-to-segment distance
- Douglas-Peucker polyline simplification

All functions are pure and stateless.
"""

import math

from slabcam.domain import Point

EPSILON = 1e-10


def signed_area(points: list[Point]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    The sign of the area indicates winding direction (y-up):
    - Positive area: counter-clockwise winding
    - Negative area: clockwise winding

    A repeated closing point contributes nothing and may be present.

    Args:
        points: List of points forming the polygon boundary

    Returns:
        Signed area in square units. Returns 0.0 for degenerate polygons.

    Examples:
        >>> p1 = Point(0.0, 0.0)
        >>> p2 = Point(1.0, 0.0)
        >>> p3 = Point(1.0, 1.0)
        >>> p4 = Point(0.0, 1.0)
        >>> signed_area([p1, p2, p3, p4])  # CCW square
        1.0
        >>> signed_area([p1, p4, p3, p2])  # CW square
        -1.0
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


def open_ring(points: list[Point]) -> list[Point]:
    """Drop a trailing point that repeats the first one."""
    if len(points) > 1 and points[0].almost_equals(points[-1], EPSILON):
        return list(points[:-1])
    return list(points)


def close_ring(points: list[Point]) -> list[Point]:
    """Append the first point to the end unless already closed."""
    ring = open_ring(points)
    if ring:
        ring.append(ring[0])
    return ring


def ensure_counter_clockwise(points: list[Point]) -> list[Point]:
    """Return the ring (open form) wound counter-clockwise.

    Args:
        points: Open or closed ring

    Returns:
        Open ring with positive signed area (input order kept if already CCW)
    """
    ring = open_ring(points)
    if signed_area(ring) < 0:
        ring.reverse()
    return ring


def centroid(points: list[Point]) -> Point:
    """Arithmetic mean of the ring's vertices.

    Raises:
        ValueError: If points is empty
    """
    ring = open_ring(points)
    if not ring:
        raise ValueError("Cannot compute centroid of no points")
    return Point(
        sum(p.x for p in ring) / len(ring),
        sum(p.y for p in ring) / len(ring),
    )


def intersection_parameters(
    p1: Point, p2: Point, p3: Point, p4: Point
) -> tuple[float, float] | None:
    """Parametric positions where line p1-p2 meets line p3-p4.

    Returns (ua, ub) such that the intersection is p1 + ua*(p2-p1) and
    p3 + ub*(p4-p3). Returns None for parallel or coincident lines.
    """
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    x3, y3 = p3.x, p3.y
    x4, y4 = p4.x, p4.y

    denom = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)

    if abs(denom) < EPSILON:
        return None

    ua = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denom
    ub = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denom

    return ua, ub


def nearest_point_on_segment(point: Point, seg_start: Point, seg_end: Point) -> tuple[Point, float]:
    """Find the closest point on a line segment to a given point.

    Projects the point onto the infinite line, then clamps the projection
    parameter to [0, 1] so that points beyond either end measure to the
    nearest endpoint.

    Args:
        point: The point to project
        seg_start: Start point of line segment
        seg_end: End point of line segment

    Returns:
        Tuple of (nearest_point, distance)
    """
    dx = seg_end.x - seg_start.x
    dy = seg_end.y - seg_start.y

    segment_length_sq = dx * dx + dy * dy
    if segment_length_sq < EPSILON:
        return seg_start, math.hypot(point.x - seg_start.x, point.y - seg_start.y)

    t = ((point.x - seg_start.x) * dx + (point.y - seg_start.y) * dy) / segment_length_sq
    t = max(0.0, min(1.0, t))

    nearest_x = seg_start.x + t * dx
    nearest_y = seg_start.y + t * dy

    return Point(nearest_x, nearest_y), math.hypot(point.x - nearest_x, point.y - nearest_y)


def perpendicular_distance(point: Point, seg_start: Point, seg_end: Point) -> float:
    """Distance from point to the segment seg_start-seg_end."""
    _, distance = nearest_point_on_segment(point, seg_start, seg_end)
    return distance


def simplify(points: list[Point], epsilon: float) -> list[Point]:
    """Simplify a polyline with the Douglas-Peucker algorithm.

    Keeps the point farthest from the chord between the current ends while
    that distance exceeds epsilon, otherwise collapses the run to its ends.
    Works on closed rings too: the ring's first and last points are kept.

    Implemented with an explicit stack so long contours cannot exhaust the
    interpreter's recursion limit.

    Args:
        points: Polyline to simplify
        epsilon: Maximum allowed deviation

    Returns:
        Simplified polyline (a subsequence of the input)
    """
    n = len(points)
    if n <= 2:
        return list(points)

    keep = [False] * n
    keep[0] = True
    keep[n - 1] = True

    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        max_distance = 0.0
        index = first
        for i in range(first + 1, last):
            distance = perpendicular_distance(points[i], points[first], points[last])
            if distance > max_distance:
                max_distance = distance
                index = i

        if max_distance > epsilon:
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    return [p for p, kept in zip(points, keep, strict=True) if kept]

"""Zigzag surfacing toolpath planning.

Sweeps parallel lines across the contour's bounding box at the effective
stepover, intersects each line with the contour, and turns the crossings
into cut segments:

- With gap bridging, a pass runs straight from the first to the last
  crossing. Concave bays and U-shapes are cut across in one move, trading
  strict containment for fewer repositioning moves.
- Without gap bridging, crossings are paired in ascending order
  (0-1, 2-3, ...) so each segment stays inside the material; the gaps
  between pairs are left for the emitter to bridge with
  retract-and-reposition moves.

Passes alternate direction by sweep index to form the zigzag. Odd passes
reverse the finished spans, so pairing never depends on the direction.

Key classes:
- ToolpathPlanner: Plans a Toolpath for one contour and parameter set
"""

import math

from slabcam.config import MachiningParameters, PathDirection
from slabcam.core.buffer import PolygonBuffer
from slabcam.core.geometry import EPSILON, intersection_parameters
from slabcam.domain import BoundingBox, Contour, Point, SweepAxis, Toolpath, ToolpathPass
from slabcam.exceptions import EmptyToolpathError

# Tolerance on the edge parameter and on the last sweep coordinate.
PARAM_TOLERANCE = 1e-9


def resolve_axis(direction: PathDirection, bbox: BoundingBox) -> SweepAxis:
    """Resolve the requested direction against the contour's extents.

    Auto chooses horizontal passes when the box is at least as wide as it
    is tall, so the passes run along the longer side.
    """
    if direction == PathDirection.HORIZONTAL:
        return SweepAxis.HORIZONTAL
    if direction == PathDirection.VERTICAL:
        return SweepAxis.VERTICAL
    if bbox.width >= bbox.height:
        return SweepAxis.HORIZONTAL
    return SweepAxis.VERTICAL


def sweep_intersections(
    ring: list[Point],
    axis: SweepAxis,
    coordinate: float,
    bbox: BoundingBox,
) -> list[float]:
    """Crossings of a sweep line with a closed ring.

    Args:
        ring: Closed ring (first point repeated at the end)
        axis: HORIZONTAL for a line y = coordinate, VERTICAL for x = coordinate
        coordinate: Constant coordinate of the sweep line
        bbox: Bounding box of the ring, used to size the sweep segment

    Returns:
        Unsorted positions along the sweep line (X for horizontal, Y for
        vertical). A vertex where the ring crosses the line is reported
        once; a vertex that only touches the line is reported twice so the
        in/out pairing stays consistent.
    """
    if axis == SweepAxis.HORIZONTAL:
        line_start = Point(bbox.min_x - 1.0, coordinate)
        line_end = Point(bbox.max_x + 1.0, coordinate)
    else:
        line_start = Point(coordinate, bbox.min_y - 1.0)
        line_end = Point(coordinate, bbox.max_y + 1.0)

    vertex_count = len(ring) - 1
    values: list[float] = []
    vertex_hits: dict[int, list[float]] = {}

    for i in range(vertex_count):
        edge_start = ring[i]
        edge_end = ring[i + 1]

        params = intersection_parameters(line_start, line_end, edge_start, edge_end)
        if params is None:
            continue

        ua, ub = params
        if not (0.0 <= ua <= 1.0 and -PARAM_TOLERANCE <= ub <= 1.0 + PARAM_TOLERANCE):
            continue

        ub = min(1.0, max(0.0, ub))
        if axis == SweepAxis.HORIZONTAL:
            value = edge_start.x + ub * (edge_end.x - edge_start.x)
        else:
            value = edge_start.y + ub * (edge_end.y - edge_start.y)

        if ub <= PARAM_TOLERANCE:
            vertex_hits.setdefault(i, []).append(value)
        elif ub >= 1.0 - PARAM_TOLERANCE:
            vertex_hits.setdefault((i + 1) % vertex_count, []).append(value)
        else:
            values.append(value)

    on_line = [abs(_offset(ring[i], axis, coordinate)) <= PARAM_TOLERANCE for i in range(vertex_count)]
    for start, end in _collinear_runs(on_line):
        before = _offset(ring[(start - 1) % vertex_count], axis, coordinate)
        after = _offset(ring[(end + 1) % vertex_count], axis, coordinate)
        if before * after < 0:
            # An edge lying on the line where the ring passes through is one
            # crossing. Keep the end on the low side, as if the line ran just
            # below the edge.
            vertex_hits.pop(end if before < 0 else start, None)

    for vertex, hits in vertex_hits.items():
        if len(hits) >= 2 and _crosses_at_vertex(ring, vertex, axis, coordinate):
            values.append(hits[0])
        else:
            values.extend(hits)

    return values


def _offset(point: Point, axis: SweepAxis, coordinate: float) -> float:
    """Signed distance of a point from the sweep line."""
    if axis == SweepAxis.HORIZONTAL:
        return point.y - coordinate
    return point.x - coordinate


def _crosses_at_vertex(ring: list[Point], vertex: int, axis: SweepAxis, coordinate: float) -> bool:
    """Check whether the neighbours of a vertex lie on opposite sides of the line."""
    count = len(ring) - 1
    before = _offset(ring[(vertex - 1) % count], axis, coordinate)
    after = _offset(ring[(vertex + 1) % count], axis, coordinate)
    return before * after < 0


def _collinear_runs(on_line: list[bool]) -> list[tuple[int, int]]:
    """Find runs of two or more consecutive vertices on the sweep line.

    Runs may wrap around the seam of the ring. Returns (first, last) vertex
    indices in ring order; a ring lying entirely on the line has no runs.
    """
    count = len(on_line)
    if all(on_line) or not any(on_line):
        return []

    first_off = on_line.index(False)
    runs: list[tuple[int, int]] = []
    run_start: int | None = None
    run_end = first_off

    for step in range(1, count + 1):
        i = (first_off + step) % count
        if on_line[i]:
            if run_start is None:
                run_start = i
            run_end = i
        elif run_start is not None:
            if run_end != run_start:
                runs.append((run_start, run_end))
            run_start = None

    return runs


class ToolpathPlanner:
    """Plans zigzag surfacing passes over a machine-space contour.

    Example:
        planner = ToolpathPlanner()
        toolpath = planner.plan(contour, MachiningParameters(stepover_mm=20))
        for toolpath_pass in toolpath:
            print(toolpath_pass.points)
    """

    def __init__(self, buffer: PolygonBuffer | None = None) -> None:
        """Initialize the planner.

        Args:
            buffer: Buffer used when the margin still has to be applied
        """
        self.buffer = buffer or PolygonBuffer()

    def plan(
        self,
        contour: Contour,
        params: MachiningParameters,
        *,
        prebuffered: bool = False,
    ) -> Toolpath:
        """Plan the passes for one depth level.

        Args:
            contour: Machine-space contour
            params: Machining parameters
            prebuffered: True when the contour already includes the margin,
                so it is not applied a second time

        Returns:
            Toolpath with passes in increasing sweep index order

        Raises:
            InvalidContourError: If the contour has fewer than 3 distinct points
            EmptyToolpathError: If no sweep line produced a cut
        """
        contour.validate()

        if not prebuffered and params.margin_mm > 0:
            contour = self.buffer.buffer(contour, params.margin_mm)

        ring = contour.closed_points()
        bbox = BoundingBox.from_points(ring)
        axis = resolve_axis(params.path_direction, bbox)
        stepover = params.effective_stepover_mm

        if axis == SweepAxis.HORIZONTAL:
            low, high = bbox.min_y, bbox.max_y
        else:
            low, high = bbox.min_x, bbox.max_x

        line_count = math.ceil((high - low) / stepover) + 1
        passes: list[ToolpathPass] = []
        skipped = 0

        for index in range(line_count):
            coordinate = low + index * stepover
            if coordinate > high + PARAM_TOLERANCE:
                skipped += 1
                continue

            crossings = sweep_intersections(ring, axis, coordinate, bbox)
            if len(crossings) < 2:
                skipped += 1
                continue

            crossings.sort()
            spans = self._spans(crossings, params.bridge_gaps)
            if not spans:
                skipped += 1
                continue
            if index % 2 == 1:
                spans = [(end, start) for start, end in reversed(spans)]

            points: list[Point] = []
            for start, end in spans:
                points.append(_on_line(axis, coordinate, start))
                points.append(_on_line(axis, coordinate, end))

            passes.append(ToolpathPass(index=index, coordinate=coordinate, points=tuple(points)))

        if not passes:
            raise EmptyToolpathError(
                f"none of {line_count} sweep lines crossed the contour"
            )

        return Toolpath(
            passes=tuple(passes),
            axis=axis,
            bounding_box=bbox,
            stepover=stepover,
            bridge_gaps=params.bridge_gaps,
            skipped_lines=skipped,
        )

    @staticmethod
    def _spans(crossings: list[float], bridge_gaps: bool) -> list[tuple[float, float]]:
        """Turn ascending crossings into non-degenerate cut spans."""
        if bridge_gaps:
            candidates = [(crossings[0], crossings[-1])]
        else:
            candidates = [
                (crossings[j], crossings[j + 1]) for j in range(0, len(crossings) - 1, 2)
            ]
        return [(a, b) for a, b in candidates if abs(b - a) > EPSILON]


def _on_line(axis: SweepAxis, coordinate: float, value: float) -> Point:
    if axis == SweepAxis.HORIZONTAL:
        return Point(value, coordinate)
    return Point(coordinate, value)


def plan_toolpath(
    contour: Contour,
    params: MachiningParameters,
    *,
    prebuffered: bool = False,
    buffer: PolygonBuffer | None = None,
) -> Toolpath:
    """Plan a surfacing toolpath (functional entry point)."""
    return ToolpathPlanner(buffer).plan(contour, params, prebuffered=prebuffered)

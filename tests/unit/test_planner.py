"""Unit tests for toolpath planning.

Tests cover:
- Sweep-line intersections, including lines through vertices
- Direction resolution
- Pass count, zigzag order and bridged/unbridged segments
- Margin handling and empty toolpaths
"""

import math

import pytest

from slabcam.config import MachiningParameters, PathDirection
from slabcam.core.planner import (
    ToolpathPlanner,
    plan_toolpath,
    resolve_axis,
    sweep_intersections,
)
from slabcam.domain import BoundingBox, Contour, Point, SweepAxis
from slabcam.exceptions import EmptyToolpathError, InvalidContourError


@pytest.fixture
def square() -> Contour:
    return Contour.from_tuples([(0, 0), (100, 0), (100, 100), (0, 100)])


@pytest.fixture
def u_shape() -> Contour:
    """A U open at the top: two arms 30 mm wide around a 40 mm notch."""
    return Contour.from_tuples(
        [(0, 0), (100, 0), (100, 100), (70, 100), (70, 30), (30, 30), (30, 100), (0, 100)]
    )


@pytest.fixture
def step_shape() -> Contour:
    """A block with its top-right quarter removed, leaving a ledge at y=50."""
    return Contour.from_tuples([(0, 0), (100, 0), (100, 50), (60, 50), (60, 100), (0, 100)])


def horizontal(**kwargs) -> MachiningParameters:
    return MachiningParameters(path_direction=PathDirection.HORIZONTAL, **kwargs)


class TestSweepIntersections:
    """Tests for intersecting one sweep line with a ring."""

    def test_rectangle_inside_line(self):
        """A horizontal line strictly inside a rectangle hits both sides."""
        ring = Contour.from_tuples([(0, 0), (200, 0), (200, 100), (0, 100)]).closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 30.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 200.0])

    def test_vertical_line(self):
        ring = Contour.from_tuples([(0, 0), (200, 0), (200, 100), (0, 100)]).closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.VERTICAL, 50.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 100.0])

    def test_line_outside(self):
        ring = Contour.from_tuples([(0, 0), (200, 0), (200, 100), (0, 100)]).closed_points()
        bbox = BoundingBox.from_points(ring)
        assert sweep_intersections(ring, SweepAxis.HORIZONTAL, 150.0, bbox) == []

    def test_line_through_crossing_vertices(self):
        """A line through two side vertices of a diamond counts each once."""
        ring = Contour.from_tuples([(50, 0), (100, 50), (50, 100), (0, 50)]).closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 50.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 100.0])

    def test_line_touching_apex(self):
        """A line touching only the apex reports it twice."""
        ring = Contour.from_tuples([(0, 0), (100, 0), (50, 80)]).closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 80.0, bbox)
        assert values == pytest.approx([50.0, 50.0])

    def test_concave_line_hits_four_edges(self, u_shape):
        ring = u_shape.closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 60.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 30.0, 70.0, 100.0])

    def test_ledge_on_line_counts_once(self, step_shape):
        """An edge on the line where the ring passes through is one crossing."""
        ring = step_shape.closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 50.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 100.0])

    def test_ledge_on_line_either_winding(self, step_shape):
        ring = list(reversed(step_shape.closed_points()))
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 50.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 100.0])

    def test_notch_floor_on_line_keeps_both_ends(self, u_shape):
        """An edge on the line with both neighbours on one side only touches it."""
        ring = u_shape.closed_points()
        bbox = BoundingBox.from_points(ring)
        values = sweep_intersections(ring, SweepAxis.HORIZONTAL, 30.0, bbox)
        assert sorted(values) == pytest.approx([0.0, 30.0, 70.0, 100.0])


class TestResolveAxis:
    """Tests for direction resolution."""

    def test_auto_wide_box(self):
        assert resolve_axis(PathDirection.AUTO, BoundingBox(0, 0, 200, 100)) == SweepAxis.HORIZONTAL

    def test_auto_square_box(self):
        """Ties go to horizontal."""
        assert resolve_axis(PathDirection.AUTO, BoundingBox(0, 0, 100, 100)) == SweepAxis.HORIZONTAL

    def test_auto_tall_box(self):
        assert resolve_axis(PathDirection.AUTO, BoundingBox(0, 0, 100, 200)) == SweepAxis.VERTICAL

    def test_forced(self):
        box = BoundingBox(0, 0, 200, 100)
        assert resolve_axis(PathDirection.VERTICAL, box) == SweepAxis.VERTICAL
        assert resolve_axis(PathDirection.HORIZONTAL, BoundingBox(0, 0, 1, 9)) == SweepAxis.HORIZONTAL


class TestPlan:
    """Tests for complete plans."""

    def test_square_three_passes(self, square):
        """Stepover 50 over a 100 mm square gives passes at y = 0, 50, 100."""
        toolpath = ToolpathPlanner().plan(square, horizontal(stepover_mm=50.0))
        assert toolpath.axis == SweepAxis.HORIZONTAL
        assert [p.coordinate for p in toolpath] == [0.0, 50.0, 100.0]
        assert [p.points for p in toolpath] == [
            (Point(0.0, 0.0), Point(100.0, 0.0)),
            (Point(100.0, 50.0), Point(0.0, 50.0)),
            (Point(0.0, 100.0), Point(100.0, 100.0)),
        ]

    def test_passes_in_index_order(self, square):
        toolpath = plan_toolpath(square, horizontal(stepover_mm=30.0))
        indexes = [p.index for p in toolpath]
        assert indexes == sorted(indexes)

    def test_default_stepover_from_tool(self, square):
        """Stepover 0 uses 75% of the tool diameter."""
        params = horizontal(tool_diameter_mm=40.0)
        toolpath = plan_toolpath(square, params)
        assert toolpath.stepover == pytest.approx(30.0)
        assert [p.coordinate for p in toolpath] == pytest.approx([0.0, 30.0, 60.0, 90.0])
        assert toolpath.skipped_lines == 1

    def test_vertical_passes(self, square):
        toolpath = plan_toolpath(square, MachiningParameters(
            stepover_mm=50.0, path_direction=PathDirection.VERTICAL
        ))
        assert toolpath.axis == SweepAxis.VERTICAL
        assert toolpath.passes[0].points == (Point(0.0, 0.0), Point(0.0, 100.0))
        assert toolpath.passes[1].points == (Point(50.0, 100.0), Point(50.0, 0.0))

    def test_auto_picks_long_side(self):
        tall = Contour.from_tuples([(0, 0), (40, 0), (40, 200), (0, 200)])
        toolpath = plan_toolpath(tall, MachiningParameters(stepover_mm=20.0))
        assert toolpath.axis == SweepAxis.VERTICAL

    def test_convex_pass_count(self):
        """Passes plus skipped lines account for every sweep line."""
        triangle = Contour.from_tuples([(0, 0), (100, 0), (50, 80)])
        stepover = 20.0
        toolpath = plan_toolpath(triangle, horizontal(stepover_mm=stepover))
        line_count = math.ceil(80.0 / stepover) + 1
        assert len(toolpath) + toolpath.skipped_lines == line_count
        # The apex only touches the last line and yields no cut.
        assert len(toolpath) == 4

    def test_bridged_pass_spans_gap(self, u_shape):
        """With bridging every pass is one segment from first to last crossing."""
        toolpath = plan_toolpath(u_shape, horizontal(stepover_mm=30.0))
        for toolpath_pass in toolpath:
            assert len(toolpath_pass.points) == 2
        y60 = next(p for p in toolpath if p.coordinate == 60.0)
        assert y60.points == (Point(0.0, 60.0), Point(100.0, 60.0))

    def test_unbridged_pass_pairs_crossings(self, u_shape):
        """Without bridging the notch is skipped."""
        toolpath = plan_toolpath(u_shape, horizontal(stepover_mm=30.0, bridge_gaps=False))
        assert not toolpath.bridge_gaps
        y60 = next(p for p in toolpath if p.coordinate == 60.0)
        assert y60.segments() == [
            (Point(0.0, 60.0), Point(30.0, 60.0)),
            (Point(70.0, 60.0), Point(100.0, 60.0)),
        ]
        y90 = next(p for p in toolpath if p.coordinate == 90.0)
        assert y90.segments() == [
            (Point(100.0, 90.0), Point(70.0, 90.0)),
            (Point(30.0, 90.0), Point(0.0, 90.0)),
        ]

    def test_unbridged_step_covers_ledge_line(self, step_shape):
        """A pass along a ledge still cuts the material beside it."""
        toolpath = plan_toolpath(step_shape, horizontal(stepover_mm=50.0, bridge_gaps=False))
        assert [p.coordinate for p in toolpath] == [0.0, 50.0, 100.0]
        y50 = toolpath.passes[1]
        assert y50.segments() == [(Point(100.0, 50.0), Point(0.0, 50.0))]
        assert toolpath.passes[2].segments() == [(Point(0.0, 100.0), Point(60.0, 100.0))]

    def test_odd_pass_is_mirror_of_ascending_pairs(self, u_shape):
        """Odd passes reverse the ascending pairs rather than re-pairing."""
        toolpath = plan_toolpath(u_shape, horizontal(stepover_mm=60.0, bridge_gaps=False))
        y60 = toolpath.passes[1]
        assert y60.index == 1
        assert y60.segments() == [
            (Point(100.0, 60.0), Point(70.0, 60.0)),
            (Point(30.0, 60.0), Point(0.0, 60.0)),
        ]

    def test_margin_applied(self, square):
        toolpath = plan_toolpath(square, horizontal(stepover_mm=60.0, margin_mm=10.0))
        assert toolpath.bounding_box.min_x == pytest.approx(-10.0)
        assert toolpath.bounding_box.max_y == pytest.approx(110.0)
        assert toolpath.passes[0].points[0].x == pytest.approx(-10.0)

    def test_prebuffered_margin_not_reapplied(self, square):
        toolpath = plan_toolpath(square, horizontal(stepover_mm=50.0, margin_mm=10.0), prebuffered=True)
        assert toolpath.bounding_box == BoundingBox(0.0, 0.0, 100.0, 100.0)

    def test_does_not_mutate_input(self, square):
        before = square.points
        plan_toolpath(square, horizontal(stepover_mm=50.0, margin_mm=5.0))
        assert square.points == before


class TestPlanFailures:
    """Tests for rejected inputs."""

    def test_invalid_contour(self):
        with pytest.raises(InvalidContourError):
            plan_toolpath(Contour.from_tuples([(0, 0), (10, 0)]), MachiningParameters())

    def test_zero_area_contour(self):
        """A collinear ring is crossed at a single point per line at most."""
        line = Contour.from_tuples([(0, 0), (50, 0), (100, 0)])
        with pytest.raises(EmptyToolpathError):
            plan_toolpath(line, horizontal(stepover_mm=10.0))

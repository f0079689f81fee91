"""Unit tests for G-code emission.

Tests cover:
- Exact program layout for a small toolpath
- Depth levels and retracts between them
- Feed links versus retract-and-reposition moves
- Empty toolpaths
- Number formatting
"""

from datetime import datetime

import pytest

from slabcam.config import MachiningParameters, PathDirection
from slabcam.core.planner import plan_toolpath
from slabcam.domain import BoundingBox, Contour, Point, SweepAxis, Toolpath, ToolpathPass
from slabcam.io.emitter import (
    EMPTY_TOOLPATH_COMMENT,
    GcodeEmitter,
    ProgramMetadata,
    emit_program,
    format_coordinate,
    format_rate,
)

METADATA = ProgramMetadata(filename="test.gcode", timestamp="2024-01-01 00:00:00")


@pytest.fixture
def square() -> Contour:
    return Contour.from_tuples([(0, 0), (100, 0), (100, 100), (0, 100)])


@pytest.fixture
def params() -> MachiningParameters:
    return MachiningParameters(stepover_mm=50.0, path_direction=PathDirection.HORIZONTAL)


def body_lines(program: str) -> list[str]:
    """Lines between the work offset and the end-of-operation comment."""
    lines = program.splitlines()
    start = lines.index("G54") + 1
    end = lines.index("(End operation)") - 1
    return lines[start:end]


class TestProgramLayout:
    """Tests for the overall program structure."""

    def test_square_program(self, square, params):
        """Full program for three bridged passes at one depth."""
        toolpath = plan_toolpath(square, params)
        program = GcodeEmitter(params).emit(toolpath, METADATA)

        assert program == "\n".join(
            [
                "(Slab surfacing operation)",
                "(File: test.gcode)",
                "(Generated on 2024-01-01 00:00:00)",
                "(Tool diameter: 25.4000 mm)",
                "(Stepover: 50.0000 mm)",
                "(Cutting depth: 1.0000 mm in 1 pass)",
                "(Feed rate: 1000.0 mm/min)",
                "(Plunge rate: 500.0 mm/min)",
                "(Direction: horizontal)",
                "(Gap bridging: on)",
                "",
                "G90 G94",
                "G17",
                "G21",
                "",
                "(Start operation)",
                "S18000 M3",
                "G54",
                "G0 Z10.0000",
                "(Depth pass 1 of 1: Z-1.0000)",
                "G0 X0.0000 Y0.0000",
                "G1 Z0.0000 F500.0",
                "G1 Z-1.0000 F500.0",
                "G1 X100.0000 Y0.0000 F1000.0",
                "G1 X100.0000 Y50.0000 F1000.0",
                "G1 X0.0000 Y50.0000 F1000.0",
                "G1 X0.0000 Y100.0000 F1000.0",
                "G1 X100.0000 Y100.0000 F1000.0",
                "",
                "(End operation)",
                "G0 Z10.0000",
                "G0 X0.0000 Y0.0000",
                "M5",
                "M30",
            ]
        ) + "\n"

    def test_no_return_home(self, square):
        params = MachiningParameters(stepover_mm=50.0, return_to_home=False)
        program = emit_program(plan_toolpath(square, params), params, METADATA)
        assert program.splitlines()[-3:] == ["G0 Z10.0000", "M5", "M30"]

    def test_datetime_timestamp(self, square, params):
        metadata = ProgramMetadata(timestamp=datetime(2023, 5, 6, 7, 8, 9))
        program = emit_program(plan_toolpath(square, params), params, metadata)
        assert "(Generated on 2023-05-06 07:08:09)" in program
        assert "(File: slab_surfacing.gcode)" in program

    def test_parentheses_in_filename_sanitized(self, square, params):
        """Comments cannot nest."""
        metadata = ProgramMetadata(filename="slab (1).gcode", timestamp="t")
        program = emit_program(plan_toolpath(square, params), params, metadata)
        assert "(File: slab [1].gcode)" in program

    def test_deterministic(self, square, params):
        """Identical inputs give identical text."""
        toolpath = plan_toolpath(square, params)
        assert emit_program(toolpath, params, METADATA) == emit_program(toolpath, params, METADATA)

    def test_header_reflects_parameters(self, square):
        params = MachiningParameters(
            tool_diameter_mm=12.0,
            cutting_depth_mm=3.0,
            depth_passes=3,
            feed_rate_mm_per_min=2500.0,
            plunge_rate_mm_per_min=300.0,
            spindle_speed_rpm=12000,
            bridge_gaps=False,
        )
        program = emit_program(plan_toolpath(square, params), params, METADATA)
        assert "(Tool diameter: 12.0000 mm)" in program
        assert "(Stepover: 9.0000 mm)" in program
        assert "(Cutting depth: 3.0000 mm in 3 passes)" in program
        assert "(Feed rate: 2500.0 mm/min)" in program
        assert "(Plunge rate: 300.0 mm/min)" in program
        assert "(Gap bridging: off)" in program
        assert "S12000 M3" in program


class TestDepthPasses:
    """Tests for multi-level programs."""

    def test_levels_and_retracts(self, square):
        params = MachiningParameters(
            stepover_mm=50.0, cutting_depth_mm=3.0, depth_passes=3
        )
        program = emit_program(plan_toolpath(square, params), params, METADATA)
        lines = program.splitlines()

        markers = [line for line in lines if line.startswith("(Depth pass")]
        assert markers == [
            "(Depth pass 1 of 3: Z-1.0000)",
            "(Depth pass 2 of 3: Z-2.0000)",
            "(Depth pass 3 of 3: Z-3.0000)",
        ]
        # A retract precedes every level after the first.
        for marker in markers[1:]:
            assert lines[lines.index(marker) - 1] == "G0 Z10.0000"
        # The last level is followed directly by the footer.
        assert lines[lines.index("(End operation)") - 2].startswith("G1 X")

    def test_every_cut_preceded_by_plunge(self, square):
        """The first feed move of each level follows a plunge to that level."""
        params = MachiningParameters(stepover_mm=50.0, cutting_depth_mm=2.0, depth_passes=2)
        lines = emit_program(plan_toolpath(square, params), params, METADATA).splitlines()
        for level, z in ((1, "Z-1.0000"), (2, "Z-2.0000")):
            index = lines.index(f"(Depth pass {level} of 2: {z})")
            assert lines[index + 1].startswith("G0 X")
            assert lines[index + 2] == "G1 Z0.0000 F500.0"
            assert lines[index + 3] == f"G1 {z} F500.0"

    def test_zero_depth_not_negative(self, square):
        """A zero depth is written as Z0.0000, never as -0."""
        params = MachiningParameters(stepover_mm=50.0, cutting_depth_mm=0.0)
        program = emit_program(plan_toolpath(square, params), params, METADATA)
        assert "-0.0000" not in program
        assert "(Depth pass 1 of 1: Z0.0000)" in program

    def test_zero_depth_plunges_once(self, square):
        """At zero depth the surface move is the whole plunge."""
        params = MachiningParameters(stepover_mm=50.0, cutting_depth_mm=0.0)
        lines = emit_program(plan_toolpath(square, params), params, METADATA).splitlines()
        assert lines.count("G1 Z0.0000 F500.0") == 1
        plunge = lines.index("G1 Z0.0000 F500.0")
        assert lines[plunge - 1].startswith("G0 X")
        assert lines[plunge + 1].startswith("G1 X")


class TestLinks:
    """Tests for moves between cut segments."""

    def test_unbridged_gap_retracts(self):
        """An intra-pass gap is crossed at safety height."""
        toolpath = Toolpath(
            passes=(
                ToolpathPass(0, 60.0, (Point(0, 60), Point(30, 60), Point(70, 60), Point(100, 60))),
            ),
            axis=SweepAxis.HORIZONTAL,
            bounding_box=BoundingBox(0, 0, 100, 100),
            stepover=30.0,
            bridge_gaps=False,
        )
        params = MachiningParameters(stepover_mm=30.0, bridge_gaps=False)
        assert body_lines(emit_program(toolpath, params, METADATA)) == [
            "G0 Z10.0000",
            "(Depth pass 1 of 1: Z-1.0000)",
            "G0 X0.0000 Y60.0000",
            "G1 Z0.0000 F500.0",
            "G1 Z-1.0000 F500.0",
            "G1 X30.0000 Y60.0000 F1000.0",
            "G0 Z10.0000",
            "G0 X70.0000 Y60.0000",
            "G1 Z0.0000 F500.0",
            "G1 Z-1.0000 F500.0",
            "G1 X100.0000 Y60.0000 F1000.0",
        ]

    def test_unbridged_toolpath_never_feeds_links(self, square):
        """Without bridging every new pass starts with a retract."""
        params = MachiningParameters(stepover_mm=50.0, bridge_gaps=False)
        body = body_lines(emit_program(plan_toolpath(square, params), params, METADATA))
        assert body.count("G1 Z0.0000 F500.0") == 3

    def test_long_link_retracts(self):
        """Passes further apart than two stepovers are not linked at depth."""
        toolpath = Toolpath(
            passes=(
                ToolpathPass(0, 0.0, (Point(0, 0), Point(100, 0))),
                ToolpathPass(3, 90.0, (Point(100, 90), Point(0, 90))),
            ),
            axis=SweepAxis.HORIZONTAL,
            bounding_box=BoundingBox(0, 0, 100, 90),
            stepover=30.0,
        )
        params = MachiningParameters(stepover_mm=30.0)
        body = body_lines(emit_program(toolpath, params, METADATA))
        assert body[-5:] == [
            "G0 Z10.0000",
            "G0 X100.0000 Y90.0000",
            "G1 Z0.0000 F500.0",
            "G1 Z-1.0000 F500.0",
            "G1 X0.0000 Y90.0000 F1000.0",
        ]

    def test_short_link_fed(self):
        toolpath = Toolpath(
            passes=(
                ToolpathPass(0, 0.0, (Point(0, 0), Point(100, 0))),
                ToolpathPass(1, 30.0, (Point(100, 30), Point(0, 30))),
            ),
            axis=SweepAxis.HORIZONTAL,
            bounding_box=BoundingBox(0, 0, 100, 30),
            stepover=30.0,
        )
        params = MachiningParameters(stepover_mm=30.0)
        body = body_lines(emit_program(toolpath, params, METADATA))
        assert body[-3:] == [
            "G1 X100.0000 Y0.0000 F1000.0",
            "G1 X100.0000 Y30.0000 F1000.0",
            "G1 X0.0000 Y30.0000 F1000.0",
        ]


class TestEmptyToolpath:
    """Tests for programs without cuts."""

    @pytest.mark.parametrize("toolpath", [None, "empty"])
    def test_header_and_footer_only(self, toolpath):
        if toolpath == "empty":
            toolpath = Toolpath((), SweepAxis.HORIZONTAL, BoundingBox(0, 0, 0, 0), 10.0)
        params = MachiningParameters()
        program = emit_program(toolpath, params, METADATA)
        lines = program.splitlines()
        assert lines[0] == "(Slab surfacing operation)"
        assert EMPTY_TOOLPATH_COMMENT in lines
        assert lines[-1] == "M30"
        assert not any(line.startswith("G1") for line in lines)


class TestFormatting:
    """Tests for number formatting."""

    def test_coordinate_precision(self):
        assert format_coordinate(1.23456) == "1.2346"
        assert format_coordinate(-5) == "-5.0000"

    def test_no_negative_zero(self):
        assert format_coordinate(-0.0) == "0.0000"
        assert format_coordinate(-0.00001) == "0.0000"

    def test_rate_precision(self):
        assert format_rate(1000) == "1000.0"
        assert format_rate(12.34) == "12.3"

"""G-code emission for surfacing toolpaths.

The program is a fixed sequence: header, one block per depth level, footer.
Output is deterministic for identical inputs apart from the timestamp
comment, with 4 decimals for coordinates and 1 decimal for feed rates.

Within a depth level the emitter remembers where the previous cut ended.
The next cut starts with a feed move when it is a short link to the
following pass of a bridged toolpath; anything else (gaps inside a pass,
long links, unbridged toolpaths) retracts, rapids over and re-plunges.
"""

from dataclasses import dataclass
from datetime import datetime

from slabcam.config import MachiningParameters
from slabcam.domain import Point, Toolpath

# Comment text that marks the start of a depth level; the parser keys on it.
DEPTH_PASS_MARKER = "Depth pass"
EMPTY_TOOLPATH_COMMENT = "(No valid toolpath generated)"

# Links longer than this many stepovers are not fed at depth.
MAX_LINK_STEPOVERS = 2.0


@dataclass(frozen=True)
class ProgramMetadata:
    """Descriptive data written into the header comments.

    Attributes:
        filename: Name of the program file
        timestamp: Generation time; rendered with str()
    """

    filename: str = "slab_surfacing.gcode"
    timestamp: datetime | str | None = None

    def timestamp_text(self) -> str:
        if self.timestamp is None:
            return datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        if isinstance(self.timestamp, datetime):
            return self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        return str(self.timestamp)


def format_coordinate(value: float) -> str:
    """Format an axis value with 4 decimals, never as negative zero."""
    text = f"{value:.4f}"
    if text == "-0.0000":
        return "0.0000"
    return text


def format_rate(value: float) -> str:
    """Format a feed rate with 1 decimal."""
    return f"{value:.1f}"


def _comment(text: str) -> str:
    # Parentheses cannot nest inside a G-code comment.
    return "(" + text.replace("(", "[").replace(")", "]") + ")"


class GcodeEmitter:
    """Serializes a toolpath into a G-code program.

    Example:
        emitter = GcodeEmitter(params)
        text = emitter.emit(toolpath, ProgramMetadata("slab.gcode"))
    """

    def __init__(self, params: MachiningParameters) -> None:
        """Initialize the emitter.

        Args:
            params: Machining parameters for rates, heights and depths
        """
        self.params = params

    def emit(self, toolpath: Toolpath | None, metadata: ProgramMetadata | None = None) -> str:
        """Render the complete program.

        Args:
            toolpath: Planned passes; None or empty emits only header/footer
            metadata: Header metadata (defaults when None)

        Returns:
            Program text, newline-terminated
        """
        metadata = metadata or ProgramMetadata()
        lines: list[str] = []

        self._write_header(lines, toolpath, metadata)

        if toolpath is None or toolpath.is_empty():
            lines.append(EMPTY_TOOLPATH_COMMENT)
        else:
            self._write_toolpath(lines, toolpath)

        self._write_footer(lines)
        return "\n".join(lines) + "\n"

    def _write_header(
        self, lines: list[str], toolpath: Toolpath | None, metadata: ProgramMetadata
    ) -> None:
        p = self.params
        if toolpath is not None:
            direction = toolpath.axis.value
        else:
            direction = p.path_direction.value
        plural = "pass" if p.depth_passes == 1 else "passes"

        lines.extend(
            [
                _comment("Slab surfacing operation"),
                _comment(f"File: {metadata.filename}"),
                _comment(f"Generated on {metadata.timestamp_text()}"),
                _comment(f"Tool diameter: {format_coordinate(p.tool_diameter_mm)} mm"),
                _comment(f"Stepover: {format_coordinate(p.effective_stepover_mm)} mm"),
                _comment(
                    f"Cutting depth: {format_coordinate(p.cutting_depth_mm)} mm "
                    f"in {p.depth_passes} {plural}"
                ),
                _comment(f"Feed rate: {format_rate(p.feed_rate_mm_per_min)} mm/min"),
                _comment(f"Plunge rate: {format_rate(p.plunge_rate_mm_per_min)} mm/min"),
                _comment(f"Direction: {direction}"),
                _comment(f"Gap bridging: {'on' if p.bridge_gaps else 'off'}"),
                "",
                "G90 G94",
                "G17",
                "G21",
                "",
                "(Start operation)",
                f"S{p.spindle_speed_rpm} M3",
                "G54",
            ]
        )

    def _write_toolpath(self, lines: list[str], toolpath: Toolpath) -> None:
        p = self.params
        safety = format_coordinate(p.safety_height_mm)
        feed = format_rate(p.feed_rate_mm_per_min)
        levels = p.depth_levels()
        max_link = toolpath.stepover * MAX_LINK_STEPOVERS

        lines.append(f"G0 Z{safety}")

        for level, depth in enumerate(levels, start=1):
            z = format_coordinate(depth)
            lines.append(f"({DEPTH_PASS_MARKER} {level} of {len(levels)}: Z{z})")

            last: Point | None = None
            for toolpath_pass in toolpath.passes:
                for seg_idx, (start, end) in enumerate(toolpath_pass.segments()):
                    if last is None:
                        self._position_and_plunge(lines, start, z)
                    elif self._is_link(last, start, seg_idx, toolpath.bridge_gaps, max_link):
                        if not start.almost_equals(last):
                            lines.append(_feed_move(start, feed))
                    else:
                        lines.append(f"G0 Z{safety}")
                        self._position_and_plunge(lines, start, z)

                    lines.append(_feed_move(end, feed))
                    last = end

            if level < len(levels):
                lines.append(f"G0 Z{safety}")

    @staticmethod
    def _is_link(last: Point, start: Point, seg_idx: int, bridge_gaps: bool, max_link: float) -> bool:
        """Check whether the move to start can be fed at depth."""
        return bridge_gaps and seg_idx == 0 and last.distance_to(start) <= max_link

    def _position_and_plunge(self, lines: list[str], start: Point, z: str) -> None:
        plunge = format_rate(self.params.plunge_rate_mm_per_min)
        lines.append(f"G0 X{format_coordinate(start.x)} Y{format_coordinate(start.y)}")
        surface = format_coordinate(0.0)
        lines.append(f"G1 Z{surface} F{plunge}")
        if z != surface:
            lines.append(f"G1 Z{z} F{plunge}")

    def _write_footer(self, lines: list[str]) -> None:
        p = self.params
        lines.extend(["", "(End operation)", f"G0 Z{format_coordinate(p.safety_height_mm)}"])
        if p.return_to_home:
            lines.append("G0 X0.0000 Y0.0000")
        lines.extend(["M5", "M30"])


def _feed_move(point: Point, feed: str) -> str:
    return f"G1 X{format_coordinate(point.x)} Y{format_coordinate(point.y)} F{feed}"


def emit_program(
    toolpath: Toolpath | None,
    params: MachiningParameters,
    metadata: ProgramMetadata | None = None,
) -> str:
    """Render a toolpath as G-code (functional entry point)."""
    return GcodeEmitter(params).emit(toolpath, metadata)

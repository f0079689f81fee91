"""G-code parsing for toolpath visualization.

Reads a program back into polylines. Only rapid (G0/G00) and linear feed
(G1/G01) moves are understood; arcs, canned cycles and every other word are
ignored. X, Y and Z are modal, and a line that carries only axis words
continues the last motion command until another motion-group
code ends it.

A move that puts Z at or below zero switches to cutting; one that lifts Z
above zero switches back. X/Y moves while cutting extend the current
cutting polyline, all others extend the single traverse polyline. A depth
pass comment starts a new cutting polyline.

Malformed numbers are treated as absent, so a damaged line degrades to a
gap in the drawing instead of an error.
"""

import re
from dataclasses import dataclass, field

from slabcam.domain import Point

RAPID_COMMANDS = frozenset({"G0", "G00"})
FEED_COMMANDS = frozenset({"G1", "G01"})

# Comment markers recognised as depth-level boundaries.
DEPTH_MARKERS = ("Depth pass", "pass of")

_PAREN_COMMENT = re.compile(r"\([^)]*\)")


@dataclass
class ParsedProgram:
    """Polylines recovered from a program.

    Attributes:
        traverse: Positions visited while not cutting
        cutting: One polyline per depth level, in encounter order
    """

    traverse: list[Point] = field(default_factory=list)
    cutting: list[list[Point]] = field(default_factory=list)

    def polylines(self) -> list[list[Point]]:
        """Traverse polyline first (when present), then cutting polylines."""
        result: list[list[Point]] = []
        if self.traverse:
            result.append(self.traverse)
        result.extend(self.cutting)
        return result


def _is_depth_marker(comment: str) -> bool:
    return any(marker in comment for marker in DEPTH_MARKERS)


def _parse_number(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def _is_other_motion(number: float) -> bool:
    """Check for a motion-group G code other than G0 and G1 (G2/G3, G5.x, G38.x, G73-G89)."""
    return (
        number in (2.0, 3.0)
        or 5.0 <= number < 6.0
        or 38.0 <= number < 39.0
        or 73.0 <= number <= 89.0
    )


class GcodeParser:
    """Parses G-code text into traverse and cutting polylines.

    Example:
        parser = GcodeParser()
        program = parser.parse(text)
        for polyline in program.polylines():
            draw(polyline)
    """

    def parse(self, text: str) -> ParsedProgram:
        """Parse a complete program.

        Args:
            text: Program text

        Returns:
            ParsedProgram with traverse and cutting polylines
        """
        program = ParsedProgram()
        current: list[Point] = []

        x: float | None = None
        y: float | None = None
        z: float | None = None
        motion: str | None = None
        cutting = False

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue

            comments = _PAREN_COMMENT.findall(line)
            if ";" in line:
                line, _, tail = line.partition(";")
                comments.append(tail)
            if any(_is_depth_marker(c) for c in comments):
                if current:
                    program.cutting.append(current)
                    current = []

            words = _PAREN_COMMENT.sub(" ", line).upper().split()
            if not words:
                continue

            coords: dict[str, float | None] = {}
            for word in words:
                if word in RAPID_COMMANDS or word in FEED_COMMANDS:
                    motion = word
                elif word[0] in "XYZ":
                    coords[word[0]] = _parse_number(word[1:])
                elif word[0] == "G":
                    # Another motion mode ends modal continuation; other groups leave it.
                    number = _parse_number(word[1:])
                    if number is not None and _is_other_motion(number):
                        motion = None

            if motion is None or not coords:
                continue

            new_x = coords.get("X")
            new_y = coords.get("Y")
            new_z = coords.get("Z")

            if new_x is not None:
                x = new_x
            if new_y is not None:
                y = new_y

            if new_z is not None:
                z = new_z
                was_cutting = cutting
                cutting = motion in FEED_COMMANDS and z <= 0
                if cutting and not was_cutting and x is not None and y is not None:
                    current.append(Point(x, y))

            if new_x is None and new_y is None:
                continue
            if x is None or y is None:
                continue

            point = Point(x, y)
            if cutting:
                current.append(point)
            elif z is None or z >= 0:
                program.traverse.append(point)

        if current:
            program.cutting.append(current)

        return program


def parse_program(text: str) -> list[list[Point]]:
    """Parse G-code into polylines: traverse first, then cutting polylines."""
    return GcodeParser().parse(text).polylines()

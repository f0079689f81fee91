"""Whole-buffer file access for programs and contour inputs.

Programs are read and written in one piece; there is no streaming and no
partial-write recovery. OS errors from program files propagate unchanged.
"""

import json
from pathlib import Path
from typing import Any

from slabcam.domain import Contour, Point
from slabcam.exceptions import ContourFileError

DEFAULT_PROGRAM_NAME = "slab_surfacing.gcode"


def read_program(path: Path) -> str:
    """Read a complete program file.

    Raises:
        OSError: If the file cannot be read
    """
    return path.read_text(encoding="utf-8")


def write_program(path: Path, text: str) -> None:
    """Write a complete program file, replacing any existing one.

    Raises:
        OSError: If the file cannot be written
    """
    path.write_text(text, encoding="utf-8")


def _coerce_point(item: Any) -> Point:
    if isinstance(item, dict):
        return Point(float(item["x"]), float(item["y"]))
    x, y = item
    return Point(float(x), float(y))


def load_contour_file(path: Path) -> Contour:
    """Load a machine-space contour from JSON.

    Accepted layouts are a bare list of points or an object with a
    "points" list. Each point is either [x, y] or {"x": .., "y": ..}.

    Raises:
        ContourFileError: If the file is missing or malformed
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ContourFileError(str(path), str(e)) from e
    except json.JSONDecodeError as e:
        raise ContourFileError(str(path), f"invalid JSON: {e}") from e

    items = data.get("points") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ContourFileError(str(path), "expected a list of points")

    try:
        return Contour(points=tuple(_coerce_point(item) for item in items))
    except (KeyError, TypeError, ValueError) as e:
        raise ContourFileError(str(path), f"malformed point: {e}") from e

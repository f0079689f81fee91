"""Domain models for slabcam.

This module contains the core domain models representing contours,
calibration markers, coordinate systems, and toolpaths. All models are:

- Immutable (frozen dataclasses)
- Independent of the pipeline stages that produce or consume them

Key classes:
- Point: A 2D point in pixel or machine space
- Contour: A closed slab outline
- MarkerPoint: A detected calibration marker
- MachineCoordinateSystem: Pixel <-> machine mapping
- ToolpathPass / Toolpath: Planned surfacing passes
"""

from slabcam.domain.calibration import (
    MachineCoordinateSystem,
    MarkerDetectionResult,
    MarkerPoint,
    MarkerRole,
)
from slabcam.domain.contour import Contour, Point, SlabContourResult
from slabcam.domain.toolpath import BoundingBox, SweepAxis, Toolpath, ToolpathPass

__all__: list[str] = [
    # Enums
    "MarkerRole",
    "SweepAxis",
    # Core types
    "BoundingBox",
    "Contour",
    "MachineCoordinateSystem",
    "MarkerDetectionResult",
    "MarkerPoint",
    "Point",
    "SlabContourResult",
    "Toolpath",
    "ToolpathPass",
]

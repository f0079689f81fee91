"""Core processing algorithms for slabcam.

This module contains the core algorithms for:

- Geometry operations (signed area, intersections, simplification)
- Calibration (pixel <-> machine coordinate systems)
- Buffering (safety margin around the slab)
- Planning (zigzag surfacing passes)
- Estimation (cut length and machining time)

All stage services are:
- Stateless between calls
- Pure (no side effects)

Key functions:
- calibrate: Derive a coordinate system from three markers
- buffer_polygon: Grow a contour by a margin
- plan_toolpath: Plan zigzag passes over a contour
- simplify: Douglas-Peucker polyline simplification

Key classes:
- CoordinateCalibrator: Marker calibration
- PolygonBuffer: Contour buffering with pluggable offset strategies
- ToolpathPlanner: Surfacing pass planning
- SurfacingPipeline: End-to-end job orchestration
"""

from slabcam.core.buffer import (
    BisectorOffset,
    CentroidOffset,
    OffsetStrategy,
    PolygonBuffer,
    buffer_polygon,
    get_offset_strategy,
)
from slabcam.core.calibrator import (
    CoordinateCalibrator,
    calibrate,
    machine_to_pixel,
    pixel_to_machine,
)
from slabcam.core.estimate import MachiningEstimate, estimate_machining
from slabcam.core.geometry import (
    close_ring,
    ensure_counter_clockwise,
    perpendicular_distance,
    signed_area,
    simplify,
)
from slabcam.core.pipeline import SurfacingPipeline, SurfacingResult
from slabcam.core.planner import ToolpathPlanner, plan_toolpath

__all__ = [
    # Buffer
    "BisectorOffset",
    "CentroidOffset",
    "OffsetStrategy",
    "PolygonBuffer",
    "buffer_polygon",
    "get_offset_strategy",
    # Calibration
    "CoordinateCalibrator",
    "calibrate",
    "machine_to_pixel",
    "pixel_to_machine",
    # Estimation
    "MachiningEstimate",
    "estimate_machining",
    # Geometry functions
    "close_ring",
    "ensure_counter_clockwise",
    "perpendicular_distance",
    "signed_area",
    "simplify",
    # Pipeline
    "SurfacingPipeline",
    "SurfacingResult",
    # Planner
    "ToolpathPlanner",
    "plan_toolpath",
]

"""Marker-based calibration from image pixels to machine millimetres.

The origin marker becomes machine (0, 0). The X-axis marker fixes the
orientation and, with the known real X distance, the X scale. The scale
marker and the known real Y distance fix the Y scale. Both scales are
averaged into one ratio, which assumes the photo was taken roughly
square-on; a strongly oblique capture distorts the result.

Key classes:
- CoordinateCalibrator: Derives MachineCoordinateSystem values
"""

import math

from slabcam.config import CalibrationConfig
from slabcam.domain import (
    Contour,
    MachineCoordinateSystem,
    MarkerPoint,
    MarkerRole,
    Point,
    SlabContourResult,
)
from slabcam.exceptions import DegenerateCalibrationError, MarkerSetError


class CoordinateCalibrator:
    """Derives the machine coordinate system from three markers.

    Example:
        calibrator = CoordinateCalibrator()
        system = calibrator.calibrate(markers, x_distance_mm=400, y_distance_mm=400)
        machine_point = system.pixel_to_machine(Point(250, 300))
    """

    def __init__(self, config: CalibrationConfig | None = None) -> None:
        """Initialize the calibrator.

        Args:
            config: Calibration settings (defaults when None)
        """
        self.config = config or CalibrationConfig()

    @staticmethod
    def markers_by_role(markers: list[MarkerPoint] | tuple[MarkerPoint, ...]) -> dict[MarkerRole, MarkerPoint]:
        """Index markers by role, checking there is exactly one of each.

        Raises:
            MarkerSetError: If the count is not 3 or a role repeats or is missing
        """
        if len(markers) != 3:
            raise MarkerSetError(f"expected 3 markers, got {len(markers)}")

        by_role: dict[MarkerRole, MarkerPoint] = {}
        for marker in markers:
            if marker.role in by_role:
                raise MarkerSetError(f"duplicate role '{marker.role.value}'")
            by_role[marker.role] = marker

        missing = [role.value for role in MarkerRole if role not in by_role]
        if missing:
            raise MarkerSetError(f"missing roles: {', '.join(missing)}")

        return by_role

    def calibrate(
        self,
        markers: list[MarkerPoint] | tuple[MarkerPoint, ...],
        x_distance_mm: float,
        y_distance_mm: float,
    ) -> MachineCoordinateSystem:
        """Build the coordinate system from markers and real distances.

        Args:
            markers: One origin, one X-axis and one scale marker
            x_distance_mm: Real distance between origin and X-axis marker
            y_distance_mm: Real distance between origin and scale marker

        Returns:
            The derived coordinate system

        Raises:
            MarkerSetError: If the markers do not cover each role once
            DegenerateCalibrationError: If a marker lies too close to the origin
                or the three markers are (nearly) collinear
            ValueError: If a real distance is not positive
        """
        if x_distance_mm <= 0 or y_distance_mm <= 0:
            raise ValueError(
                f"Marker distances must be positive, got X={x_distance_mm} Y={y_distance_mm}"
            )

        by_role = self.markers_by_role(markers)
        origin = by_role[MarkerRole.ORIGIN].to_point()
        x_axis = by_role[MarkerRole.X_AXIS].to_point()
        scale = by_role[MarkerRole.SCALE].to_point()

        x_distance_px = origin.distance_to(x_axis)
        y_distance_px = origin.distance_to(scale)

        threshold = self.config.min_marker_distance_px
        if x_distance_px < threshold or y_distance_px < threshold:
            raise DegenerateCalibrationError(
                f"markers closer than {threshold:.2f}px to the origin", x_distance_px, y_distance_px
            )

        # Sine of the angle between the two marker directions.
        cross = (x_axis.x - origin.x) * (scale.y - origin.y) - (x_axis.y - origin.y) * (scale.x - origin.x)
        sine = abs(cross) / (x_distance_px * y_distance_px)
        if sine < self.config.min_axis_sine:
            raise DegenerateCalibrationError(
                f"markers are collinear (sin {sine:.3f})", x_distance_px, y_distance_px
            )

        orientation = 0.0
        if self.config.apply_rotation:
            orientation = normalize_angle(math.atan2(x_axis.y - origin.y, x_axis.x - origin.x))

        ratio = (x_distance_mm / x_distance_px + y_distance_mm / y_distance_px) / 2

        return MachineCoordinateSystem(
            origin_px=origin,
            orientation_rad=orientation,
            pixel_to_mm_ratio=ratio,
        )

    def calibrate_uniform(
        self,
        markers: list[MarkerPoint] | tuple[MarkerPoint, ...],
        distance_mm: float,
    ) -> MachineCoordinateSystem:
        """Calibrate with the same real distance on both axes."""
        return self.calibrate(markers, distance_mm, distance_mm)

    @staticmethod
    def resolve_machine_contour(
        result: SlabContourResult,
        system: MachineCoordinateSystem | None = None,
    ) -> Contour:
        """Pick or derive the machine-space contour of a detection result.

        A supplied system always wins so that a fresh calibration is applied
        to the pixel contour. Without one, the detector's own machine contour
        is used.

        Raises:
            ValueError: If neither a system nor a machine contour is available
        """
        if system is not None:
            return system.contour_to_machine(result.pixel_contour)
        if result.machine_contour is not None:
            return result.machine_contour
        raise ValueError("No machine contour available and no coordinate system supplied")


def normalize_angle(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    while angle <= -math.pi:
        angle += 2 * math.pi
    while angle > math.pi:
        angle -= 2 * math.pi
    return angle


def calibrate(
    markers: list[MarkerPoint] | tuple[MarkerPoint, ...],
    x_distance_mm: float,
    y_distance_mm: float,
    config: CalibrationConfig | None = None,
) -> MachineCoordinateSystem:
    """Derive a coordinate system from markers (functional entry point)."""
    return CoordinateCalibrator(config).calibrate(markers, x_distance_mm, y_distance_mm)


def pixel_to_machine(system: MachineCoordinateSystem, point: Point) -> Point:
    """Convert one pixel point to machine coordinates."""
    return system.pixel_to_machine(point)


def machine_to_pixel(system: MachineCoordinateSystem, point: Point) -> Point:
    """Convert one machine point to pixel coordinates."""
    return system.machine_to_pixel(point)

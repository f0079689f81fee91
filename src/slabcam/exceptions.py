"""Exception hierarchy for Slabcam."""


class SlabcamError(Exception):
    """Base exception for all Slabcam errors."""

    pass


class CalibrationError(SlabcamError):
    """Errors related to deriving the machine coordinate system."""

    pass


class MarkerSetError(CalibrationError):
    """Marker set does not contain exactly one marker per role."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid marker set: {reason}")


class DegenerateCalibrationError(CalibrationError):
    """Markers are too close together or collinear to span both axes."""

    def __init__(self, reason: str, x_distance_px: float, y_distance_px: float) -> None:
        self.reason = reason
        self.x_distance_px = x_distance_px
        self.y_distance_px = y_distance_px
        super().__init__(
            f"Degenerate calibration: {reason} "
            f"(marker distances {x_distance_px:.2f}px / {y_distance_px:.2f}px)"
        )


class GeometryError(SlabcamError):
    """Errors in geometric calculations."""

    pass


class InvalidContourError(GeometryError):
    """Contour cannot be used for buffering or scanning."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ToolpathError(SlabcamError):
    """Errors related to toolpath planning."""

    pass


class EmptyToolpathError(ToolpathError):
    """Planner produced no usable passes."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Empty toolpath: {reason}")


class ContourFileError(SlabcamError):
    """Contour input file is missing or malformed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load contour '{path}': {reason}")

"""Logging utilities for Slabcam."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog

from slabcam.domain import MachineCoordinateSystem


@dataclass
class JobStats:
    """Statistics from one surfacing job."""

    contour_points: int = 0
    buffered_points: int = 0
    passes: int = 0
    segments: int = 0
    depth_passes: int = 0
    program_lines: int = 0
    cut_length_mm: float = 0.0
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate job duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (auto-generated if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output

    Returns:
        Configured structlog logger
    """
    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(f"slabcam_{timestamp}.log")

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("slabcam")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


class JobLogger:
    """Logger for tracking pipeline stages and job statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = JobStats()

    def log_calibration(self, system: MachineCoordinateSystem, rotation_applied: bool) -> None:
        """Log the derived coordinate system."""
        self._logger.info(
            "Calibration derived",
            orientation_rad=round(system.orientation_rad, 6),
            orientation_deg=round(system.orientation_degrees, 3),
            pixel_to_mm_ratio=round(system.pixel_to_mm_ratio, 6),
            rotation_applied=rotation_applied,
        )

    def log_buffer(self, input_points: int, output_points: int, margin_mm: float) -> None:
        """Log contour buffering."""
        self._logger.debug(
            "Contour buffered",
            input_points=input_points,
            output_points=output_points,
            margin_mm=margin_mm,
        )
        self._stats.contour_points = input_points
        self._stats.buffered_points = output_points

    def log_plan(
        self,
        axis: str,
        passes: int,
        segments: int,
        skipped_lines: int,
        stepover_mm: float,
    ) -> None:
        """Log toolpath planning results."""
        self._logger.info(
            "Toolpath planned",
            axis=axis,
            passes=passes,
            segments=segments,
            skipped_lines=skipped_lines,
            stepover_mm=round(stepover_mm, 4),
        )
        self._stats.passes = passes
        self._stats.segments = segments

    def log_program(self, lines: int, depth_passes: int, cut_length_mm: float) -> None:
        """Log program emission."""
        self._logger.info(
            "Program emitted",
            lines=lines,
            depth_passes=depth_passes,
            cut_length_mm=round(cut_length_mm, 2),
        )
        self._stats.program_lines = lines
        self._stats.depth_passes = depth_passes
        self._stats.cut_length_mm = cut_length_mm

    def log_stage_error(
        self,
        stage: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log a failed pipeline stage."""
        self._logger.error(
            "Stage failed",
            stage=stage,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.errors.append((stage, str(error)))

    @property
    def stats(self) -> JobStats:
        """Get current job statistics."""
        return self._stats

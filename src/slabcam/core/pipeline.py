"""Orchestration of the surfacing pipeline.

Runs the stages in order: calibrate (optional) -> buffer -> plan -> emit.
Each stage is a pure computation; this module only wires them together,
tracks statistics and logs. Failures are logged and re-raised unchanged.

Key classes:
- SurfacingPipeline: Runs one job per call
- SurfacingResult: Everything a job produced
"""

import time
import traceback
from dataclasses import dataclass

import structlog

from slabcam.config import MachiningParameters, SlabcamSettings
from slabcam.core.buffer import PolygonBuffer
from slabcam.core.calibrator import CoordinateCalibrator
from slabcam.core.estimate import MachiningEstimate, estimate_machining
from slabcam.core.planner import ToolpathPlanner
from slabcam.domain import (
    Contour,
    MachineCoordinateSystem,
    MarkerDetectionResult,
    SlabContourResult,
    Toolpath,
)
from slabcam.io import GcodeEmitter, ProgramMetadata
from slabcam.utils import JobLogger, JobStats


@dataclass(frozen=True)
class SurfacingResult:
    """Output of one pipeline run.

    Attributes:
        contour: Machine-space contour as received
        buffered_contour: Contour after the safety margin
        toolpath: Planned passes
        program: Emitted G-code text
        estimate: Length and time estimate
        stats: Job statistics
    """

    contour: Contour
    buffered_contour: Contour
    toolpath: Toolpath
    program: str
    estimate: MachiningEstimate
    stats: JobStats


class SurfacingPipeline:
    """Runs calibration, buffering, planning and emission.

    Example:
        pipeline = SurfacingPipeline(SlabcamSettings())
        result = pipeline.run(contour)
        Path("slab.gcode").write_text(result.program)
    """

    def __init__(
        self,
        settings: SlabcamSettings | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Application settings (defaults when None)
            logger: Structured logger; a module logger is used when None
        """
        self.settings = settings or SlabcamSettings()
        self.logger = logger or structlog.get_logger("slabcam")
        self.job_logger = JobLogger(self.logger)
        self.calibrator = CoordinateCalibrator(self.settings.calibration)
        self.buffer = PolygonBuffer(self.settings.buffer)
        self.planner = ToolpathPlanner(self.buffer)

    def calibrate(
        self,
        detection: MarkerDetectionResult,
        x_distance_mm: float,
        y_distance_mm: float,
    ) -> MachineCoordinateSystem:
        """Derive the coordinate system from detected markers.

        Raises:
            CalibrationError: If the markers are unusable
        """
        try:
            system = self.calibrator.calibrate(detection.markers, x_distance_mm, y_distance_mm)
        except Exception as e:
            self.job_logger.log_stage_error("calibrate", e, traceback.format_exc())
            raise

        self.job_logger.log_calibration(system, self.settings.calibration.apply_rotation)
        return system

    def run_detection(
        self,
        contour_result: SlabContourResult,
        system: MachineCoordinateSystem | None = None,
        params: MachiningParameters | None = None,
        metadata: ProgramMetadata | None = None,
    ) -> SurfacingResult:
        """Run a job from a contour detection result.

        The pixel contour is mapped with system when one is given, otherwise
        the detector's machine contour is used.
        """
        contour = self.calibrator.resolve_machine_contour(contour_result, system)
        return self.run(contour, params=params, metadata=metadata)

    def run(
        self,
        contour: Contour,
        params: MachiningParameters | None = None,
        metadata: ProgramMetadata | None = None,
        *,
        prebuffered: bool = False,
    ) -> SurfacingResult:
        """Run buffering, planning and emission for a machine-space contour.

        Args:
            contour: Machine-space slab contour
            params: Machining parameters (settings.machining when None)
            metadata: Program header metadata
            prebuffered: True when contour already includes the margin

        Returns:
            SurfacingResult with toolpath, program and estimate

        Raises:
            InvalidContourError: If the contour is unusable
            EmptyToolpathError: If no pass could be planned
        """
        params = params or self.settings.machining
        self.job_logger = JobLogger(self.logger)
        stats = self.job_logger.stats
        stats.start_time = time.time()

        stage = "buffer"
        try:
            contour.validate()
            if prebuffered:
                buffered = contour
            else:
                buffered = self.buffer.buffer(contour, params.margin_mm)
            self.job_logger.log_buffer(len(contour), len(buffered), params.margin_mm)

            stage = "plan"
            toolpath = self.planner.plan(buffered, params, prebuffered=True)
            self.job_logger.log_plan(
                axis=toolpath.axis.value,
                passes=len(toolpath),
                segments=toolpath.segment_count(),
                skipped_lines=toolpath.skipped_lines,
                stepover_mm=toolpath.stepover,
            )

            stage = "emit"
            program = GcodeEmitter(params).emit(toolpath, metadata)
            estimate = estimate_machining(buffered, toolpath, params)
            self.job_logger.log_program(
                lines=program.count("\n"),
                depth_passes=params.depth_passes,
                cut_length_mm=estimate.cut_length_mm,
            )
        except Exception as e:
            stats.end_time = time.time()
            self.job_logger.log_stage_error(stage, e, traceback.format_exc())
            raise

        stats.end_time = time.time()
        self.logger.info(
            "Job complete",
            duration_ms=round(stats.duration_seconds * 1000, 2),
            estimated_minutes=round(estimate.estimated_minutes, 2),
        )

        return SurfacingResult(
            contour=contour,
            buffered_contour=buffered,
            toolpath=toolpath,
            program=program,
            estimate=estimate,
            stats=stats,
        )

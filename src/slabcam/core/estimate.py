"""Machining estimates for a planned toolpath.

Gives the operator a quick sanity check before running a program: the
surfaced area, how far the cutter travels, and roughly how long it takes.
Rapid moves are ignored for time since their speed depends on the machine.
"""

from dataclasses import dataclass

from slabcam.config import MachiningParameters
from slabcam.domain import Contour, Toolpath


@dataclass(frozen=True)
class MachiningEstimate:
    """Summary figures for a job.

    Attributes:
        contour_area_mm2: Area enclosed by the contour
        pass_count: Passes per depth level
        depth_passes: Number of depth levels
        cut_length_mm: Total cut length over all depth levels
        link_length_mm: Total length of moves between cut segments
        estimated_minutes: Feed time for cuts, links and plunges
    """

    contour_area_mm2: float
    pass_count: int
    depth_passes: int
    cut_length_mm: float
    link_length_mm: float
    estimated_minutes: float


def estimate_machining(
    contour: Contour,
    toolpath: Toolpath,
    params: MachiningParameters,
) -> MachiningEstimate:
    """Estimate cut length and feed time for a toolpath.

    Args:
        contour: Contour the toolpath was planned over
        toolpath: Planned toolpath (one depth level)
        params: Machining parameters used for planning

    Returns:
        MachiningEstimate for all depth levels
    """
    levels = params.depth_passes
    cut_per_level = toolpath.cut_length()

    link_per_level = 0.0
    previous_end = None
    segment_count = 0
    for toolpath_pass in toolpath.passes:
        for start, end in toolpath_pass.segments():
            if previous_end is not None:
                link_per_level += previous_end.distance_to(start)
            previous_end = end
            segment_count += 1

    cut_length = cut_per_level * levels
    link_length = link_per_level * levels
    # Upper bound: every segment re-plunges from the surface at every level.
    plunge_length = segment_count * params.depth_per_pass_mm * levels * (levels + 1) / 2

    minutes = (cut_length + link_length) / params.feed_rate_mm_per_min
    minutes += plunge_length / params.plunge_rate_mm_per_min

    return MachiningEstimate(
        contour_area_mm2=contour.area(),
        pass_count=len(toolpath),
        depth_passes=levels,
        cut_length_mm=cut_length,
        link_length_mm=link_length,
        estimated_minutes=minutes,
    )

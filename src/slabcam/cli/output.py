"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from slabcam.core import MachiningEstimate
from slabcam.domain import Toolpath

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Slabcam[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def print_contour_info(path: str, points: int, area_mm2: float) -> None:
    """Print contour information.

    Args:
        path: Path to the contour file
        points: Number of contour points
        area_mm2: Enclosed area
    """
    line = Text("  ")
    line.append(path)
    console.print(line)
    console.print(f"  {points:,} points {SYM_DOT} {area_mm2:,.0f} mm²")


def print_toolpath_info(toolpath: Toolpath) -> None:
    """Print planned toolpath summary."""
    console.print(
        f"  [green]{len(toolpath)}[/green] {toolpath.axis.value} passes "
        f"{SYM_DOT} {toolpath.segment_count()} segments "
        f"{SYM_DOT} {toolpath.stepover:.2f} mm stepover"
    )


def print_estimate(estimate: MachiningEstimate) -> None:
    """Print the machining estimate as a table."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_row("Depth passes", str(estimate.depth_passes))
    table.add_row("Cut length", f"{estimate.cut_length_mm:,.0f} mm")
    table.add_row("Link length", f"{estimate.link_length_mm:,.0f} mm")
    table.add_row("Estimated time", _format_minutes(estimate.estimated_minutes))
    console.print(table)


def _format_minutes(minutes: float) -> str:
    """Format minutes into human-readable time string."""
    if minutes < 1:
        return f"{minutes * 60:.0f}s"
    if minutes < 60:
        return f"{minutes:.1f} min"
    hours = int(minutes // 60)
    return f"{hours}h {minutes % 60:.0f}min"


def print_polylines(traverse_points: int, cutting: list[int]) -> None:
    """Print parsed program polylines.

    Args:
        traverse_points: Points in the traverse polyline
        cutting: Point count of each cutting polyline
    """
    console.print(f"  Traverse {SYM_DOT} {traverse_points} points")
    for index, count in enumerate(cutting, start=1):
        console.print(f"  Depth pass {index} {SYM_DOT} {count} points")


def print_success(output_path: str, lines: int) -> None:
    """Print success message with summary."""
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green]")
    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({lines:,} lines)")
    console.print(line)


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")

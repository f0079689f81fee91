"""CLI application entry point for slabcam.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from slabcam import __version__
from slabcam.cli.output import (
    console,
    print_contour_info,
    print_error,
    print_estimate,
    print_header,
    print_polylines,
    print_step,
    print_success,
    print_toolpath_info,
)
from slabcam.config import LoggingConfig, MachiningParameters, PathDirection, SlabcamSettings
from slabcam.core import SurfacingPipeline
from slabcam.exceptions import SlabcamError
from slabcam.io import (
    DEFAULT_PROGRAM_NAME,
    GcodeParser,
    ProgramMetadata,
    load_contour_file,
    read_program,
    write_program,
)
from slabcam.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="slabcam",
    help="Plan slab-surfacing toolpaths and emit G-code programs.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Slabcam[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Slab-surfacing toolpath generator."""


@app.command()
def generate(
    contour_file: Annotated[
        Path,
        typer.Argument(
            help="JSON file with the machine-space slab contour",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output program path"),
    ] = Path(DEFAULT_PROGRAM_NAME),
    margin: Annotated[
        float,
        typer.Option("--margin", "-m", help="Safety margin around the slab (mm)", min=0.0),
    ] = 0.0,
    tool_diameter: Annotated[
        float,
        typer.Option("--tool-diameter", "-t", help="Cutter diameter (mm)", min=0.01),
    ] = 25.4,
    stepover: Annotated[
        float,
        typer.Option("--stepover", "-s", help="Stepover (mm, 0 = 75% of tool diameter)", min=0.0),
    ] = 0.0,
    depth: Annotated[
        float,
        typer.Option("--depth", "-d", help="Total cutting depth (mm)", min=0.0),
    ] = 1.0,
    depth_passes: Annotated[
        int,
        typer.Option("--depth-passes", "-n", help="Number of depth passes", min=1),
    ] = 1,
    feed_rate: Annotated[
        float,
        typer.Option("--feed-rate", help="Cutting feed rate (mm/min)", min=0.1),
    ] = 1000.0,
    plunge_rate: Annotated[
        float,
        typer.Option("--plunge-rate", help="Plunge feed rate (mm/min)", min=0.1),
    ] = 500.0,
    safety_height: Annotated[
        float,
        typer.Option("--safety-height", help="Retract height (mm)", min=0.1),
    ] = 10.0,
    spindle_speed: Annotated[
        int,
        typer.Option("--spindle-speed", help="Spindle speed (rpm)", min=0),
    ] = 18000,
    direction: Annotated[
        str,
        typer.Option("--direction", help="Sweep direction (auto|horizontal|vertical)"),
    ] = "auto",
    no_bridge: Annotated[
        bool,
        typer.Option("--no-bridge", help="Lift over gaps instead of cutting across them"),
    ] = False,
    no_home: Annotated[
        bool,
        typer.Option("--no-home", help="Do not return to X0 Y0 at the end"),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Write detailed logs to file"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level (DEBUG|INFO|WARNING|ERROR)"),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Minimal console output"),
    ] = False,
) -> None:
    """Plan a surfacing toolpath for a slab contour and write the G-code program.

    Example:
        slabcam generate slab.json --margin 10 --depth 2 --depth-passes 2
    """
    try:
        path_direction = PathDirection(direction.lower())
    except ValueError:
        print_error(
            f"Invalid direction: {direction}",
            details="Valid values: auto, horizontal, vertical",
        )
        raise typer.Exit(code=1)

    try:
        params = MachiningParameters(
            safety_height_mm=safety_height,
            feed_rate_mm_per_min=feed_rate,
            plunge_rate_mm_per_min=plunge_rate,
            cutting_depth_mm=depth,
            depth_passes=depth_passes,
            tool_diameter_mm=tool_diameter,
            stepover_mm=stepover,
            spindle_speed_rpm=spindle_speed,
            margin_mm=margin,
            path_direction=path_direction,
            bridge_gaps=not no_bridge,
            return_to_home=not no_home,
        )
    except ValidationError as e:
        print_error("Invalid machining parameters", details=str(e))
        raise typer.Exit(code=1)

    settings = SlabcamSettings(
        machining=params,
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )

    if not quiet:
        print_header(__version__)

    try:
        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )

        if not quiet:
            print_step("Loading contour")
        contour = load_contour_file(contour_file)
        if not quiet:
            print_contour_info(str(contour_file), len(contour), contour.area())

        if not quiet:
            print_step("Planning")
        pipeline = SurfacingPipeline(settings, logger=logger)
        result = pipeline.run(contour, metadata=ProgramMetadata(filename=output.name))

        if not quiet:
            print_toolpath_info(result.toolpath)
            print_estimate(result.estimate)

        write_program(output, result.program)

        if not quiet:
            print_success(str(output), result.program.count("\n"))

    except SlabcamError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except OSError as e:
        print_error("File system error", details=str(e))
        raise typer.Exit(code=1)


@app.command()
def inspect(
    program_file: Annotated[
        Path,
        typer.Argument(help="G-code program to parse", show_default=False),
    ],
) -> None:
    """Parse a G-code program and summarise its traverse and cutting polylines."""
    try:
        text = read_program(program_file)
    except OSError as e:
        print_error(f"Cannot read {program_file}", details=str(e))
        raise typer.Exit(code=1)

    program = GcodeParser().parse(text)
    print_step(f"Parsed {program_file}")
    print_polylines(len(program.traverse), [len(p) for p in program.cutting])


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()

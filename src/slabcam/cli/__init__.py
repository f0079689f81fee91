"""Command-line interface for slabcam.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Toolpath generation from a contour file
- Program inspection (parsed polylines)
- Verbose/quiet output modes
"""

from slabcam.cli.app import cli, main

__all__ = ["cli", "main"]

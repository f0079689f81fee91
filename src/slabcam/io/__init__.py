"""Program I/O layer for slabcam.

This module turns toolpaths into G-code text and G-code text back into
polylines, plus whole-buffer file helpers.

Key classes:
- GcodeEmitter: Serializes toolpaths into G-code programs
- GcodeParser: Parses G-code into traverse and cutting polylines
"""

from slabcam.io.emitter import GcodeEmitter, ProgramMetadata, emit_program
from slabcam.io.files import (
    DEFAULT_PROGRAM_NAME,
    load_contour_file,
    read_program,
    write_program,
)
from slabcam.io.parser import GcodeParser, ParsedProgram, parse_program

__all__ = [
    "DEFAULT_PROGRAM_NAME",
    "GcodeEmitter",
    "GcodeParser",
    "ParsedProgram",
    "ProgramMetadata",
    "emit_program",
    "load_contour_file",
    "parse_program",
    "read_program",
    "write_program",
]

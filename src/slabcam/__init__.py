"""Slabcam - Slab-surfacing toolpaths from calibrated workpiece contours.

Slabcam is the geometry and machine-control core of a slab-surfacing CNC
workflow. It maps pixel contours into machine coordinates using three
calibration markers, grows the contour by a safety margin, plans a zigzag
surfacing toolpath, and emits it as a G-code program. Programs can be parsed
back into polylines for visualization.

Example:
    $ slabcam generate slab.json -o slab_surfacing.gcode
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]

"""
Toolpath data module.

Defines the coordinate table and its structured views. This vocabulary
is the contract between pattern generation, G-code encoding and parsing.

All coordinates are in millimeters.
"""

from ded_toolpath.toolpath.coords import (
    CoordinateTable,
    Point,
    WeldLine,
    as_vector3,
)
from ded_toolpath.toolpath.summary import (
    RenderEvent,
    ToolpathStats,
    iter_render_events,
    summarize,
)

__all__ = [
    "CoordinateTable",
    "Point",
    "WeldLine",
    "as_vector3",
    "RenderEvent",
    "ToolpathStats",
    "iter_render_events",
    "summarize",
]

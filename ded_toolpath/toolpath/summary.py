"""Toolpath statistics and the render-event contract.

``summarize`` gives a dry-run style overview of a coordinate table
(line and point counts, deposition / travel distance, bounding box),
used by ``ded-inspect`` and logged after every build.

``iter_render_events`` fixes the order in which an external viewer must
draw a toolpath.  No drawing happens here; a renderer consumes the
events and turns each into one or more frames::

    for event in iter_render_events(table):
        viewer.draw(event)      # start marker, end marker, segment, ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal

import numpy as np

from ded_toolpath.toolpath.coords import CoordinateTable, Point

RenderKind = Literal["start_marker", "end_marker", "segment", "point_marker"]


@dataclass(frozen=True, slots=True)
class ToolpathStats:
    """Summary of one toolpath.

    Attributes
    ----------
    n_lines : int
        Number of weld lines.
    n_points : int
        Number of rows (rapid + linear targets).
    n_degenerate : int
        Lines with a single point (no deposition).
    deposition_mm : float
        Summed length of all linear (G01) segments.
    travel_mm : float
        Summed length of the rapid moves between consecutive lines
        (end of one line to start of the next).
    bbox_min, bbox_max : tuple[float, float, float] | None
        Axis-aligned bounds of all points, ``None`` for an empty table.
    """

    n_lines: int
    n_points: int
    n_degenerate: int
    deposition_mm: float
    travel_mm: float
    bbox_min: tuple[float, float, float] | None
    bbox_max: tuple[float, float, float] | None

    def describe(self) -> list[str]:
        """Human-readable report lines."""
        lines = [
            f"Weld lines:   {self.n_lines} ({self.n_degenerate} degenerate)",
            f"Points:       {self.n_points}",
            f"Deposition:   {self.deposition_mm:.3f} mm",
            f"Travel:       {self.travel_mm:.3f} mm",
        ]
        if self.bbox_min is not None and self.bbox_max is not None:
            lo = ", ".join(f"{v:.3f}" for v in self.bbox_min)
            hi = ", ".join(f"{v:.3f}" for v in self.bbox_max)
            lines.append(f"Bounds:       ({lo}) -> ({hi})")
        return lines


@dataclass(frozen=True, slots=True)
class RenderEvent:
    """One drawing step for a toolpath viewer."""

    kind: RenderKind
    line_index: int
    points: tuple[Point, ...]


def summarize(table: CoordinateTable) -> ToolpathStats:
    """Compute :class:`ToolpathStats` for *table*."""
    lines = table.weld_lines()

    deposition = sum(line.length() for line in lines)
    travel = sum(
        prev.end.distance_to(cur.start) for prev, cur in zip(lines, lines[1:])
    )

    bbox_min = bbox_max = None
    pts = table.points
    if len(table) and not np.all(np.isnan(pts)):
        lo = np.nanmin(pts, axis=0)
        hi = np.nanmax(pts, axis=0)
        bbox_min = (float(lo[0]), float(lo[1]), float(lo[2]))
        bbox_max = (float(hi[0]), float(hi[1]), float(hi[2]))

    return ToolpathStats(
        n_lines=len(lines),
        n_points=len(table),
        n_degenerate=sum(1 for line in lines if line.is_degenerate),
        deposition_mm=float(deposition),
        travel_mm=float(travel),
        bbox_min=bbox_min,
        bbox_max=bbox_max,
    )


def iter_render_events(table: CoordinateTable) -> Iterator[RenderEvent]:
    """Yield drawing steps in viewer order.

    Per weld line, per segment: ``start_marker`` at the segment start,
    ``end_marker`` at the segment end, then the connecting ``segment``.
    A single-point line yields one ``point_marker``.
    """
    for line in table.weld_lines():
        if line.is_degenerate:
            yield RenderEvent("point_marker", line.line_index, (line.start,))
            continue
        for a, b in line.segments():
            yield RenderEvent("start_marker", line.line_index, (a,))
            yield RenderEvent("end_marker", line.line_index, (b,))
            yield RenderEvent("segment", line.line_index, (a, b))

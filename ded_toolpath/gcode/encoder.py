"""G-code encoder -- coordinate table to motion commands.

Every weld line becomes one rapid move to its first point followed by
one linear (deposition) move per remaining point::

    G00 X13.000 Y40.500 Z0.000  ; (Start new weld line 1)
    G01 X37.000 Y40.500 Z0.000
    G00 ...

Rows are grouped by the *value* of their line index, in order of first
appearance, so rows of one line need not be adjacent in the input.

Numbers are fixed-point with 3 decimals.  Header and footer, when
enabled, are ``;`` comment lines only; the output never contains
commands other than ``G00`` and ``G01``.

File output is atomic: the full program is rendered in memory, written
to a temporary file and renamed over the target, so a failed write never
leaves a truncated program behind.
"""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path
from typing import Sequence

import numpy as np

from ded_toolpath.errors import ConfigurationError
from ded_toolpath.toolpath.coords import CoordinateTable, WeldLine, as_vector3
from ded_toolpath.utils import fs

logger = logging.getLogger(__name__)

RAPID = "G00"
LINEAR = "G01"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _num(value: float) -> str:
    """Fixed-point, 3 decimals, no negative zero."""
    text = f"{value:.3f}"
    return "0.000" if text == "-0.000" else text


def _xyz(x: float, y: float, z: float) -> str:
    return f"X{_num(x)} Y{_num(y)} Z{_num(z)}"


def _as_table(table: CoordinateTable | Sequence[Sequence[float]] | np.ndarray) -> CoordinateTable:
    if isinstance(table, CoordinateTable):
        return table
    return CoordinateTable(table)


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------


class GCodeEncoder:
    """Convert a coordinate table to G-code text.

    Parameters
    ----------
    header : bool
        Emit comment header and footer, default True.
    annotate : bool
        Append ``; (Start new weld line N)`` to each rapid move,
        default True.
    """

    def __init__(self, header: bool = True, annotate: bool = True) -> None:
        self.header = header
        self.annotate = annotate

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encode(
        self,
        table: CoordinateTable | Sequence[Sequence[float]] | np.ndarray,
        origin_shift: Sequence[float] | None = None,
    ) -> str:
        """Encode *table* as a G-code program.

        Parameters
        ----------
        table : CoordinateTable | array-like
            ``[line_index, X, Y, Z]`` rows (extra columns ignored).
        origin_shift : 3-vector, optional
            Added to every X/Y/Z value.  ``None`` means no shift.

        Returns
        -------
        str
            Complete program, newline-terminated.

        Raises
        ------
        ConfigurationError
            If rows have fewer than 4 columns, hold non-finite
            coordinates, or *origin_shift* is not a finite 3-vector.
        """
        table = _as_table(table)
        shift = (
            np.zeros(3) if origin_shift is None
            else as_vector3(origin_shift, "origin_shift")
        )
        if not np.all(np.isfinite(table.points)):
            raise ConfigurationError(
                "Coordinate table contains non-finite X/Y/Z values"
            )

        lines = table.shifted(shift).weld_lines()

        buf = StringIO()
        if self.header:
            self._write_header(buf, lines, shift)
        for line in lines:
            self._write_line(line, buf)
        if self.header:
            self._write_footer(buf)
        return buf.getvalue()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_line(self, line: WeldLine, buf: StringIO) -> None:
        first = line.start
        buf.write(f"{RAPID} {_xyz(first.x, first.y, first.z)}")
        if self.annotate:
            buf.write(f"  ; (Start new weld line {line.line_index})")
        buf.write("\n")
        for p in line.points[1:]:
            buf.write(f"{LINEAR} {_xyz(p.x, p.y, p.z)}\n")

    def _write_header(
        self, buf: StringIO, lines: list[WeldLine], shift: np.ndarray
    ) -> None:
        n_points = sum(len(line.points) for line in lines)
        buf.write("; Generated by ded_toolpath G-code encoder\n")
        buf.write("; Units: mm, absolute coordinates\n")
        buf.write(f"; Weld lines: {len(lines)}, points: {n_points}\n")
        buf.write(f"; Origin shift: {_xyz(*shift)}\n")
        buf.write("\n")

    def _write_footer(self, buf: StringIO) -> None:
        buf.write("\n")
        buf.write("; --- End of toolpath ---\n")


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def encode_gcode(
    table: CoordinateTable | Sequence[Sequence[float]] | np.ndarray,
    origin_shift: Sequence[float] | None = None,
    *,
    header: bool = True,
    annotate: bool = True,
) -> str:
    """Encode *table* to G-code text; see :meth:`GCodeEncoder.encode`."""
    return GCodeEncoder(header=header, annotate=annotate).encode(table, origin_shift)


def write_gcode_file(
    table: CoordinateTable | Sequence[Sequence[float]] | np.ndarray,
    path: str | Path,
    origin_shift: Sequence[float] | None = None,
    *,
    header: bool = True,
    annotate: bool = True,
) -> Path:
    """Encode *table* and write it atomically to *path*.

    Parameters
    ----------
    table : CoordinateTable | array-like
        ``[line_index, X, Y, Z]`` rows.
    path : str | Path
        Target file.  Parent directories are created.
    origin_shift : 3-vector, optional
        Added to every X/Y/Z value.

    Returns
    -------
    Path
        The written file.

    Raises
    ------
    ConfigurationError
        If the table or shift is invalid (nothing is written).
    OSError
        If the file cannot be created or written.  No partial file is
        left at *path*.
    """
    path = Path(path)
    table = _as_table(table)
    text = encode_gcode(table, origin_shift, header=header, annotate=annotate)
    fs.atomic_write_text(path, text)
    logger.info(
        "Wrote %d weld lines (%d commands) to %s",
        len(table.line_indices()),
        len(table),
        path,
    )
    return path

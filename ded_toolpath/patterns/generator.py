"""Single-layer infill pattern generator.

Each layer covers a square region with straight, parallel weld lines.
Line ``i`` (1-based) is offset from the origin edge along ``line_axis``
by ``(i - 1) * beam_width`` plus half a beam width, so the first and
last passes are centred inside the covered strip::

    start_i = origin + line_axis * ((i - 1) * beam_width + beam_width / 2)
    end_i   = start_i + main_axis * side_length

Variants differ only in the travel direction of each line:

    zigzag : odd lines run start -> end, even lines end -> start, so
             consecutive lines meet at a near-coincident turn point.
    raster : every line runs start -> end; the repositioning between
             lines is left to the rapid move that opens the next line.

Each line is emitted as its two endpoints only.  Multi-segment lines
come from other producers as a ready-made :class:`CoordinateTable`.

Line indices increase by exactly one per line for both variants: the
first line of a layer is ``start_line_index + 1`` and the returned
index is the last one assigned, ready to seed the next layer.
"""

from __future__ import annotations

import dataclasses
import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import numpy as np

from ded_toolpath.errors import ConfigurationError
from ded_toolpath.toolpath.coords import CoordinateTable, as_vector3

logger = logging.getLogger(__name__)

_ORTHOGONAL_TOL = 1e-9

Vector3 = tuple[float, float, float]


class PatternType(str, Enum):
    """Closed set of infill patterns."""

    ZIGZAG = "zigzag"
    RASTER = "raster"

    @classmethod
    def parse(cls, value: PatternType | str) -> PatternType:
        """Convert a pattern name to :class:`PatternType`.

        Raises
        ------
        ConfigurationError
            If *value* is not a recognised pattern.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ConfigurationError(
                f"Unknown pattern type {value!r}, expected one of: {allowed}"
            ) from None


# ---------------------------------------------------------------------------
# Layer specification
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LayerSpec:
    """Geometric parameters of one layer.

    Parameters
    ----------
    pattern : PatternType | str
        ``"zigzag"`` or ``"raster"``.
    beam_width : float
        Spacing between adjacent weld lines (mm), > 0.
    side_length : float
        Side of the square region (mm), > 0 and a whole multiple of
        ``beam_width``.
    origin : 3-vector
        Reference corner of the layer (mm).
    main_axis : 3-vector
        Travel direction of each line.  Any non-zero length.
    line_axis : 3-vector
        Direction in which successive lines are offset.  Any non-zero
        length.

    Raises
    ------
    ConfigurationError
        On any violated constraint; the message names the constraint.
    """

    pattern: PatternType
    beam_width: float
    side_length: float
    origin: Vector3
    main_axis: Vector3
    line_axis: Vector3

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", PatternType.parse(self.pattern))

        for name in ("origin", "main_axis", "line_axis"):
            vec = as_vector3(getattr(self, name), name)
            object.__setattr__(self, name, tuple(float(v) for v in vec))

        for name in ("main_axis", "line_axis"):
            if np.linalg.norm(getattr(self, name)) == 0.0:
                raise ConfigurationError(f"{name} must have non-zero magnitude")

        for name in ("beam_width", "side_length"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"{name} must be a number, got {getattr(self, name)!r}"
                ) from None
            if not np.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {value}")
            object.__setattr__(self, name, value)

        # Exact remainder of the stored floats; 1.2 / 0.4 does not divide
        if self.side_length < self.beam_width or math.fmod(self.side_length, self.beam_width) != 0.0:
            raise ConfigurationError(
                f"side_length ({self.side_length}) must be wholly divisible "
                f"by beam_width ({self.beam_width})"
            )

    @property
    def n_lines(self) -> int:
        """Number of weld lines in the layer."""
        return int(round(self.side_length / self.beam_width))

    def with_origin_z(self, z: float) -> LayerSpec:
        """Copy with the origin moved to build height *z*."""
        x, y, _ = self.origin
        return dataclasses.replace(self, origin=(x, y, float(z)))

    def with_swapped_axes(self) -> LayerSpec:
        """Copy with ``main_axis`` and ``line_axis`` exchanged."""
        return dataclasses.replace(
            self, main_axis=self.line_axis, line_axis=self.main_axis
        )

    def with_pattern(self, pattern: PatternType | str) -> LayerSpec:
        return dataclasses.replace(self, pattern=PatternType.parse(pattern))

    def generate(self, start_line_index: int = 0) -> tuple[CoordinateTable, int]:
        """Generate this layer's coordinates; see :func:`generate_layer`."""
        start = _as_line_index(start_line_index)

        main = np.asarray(self.main_axis) / np.linalg.norm(self.main_axis)
        line = np.asarray(self.line_axis) / np.linalg.norm(self.line_axis)
        if abs(float(np.dot(main, line))) > _ORTHOGONAL_TOL:
            logger.warning(
                "main_axis %s and line_axis %s are not orthogonal; "
                "lines will be sheared",
                self.main_axis,
                self.line_axis,
            )

        n = self.n_lines
        i = np.arange(1, n + 1)
        line_offset = np.outer((i - 1) * self.beam_width, line)
        beam_offset = line * self.beam_width / 2.0
        starts = np.asarray(self.origin) + line_offset + beam_offset
        ends = starts + main * self.side_length

        first, second = _ORDERINGS[self.pattern](i, starts, ends)

        rows = np.empty((2 * n, 4), dtype=np.float64)
        rows[0::2, 0] = start + i
        rows[0::2, 1:] = first
        rows[1::2, 0] = start + i
        rows[1::2, 1:] = second

        last = start + n
        logger.debug(
            "Generated %d %s lines at z=%.3f (indices %d-%d)",
            n,
            self.pattern.value,
            self.origin[2],
            start + 1,
            last,
        )
        return CoordinateTable(rows), last


# ---------------------------------------------------------------------------
# Line orderings
# ---------------------------------------------------------------------------


def _zigzag_order(
    i: np.ndarray, starts: np.ndarray, ends: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Reverse every even-numbered line."""
    even = (i % 2 == 0)[:, None]
    return np.where(even, ends, starts), np.where(even, starts, ends)


def _raster_order(
    i: np.ndarray, starts: np.ndarray, ends: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Every line runs along +main_axis."""
    return starts, ends


_ORDERINGS: dict[
    PatternType,
    Callable[[np.ndarray, np.ndarray, np.ndarray], tuple[np.ndarray, np.ndarray]],
] = {
    PatternType.ZIGZAG: _zigzag_order,
    PatternType.RASTER: _raster_order,
}


def _as_line_index(value: int) -> int:
    try:
        valid = not isinstance(value, bool) and int(value) == value
    except (TypeError, ValueError):
        valid = False
    if not valid:
        raise ConfigurationError(
            f"start_line_index must be an integer, got {value!r}"
        )
    return int(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_layer(
    start_line_index: int,
    pattern_type: PatternType | str,
    beam_width: float,
    side_length: float,
    origin_coord: Sequence[float],
    main_axis: Sequence[float],
    line_axis: Sequence[float],
) -> tuple[CoordinateTable, int]:
    """Generate the weld lines of one layer.

    Parameters
    ----------
    start_line_index : int
        Last index used by the previous layer (0 for the first layer).
    pattern_type : PatternType | str
        ``"zigzag"`` or ``"raster"``.
    beam_width : float
        Spacing between adjacent lines (mm).
    side_length : float
        Side of the square region (mm); whole multiple of *beam_width*.
    origin_coord : 3-vector
        Reference corner of the layer (mm).
    main_axis, line_axis : 3-vector
        Travel and line-offset directions; normalised internally.

    Returns
    -------
    tuple[CoordinateTable, int]
        Two rows (start, end) per line, and the last line index used.

    Raises
    ------
    ConfigurationError
        If any parameter is invalid.  Nothing is generated.

    Examples
    --------
    >>> table, last = generate_layer(0, "raster", 6, 24, [0, 0, 0], [1, 0, 0], [0, 1, 0])
    >>> last
    4
    >>> table.rows[0].tolist()
    [1.0, 0.0, 3.0, 0.0]
    """
    spec = LayerSpec(
        pattern=pattern_type,
        beam_width=beam_width,
        side_length=side_length,
        origin=origin_coord,
        main_axis=main_axis,
        line_axis=line_axis,
    )
    return spec.generate(start_line_index)

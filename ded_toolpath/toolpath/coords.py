"""Coordinate data -- the vocabulary shared by every pipeline stage.

A toolpath is carried between stages as a :class:`CoordinateTable`: an
ordered ``(N, 4)`` array of ``[line_index, X, Y, Z]`` rows.  All rows
that share one ``line_index`` form a *weld line*; the first of them is
reached by a rapid (non-depositing) move, every later one by a linear
deposition move.

Units are **millimetres** throughout.

The structured views (:class:`Point`, :class:`WeldLine`) are immutable,
slotted dataclasses in the same spirit as the table itself: nothing in
the pipeline mutates data owned by another stage.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

import numpy as np

from ded_toolpath.errors import ConfigurationError

# Columns of a coordinate row
INDEX_COL = 0
XYZ_COLS = slice(1, 4)
N_COLS = 4


# ---------------------------------------------------------------------------
# Vector helpers
# ---------------------------------------------------------------------------


def as_vector3(value: Sequence[float] | np.ndarray, name: str) -> np.ndarray:
    """Coerce *value* to a finite float 3-vector.

    Parameters
    ----------
    value : sequence of float
        Candidate vector.
    name : str
        Parameter name used in the error message.

    Returns
    -------
    np.ndarray
        Shape ``(3,)`` float64 copy.

    Raises
    ------
    ConfigurationError
        If *value* does not have exactly 3 finite numeric components.
    """
    try:
        vec = np.asarray(value, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"{name} must be a 3-element vector [x, y, z], got {value!r}"
        ) from exc
    if vec.size != 3:
        raise ConfigurationError(
            f"{name} must be a 3-element vector [x, y, z], got {vec.size} elements"
        )
    if not np.all(np.isfinite(vec)):
        raise ConfigurationError(f"{name} must be finite, got {vec.tolist()}")
    return vec.copy()


# ---------------------------------------------------------------------------
# Structured views
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Point:
    """A single toolpath coordinate (mm)."""

    x: float
    y: float
    z: float

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_to(self, other: Point) -> float:
        return math.dist(self.to_tuple(), other.to_tuple())


@dataclass(frozen=True, slots=True)
class WeldLine:
    """One continuous deposition pass.

    Parameters
    ----------
    line_index : int
        Identifier shared by every point of the pass.
    points : tuple[Point, ...]
        Ordered points.  Must contain >= 1 point; the first is the
        rapid-move target.  A single-point line is *degenerate*: it is
        valid but deposits nothing.
    """

    line_index: int
    points: tuple[Point, ...]

    def __post_init__(self) -> None:
        if len(self.points) < 1:
            raise ConfigurationError(
                f"Weld line {self.line_index} requires >= 1 point, got 0"
            )

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def is_degenerate(self) -> bool:
        return len(self.points) == 1

    def segments(self) -> Iterator[tuple[Point, Point]]:
        """Yield consecutive ``(from, to)`` deposition segments."""
        for a, b in zip(self.points, self.points[1:]):
            yield a, b

    def length(self) -> float:
        """Total deposition length (mm)."""
        return sum(a.distance_to(b) for a, b in self.segments())


# ---------------------------------------------------------------------------
# Coordinate table
# ---------------------------------------------------------------------------


class CoordinateTable:
    """Ordered ``[line_index, X, Y, Z]`` rows.

    The backing array is a read-only float64 copy; every transform
    returns a new table.

    Parameters
    ----------
    rows : array-like, optional
        ``(N, >=4)`` rows.  Columns past the fourth are dropped.
        ``None`` or an empty sequence gives an empty table.

    Raises
    ------
    ConfigurationError
        If *rows* is not 2-D with at least 4 columns, or a line index
        is not a finite integer.
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: Iterable[Sequence[float]] | np.ndarray | None = None) -> None:
        if isinstance(rows, CoordinateTable):
            self._rows = rows._rows
            return

        if rows is None:
            arr = np.empty((0, N_COLS), dtype=np.float64)
        else:
            if not isinstance(rows, np.ndarray):
                rows = list(rows)
            try:
                arr = np.array(rows, dtype=np.float64)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"Coordinate rows must be numeric [line_index, X, Y, Z]: {exc}"
                ) from exc
            if arr.size == 0:
                arr = np.empty((0, N_COLS), dtype=np.float64)

        if arr.ndim != 2 or arr.shape[1] < N_COLS:
            raise ConfigurationError(
                f"Coordinate rows must have at least {N_COLS} columns "
                f"[line_index, X, Y, Z], got shape {arr.shape}"
            )

        arr = np.ascontiguousarray(arr[:, :N_COLS])
        index = arr[:, INDEX_COL]
        if not np.all(np.isfinite(index)) or not np.all(index == np.round(index)):
            raise ConfigurationError("line_index column must hold finite integers")

        arr.setflags(write=False)
        self._rows = arr

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_weld_lines(cls, lines: Iterable[WeldLine]) -> CoordinateTable:
        """Flatten weld lines into rows, preserving line and point order."""
        rows = [
            (line.line_index, p.x, p.y, p.z)
            for line in lines
            for p in line.points
        ]
        return cls(rows)

    @classmethod
    def concat(cls, tables: Iterable[CoordinateTable]) -> CoordinateTable:
        """Concatenate tables, preserving row order."""
        arrays = [t.rows for t in tables]
        if not arrays:
            return cls()
        return cls(np.concatenate(arrays, axis=0))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def rows(self) -> np.ndarray:
        """Read-only ``(N, 4)`` array."""
        return self._rows

    @property
    def line_index(self) -> np.ndarray:
        """``(N,)`` integer line index column."""
        return self._rows[:, INDEX_COL].astype(np.int64)

    @property
    def points(self) -> np.ndarray:
        """``(N, 3)`` XYZ columns (read-only view)."""
        return self._rows[:, XYZ_COLS]

    def __len__(self) -> int:
        return int(self._rows.shape[0])

    def __iter__(self) -> Iterator[tuple[int, float, float, float]]:
        for idx, x, y, z in self._rows:
            yield int(idx), float(x), float(y), float(z)

    def __repr__(self) -> str:
        return (
            f"CoordinateTable(rows={len(self)}, "
            f"lines={len(self.line_indices())})"
        )

    def line_indices(self) -> list[int]:
        """Distinct line indices in order of first appearance."""
        index = self.line_index
        if index.size == 0:
            return []
        _, first = np.unique(index, return_index=True)
        return [int(i) for i in index[np.sort(first)]]

    def weld_lines(self) -> list[WeldLine]:
        """Group rows into weld lines.

        Grouping is by *value* of ``line_index``, not by position: rows
        of one index that are not adjacent are gathered into a single
        line in their original relative order.  Lines are ordered by
        first appearance.
        """
        index = self.line_index
        if index.size == 0:
            return []
        # One stable sort; each group keeps row order, so g[0] is its first row
        order = np.argsort(index, kind="stable")
        bounds = np.flatnonzero(np.diff(index[order])) + 1
        groups = sorted(np.split(order, bounds), key=lambda g: g[0])
        pts = self.points
        return [
            WeldLine(
                line_index=int(index[g[0]]),
                points=tuple(Point(float(x), float(y), float(z)) for x, y, z in pts[g]),
            )
            for g in groups
        ]

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def shifted(self, offset: Sequence[float] | np.ndarray) -> CoordinateTable:
        """Return a copy with *offset* added to every XYZ row."""
        vec = as_vector3(offset, "offset")
        arr = self._rows.copy()
        arr[:, XYZ_COLS] += vec
        return CoordinateTable(arr)

    def renumbered(self, start: int = 1) -> CoordinateTable:
        """Return a copy with dense line indices ``start, start+1, ...``.

        Distinct indices are mapped in first-appearance order; row
        positions are unchanged.
        """
        mapping = {old: start + k for k, old in enumerate(self.line_indices())}
        arr = self._rows.copy()
        arr[:, INDEX_COL] = [mapping[int(i)] for i in self.line_index]
        return CoordinateTable(arr)

    def grouped(self) -> CoordinateTable:
        """Return a copy whose rows are contiguous per line index."""
        return CoordinateTable.from_weld_lines(self.weld_lines())

    def allclose(self, other: CoordinateTable, atol: float = 5e-4) -> bool:
        """Same shape, identical line indices and XYZ within *atol*."""
        if self._rows.shape != other.rows.shape:
            return False
        if not np.array_equal(self.line_index, other.line_index):
            return False
        return bool(np.allclose(self.points, other.points, rtol=0.0, atol=atol))

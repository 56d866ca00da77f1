"""G-code parser -- motion commands back to a coordinate table.

Understands exactly two commands:

    G00  rapid move: starts a new weld line at the commanded point
    G01  linear move: appends the commanded point to the current line

Parsing rules:
    - Blank lines and lines starting with ``;`` are skipped.
    - Inline comments (``;`` to end of line) are stripped first.
    - A line is a command only if one of its whitespace-separated words
      is ``G00`` or ``G01`` (case-insensitive); any other line is
      ignored.  If both appear, the rapid move wins.
    - Each word whose first letter is X, Y or Z (case-insensitive) sets
      that axis; other words are ignored.
    - Axis values carry forward for the whole file: a command that omits
      an axis reuses the last value seen for it.
    - A G01 before any G00 implicitly starts weld line 1.

Weld lines in the result are numbered densely from 1 in file order.

Malformed content:
    Axis values must be plain decimals (``-1.25``, ``+2``, ``.5``);
    exponents, ``inf``/``nan`` and ``_`` digit separators are rejected.
    Lenient mode (default) never fails on content.  An unparsable number
    or an axis that has not been set yet becomes NaN in the emitted row
    and is reported through the logger.  Strict mode raises
    :class:`GCodeParseError` naming the offending line instead.

Parser state (current line index, last-seen axis values) is created
fresh for every parse call; nothing is shared between calls.

Usage:
    from ded_toolpath.gcode.parser import read_gcode_file
    table = read_gcode_file("generated_gcode.txt")
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ded_toolpath.errors import GCodeParseError
from ded_toolpath.toolpath.coords import CoordinateTable

logger = logging.getLogger(__name__)

RAPID = "G00"
LINEAR = "G01"
COMMENT = ";"

_AXES = {"X": 0, "Y": 1, "Z": 2}

# Plain decimal only: no exponent, inf/nan or digit separators
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


@dataclass
class _ParseState:
    """Mutable state threaded through one parse call."""

    current_line_index: int = 0
    position: list[float] = field(default_factory=lambda: [math.nan] * 3)
    rows: list[tuple[float, float, float, float]] = field(default_factory=list)
    incomplete_rows: int = 0


class GCodeParser:
    """Parse ``G00``/``G01`` programs into a :class:`CoordinateTable`.

    Parameters
    ----------
    strict : bool
        Raise :class:`GCodeParseError` on unparsable numbers and on
        commands issued before every axis has a value.  Default False
        (lenient: NaN in the row plus a logged warning).
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_lines(self, lines: Iterable[str]) -> CoordinateTable:
        """Parse an iterable of program lines (newlines optional)."""
        state = _ParseState()
        for number, raw in enumerate(lines, start=1):
            self._parse_line(raw, number, state)

        if state.incomplete_rows:
            logger.warning(
                "%d point(s) contain unset or unparsable axis values (NaN)",
                state.incomplete_rows,
            )
        return CoordinateTable(state.rows)

    def parse_string(self, text: str) -> CoordinateTable:
        """Parse a complete program held in memory."""
        return self.parse_lines(text.splitlines())

    def parse_file(self, path: str | Path) -> CoordinateTable:
        """Parse a program file.

        Raises
        ------
        OSError
            If the file cannot be opened (``FileNotFoundError``,
            ``PermissionError``, ...).
        GCodeParseError
            In strict mode, on malformed content.
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            table = self.parse_lines(f)
        logger.info(
            "Parsed %d weld lines (%d points) from %s",
            len(table.line_indices()),
            len(table),
            path,
        )
        return table

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _parse_line(self, raw: str, number: int, state: _ParseState) -> None:
        line = raw.strip()
        if not line or line.startswith(COMMENT):
            return

        line = line.split(COMMENT, 1)[0]
        words = line.split()
        commands = {w.upper() for w in words}
        is_rapid = RAPID in commands
        is_linear = LINEAR in commands
        if not (is_rapid or is_linear):
            return

        for word in words:
            axis = _AXES.get(word[0].upper())
            if axis is not None:
                state.position[axis] = self._parse_number(word, number)

        if any(math.isnan(v) for v in state.position):
            if self.strict:
                missing = [a for a, i in _AXES.items() if math.isnan(state.position[i])]
                raise GCodeParseError(
                    f"axis {', '.join(missing)} has no value", line_number=number
                )
            state.incomplete_rows += 1

        if is_rapid:
            state.current_line_index += 1
        elif state.current_line_index == 0:
            logger.warning(
                "Line %d: %s before any %s, starting weld line 1",
                number,
                LINEAR,
                RAPID,
            )
            state.current_line_index = 1

        x, y, z = state.position
        state.rows.append((state.current_line_index, x, y, z))

    def _parse_number(self, word: str, number: int) -> float:
        if _NUMBER.fullmatch(word[1:]):
            return float(word[1:])
        if self.strict:
            raise GCodeParseError(f"cannot parse number in {word!r}", line_number=number)
        logger.warning("Line %d: cannot parse number in %r", number, word)
        return math.nan


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def parse_gcode(text: str, strict: bool = False) -> CoordinateTable:
    """Parse G-code *text*; see :class:`GCodeParser`."""
    return GCodeParser(strict=strict).parse_string(text)


def read_gcode_file(path: str | Path, strict: bool = False) -> CoordinateTable:
    """Parse the G-code file at *path*; see :meth:`GCodeParser.parse_file`."""
    return GCodeParser(strict=strict).parse_file(path)

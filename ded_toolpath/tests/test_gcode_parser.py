"""Tests for the G00/G01 parser.

Covers comment handling, axis carry-forward, implicit weld lines and the
lenient / strict treatment of malformed content.
"""

from __future__ import annotations

import logging
import math

import pytest

from ded_toolpath.errors import GCodeParseError
from ded_toolpath.gcode.parser import GCodeParser, parse_gcode, read_gcode_file


def _rows(text: str, strict: bool = False) -> list[tuple]:
    return list(parse_gcode(text, strict=strict))


# ---------------------------------------------------------------------------
# Well-formed input
# ---------------------------------------------------------------------------


class TestBasicParsing:
    def test_rapid_then_linear(self) -> None:
        text = "G00 X0 Y0 Z0\nG01 X10 Y0 Z0\n"
        assert _rows(text) == [(1, 0.0, 0.0, 0.0), (1, 10.0, 0.0, 0.0)]

    def test_each_rapid_starts_new_line(self) -> None:
        text = "G00 X0 Y0 Z0\nG01 X1 Y0 Z0\nG00 X0 Y5 Z0\nG00 X0 Y9 Z0\n"
        table = parse_gcode(text)
        assert table.line_index.tolist() == [1, 1, 2, 3]

    def test_comments_and_blank_lines_skipped(self) -> None:
        text = (
            "; header comment\n"
            "\n"
            "   ; indented comment\n"
            "G00 X1 Y2 Z3 ; inline comment X99\n"
            "G00 X4 Y5 Z6  ; (Start new weld line 2)\n"
        )
        assert _rows(text) == [(1, 1.0, 2.0, 3.0), (2, 4.0, 5.0, 6.0)]

    def test_case_insensitive(self) -> None:
        assert _rows("g00 x1 y2 z3\ng01 x4 y5 z6") == [
            (1, 1.0, 2.0, 3.0),
            (1, 4.0, 5.0, 6.0),
        ]

    def test_whitespace_collapsed(self) -> None:
        assert _rows("  G01\t\tX1   Y2 \t Z3  ") == [(1, 1.0, 2.0, 3.0)]

    def test_word_order_irrelevant(self) -> None:
        assert _rows("Z3 X1 G00 Y2") == [(1, 1.0, 2.0, 3.0)]

    def test_empty_program(self) -> None:
        table = parse_gcode("; nothing here\n")
        assert len(table) == 0

    def test_decimal_and_signed_values(self) -> None:
        assert _rows("G00 X-1.250 Y+2.5 Z.5") == [(1, -1.25, 2.5, 0.5)]


# ---------------------------------------------------------------------------
# Command recognition
# ---------------------------------------------------------------------------


class TestCommandRecognition:
    def test_other_commands_ignored(self) -> None:
        text = "G21\nG90\nM400\nG28 X0 Y0 Z0\nG00 X1 Y1 Z1\n"
        assert _rows(text) == [(1, 1.0, 1.0, 1.0)]

    def test_no_substring_match(self) -> None:
        # G001 and G010 are not G00/G01 words
        assert _rows("G001 X1 Y1 Z1\nG010 X2 Y2 Z2\n") == []

    def test_unknown_words_ignored(self) -> None:
        assert _rows("G01 X1 Y2 Z3 F1200 E0.5") == [(1, 1.0, 2.0, 3.0)]

    def test_rapid_wins_over_linear(self) -> None:
        text = "G00 X0 Y0 Z0\nG01 G00 X1 Y1 Z1\n"
        assert parse_gcode(text).line_index.tolist() == [1, 2]

    def test_axis_words_on_ignored_lines_do_not_count(self) -> None:
        (row,) = _rows("G92 X50\nG00 Y1 Z1")
        assert math.isnan(row[1])


# ---------------------------------------------------------------------------
# State tracking
# ---------------------------------------------------------------------------


class TestState:
    def test_axis_values_carry_forward(self) -> None:
        text = "G00 X1 Y2 Z3\nG01 X5\nG00 Z7\n"
        assert _rows(text) == [
            (1, 1.0, 2.0, 3.0),
            (1, 5.0, 2.0, 3.0),
            (2, 5.0, 2.0, 7.0),
        ]

    def test_linear_before_rapid_starts_line_one(self, caplog) -> None:
        text = "G01 X1 Y1 Z1\nG01 X2 Y1 Z1\nG00 X0 Y0 Z0\n"
        with caplog.at_level(logging.WARNING, logger="ded_toolpath.gcode.parser"):
            table = parse_gcode(text)
        assert table.line_index.tolist() == [1, 1, 2]
        assert "before any G00" in caplog.text

    def test_state_not_shared_between_calls(self) -> None:
        parser = GCodeParser()
        parser.parse_string("G00 X1 Y1 Z1\nG00 X2 Y2 Z2\n")
        (row,) = list(parser.parse_string("G00 X5"))
        assert row[0] == 1
        assert row[1] == 5.0
        assert math.isnan(row[2]) and math.isnan(row[3])

    def test_parse_lines_accepts_newlines(self) -> None:
        table = GCodeParser().parse_lines(["G00 X1 Y2 Z3\n", "G01 X4 Y5 Z6\r\n"])
        assert table.rows.tolist() == [[1.0, 1.0, 2.0, 3.0], [1.0, 4.0, 5.0, 6.0]]


# ---------------------------------------------------------------------------
# Malformed content
# ---------------------------------------------------------------------------


class TestLenient:
    def test_unparsable_number_is_nan(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="ded_toolpath.gcode.parser"):
            (row,) = _rows("G00 Xabc Y1 Z1")
        assert math.isnan(row[1])
        assert row[2:] == (1.0, 1.0)
        assert "cannot parse number" in caplog.text

    def test_bare_axis_letter_is_nan(self) -> None:
        (row,) = _rows("G00 X Y1 Z1")
        assert math.isnan(row[1])

    def test_unset_axis_is_nan(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="ded_toolpath.gcode.parser"):
            (row,) = _rows("G00 X1 Y1")
        assert math.isnan(row[3])
        assert "NaN" in caplog.text

    def test_later_values_recover(self) -> None:
        rows = _rows("G00 Xabc Y1 Z1\nG01 X2\n")
        assert rows[1] == (1, 2.0, 1.0, 1.0)

    @pytest.mark.parametrize("word", ["Xinf", "X-inf", "Xnan", "X1_0", "X1e3", "XInfinity"])
    def test_non_decimal_spelling_is_nan(self, word, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="ded_toolpath.gcode.parser"):
            (row,) = _rows(f"G00 {word} Y1 Z1")
        assert math.isnan(row[1])
        assert "cannot parse number" in caplog.text


class TestStrict:
    def test_unparsable_number(self) -> None:
        with pytest.raises(GCodeParseError, match="line 2") as excinfo:
            parse_gcode("G00 X0 Y0 Z0\nG01 X1.2.3 Y0 Z0\n", strict=True)
        assert excinfo.value.line_number == 2

    @pytest.mark.parametrize("word", ["Xinf", "Xnan", "X1_0", "X1e3"])
    def test_non_decimal_spelling(self, word) -> None:
        with pytest.raises(GCodeParseError, match="cannot parse number"):
            parse_gcode(f"G00 {word} Y0 Z0\n", strict=True)

    def test_unset_axis(self) -> None:
        with pytest.raises(GCodeParseError, match="axis Z has no value"):
            parse_gcode("; comment\nG00 X1 Y1\n", strict=True)

    def test_well_formed_passes(self) -> None:
        table = parse_gcode("G00 X1 Y2 Z3\nG01 X4\n", strict=True)
        assert len(table) == 2

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_gcode("G00 Xbad Y0 Z0", strict=True)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestReadFile:
    def test_reads_file(self, tmp_path) -> None:
        path = tmp_path / "part.gcode"
        path.write_text("G00 X1 Y2 Z3\nG01 X4 Y5 Z6\n", encoding="utf-8")
        table = read_gcode_file(path)
        assert table.line_indices() == [1]
        assert len(table) == 2

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            read_gcode_file(tmp_path / "missing.gcode")

    def test_directory_is_os_error(self, tmp_path) -> None:
        with pytest.raises(OSError):
            read_gcode_file(tmp_path)

    def test_strict_file(self, tmp_path) -> None:
        path = tmp_path / "bad.gcode"
        path.write_text("G00 X1 Y2\n")
        with pytest.raises(GCodeParseError):
            read_gcode_file(path, strict=True)

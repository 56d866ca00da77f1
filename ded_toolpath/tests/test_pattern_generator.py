"""Tests for single-layer zigzag / raster generation.

Covers parameter validation, line counts, travel-direction alternation,
axis normalisation and line-index bookkeeping.
"""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from ded_toolpath.errors import ConfigurationError
from ded_toolpath.patterns.generator import LayerSpec, PatternType, generate_layer


def _layer(pattern="zigzag", beam=6.0, side=24.0, origin=(0.0, 0.0, 0.0),
           main=(1.0, 0.0, 0.0), line=(0.0, 1.0, 0.0), start=0):
    return generate_layer(start, pattern, beam, side, origin, main, line)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    @pytest.mark.parametrize(
        "side,beam",
        [(24.0, 5.0), (10.0, 3.0), (1.0, 0.3), (3.0, 6.0), (1.2, 0.4), (24.0, 24.000001)],
    )
    def test_not_divisible(self, side, beam) -> None:
        assert math.fmod(side, beam) != 0.0 or side < beam
        with pytest.raises(ConfigurationError, match="wholly divisible"):
            _layer(beam=beam, side=side)

    @pytest.mark.parametrize("side,beam,n", [(24.0, 6.0, 4), (1.5, 0.5, 3), (5.0, 5.0, 1), (24, 6, 4)])
    def test_exactly_divisible(self, side, beam, n) -> None:
        assert math.fmod(side, beam) == 0.0
        table, last = _layer(beam=beam, side=side)
        assert last == n
        assert len(table) == 2 * n

    @pytest.mark.parametrize("beam", [0.0, -6.0, float("nan"), float("inf")])
    def test_bad_beam_width(self, beam) -> None:
        with pytest.raises(ConfigurationError, match="beam_width"):
            _layer(beam=beam)

    @pytest.mark.parametrize("side", [0.0, -24.0])
    def test_bad_side_length(self, side) -> None:
        with pytest.raises(ConfigurationError, match="side_length"):
            _layer(side=side)

    def test_non_numeric_beam_width(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a number"):
            _layer(beam="wide")

    @pytest.mark.parametrize("name", ["origin", "main", "line"])
    def test_wrong_vector_length(self, name) -> None:
        with pytest.raises(ConfigurationError, match="3-element"):
            _layer(**{name: (1.0, 0.0)})

    @pytest.mark.parametrize("name,label", [("main", "main_axis"), ("line", "line_axis")])
    def test_zero_axis(self, name, label) -> None:
        with pytest.raises(ConfigurationError, match=f"{label} must have non-zero magnitude"):
            _layer(**{name: (0.0, 0.0, 0.0)})

    def test_unknown_pattern(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown pattern type"):
            _layer(pattern="spiral")

    @pytest.mark.parametrize("start", ["a", 1.5, True, None])
    def test_bad_start_index(self, start) -> None:
        with pytest.raises(ConfigurationError, match="start_line_index"):
            _layer(start=start)

    def test_pattern_parse_is_case_insensitive(self) -> None:
        assert PatternType.parse(" ZigZag ") is PatternType.ZIGZAG
        assert PatternType.parse(PatternType.RASTER) is PatternType.RASTER


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestRaster:
    def test_concrete_layer(self) -> None:
        table, last = _layer(pattern="raster")
        assert last == 4
        assert table.rows.tolist() == [
            [1.0, 0.0, 3.0, 0.0], [1.0, 24.0, 3.0, 0.0],
            [2.0, 0.0, 9.0, 0.0], [2.0, 24.0, 9.0, 0.0],
            [3.0, 0.0, 15.0, 0.0], [3.0, 24.0, 15.0, 0.0],
            [4.0, 0.0, 21.0, 0.0], [4.0, 24.0, 21.0, 0.0],
        ]

    def test_every_line_runs_along_main_axis(self) -> None:
        main = np.array([0.0, -1.0, 0.0])
        table, _ = _layer(pattern="raster", origin=(13.0, 37.5, 2.0),
                          main=tuple(main), line=(1.0, 0.0, 0.0))
        for wl in table.weld_lines():
            delta = np.subtract(wl.end.to_tuple(), wl.start.to_tuple())
            np.testing.assert_allclose(delta, main * 24.0)


class TestZigzag:
    def test_even_lines_reversed(self) -> None:
        table, last = _layer(pattern="zigzag")
        assert last == 4
        lines = table.weld_lines()
        assert lines[0].start.to_tuple() == (0.0, 3.0, 0.0)
        assert lines[0].end.to_tuple() == (24.0, 3.0, 0.0)
        assert lines[1].start.to_tuple() == (24.0, 9.0, 0.0)
        assert lines[1].end.to_tuple() == (0.0, 9.0, 0.0)

    @pytest.mark.parametrize(
        "main,line",
        [
            ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
            ((0.0, 1.0, 0.0), (1.0, 0.0, 0.0)),
            ((0.0, -1.0, 0.0), (-1.0, 0.0, 0.0)),
        ],
    )
    def test_alternation(self, main, line) -> None:
        table, _ = _layer(pattern="zigzag", origin=(13.0, 37.5, 4.0), main=main, line=line)
        for k, wl in enumerate(table.weld_lines(), start=1):
            delta = np.subtract(wl.end.to_tuple(), wl.start.to_tuple())
            sign = 1.0 if k % 2 else -1.0
            np.testing.assert_allclose(delta, sign * np.asarray(main) * 24.0)

    def test_turn_points_are_near_coincident(self) -> None:
        table, _ = _layer(pattern="zigzag")
        lines = table.weld_lines()
        for a, b in zip(lines, lines[1:]):
            assert a.end.distance_to(b.start) == pytest.approx(6.0)


class TestGeometry:
    @pytest.mark.parametrize("pattern", ["zigzag", "raster"])
    def test_line_count_and_two_points_per_line(self, pattern) -> None:
        table, last = _layer(pattern=pattern, beam=2.0, side=20.0)
        assert last == 10
        assert len(table) == 20
        assert all(len(wl.points) == 2 for wl in table.weld_lines())

    def test_axes_normalised(self) -> None:
        unit, _ = _layer(main=(1.0, 0.0, 0.0), line=(0.0, 1.0, 0.0))
        scaled, _ = _layer(main=(2.0, 0.0, 0.0), line=(0.0, 5.0, 0.0))
        np.testing.assert_allclose(scaled.rows, unit.rows)

    def test_lines_stay_in_origin_plane(self) -> None:
        table, _ = _layer(origin=(13.0, 37.5, 8.0))
        assert np.all(table.points[:, 2] == 8.0)

    def test_non_orthogonal_axes_warn(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="ded_toolpath.patterns.generator"):
            table, _ = _layer(main=(1.0, 1.0, 0.0), line=(0.0, 1.0, 0.0))
        assert len(table) == 8
        assert "not orthogonal" in caplog.text


class TestLineIndices:
    @pytest.mark.parametrize("pattern", ["zigzag", "raster"])
    def test_indices_continue_from_start(self, pattern) -> None:
        table, last = _layer(pattern=pattern, start=10)
        assert table.line_indices() == [11, 12, 13, 14]
        assert last == 14

    def test_negative_start_allowed(self) -> None:
        _, last = _layer(start=-4)
        assert last == 0


# ---------------------------------------------------------------------------
# LayerSpec helpers
# ---------------------------------------------------------------------------


class TestLayerSpec:
    def test_fields_coerced(self, base_layer: LayerSpec) -> None:
        assert base_layer.pattern is PatternType.ZIGZAG
        assert base_layer.origin == (13.0, 37.5, 0.0)
        assert base_layer.n_lines == 4

    def test_with_swapped_axes(self, base_layer: LayerSpec) -> None:
        swapped = base_layer.with_swapped_axes()
        assert swapped.main_axis == base_layer.line_axis
        assert swapped.line_axis == base_layer.main_axis

    def test_with_origin_z(self, base_layer: LayerSpec) -> None:
        assert base_layer.with_origin_z(6).origin == (13.0, 37.5, 6.0)

    def test_with_pattern(self, base_layer: LayerSpec) -> None:
        assert base_layer.with_pattern("raster").pattern is PatternType.RASTER

    def test_frozen(self, base_layer: LayerSpec) -> None:
        with pytest.raises(AttributeError):
            base_layer.beam_width = 3.0

"""Multi-layer assembly -- stack single-layer patterns along Z.

A build is described by a :class:`BuildPlan`: one base layer, the number
of layers, the Z increment between layers, and an axis-swap rule.  With
``AxisSwapRule.ALTERNATE`` every even-numbered layer exchanges its main
and line axes, producing the usual cross-hatched stack::

    layer 1: lines along +X, stepping +Y      (z = z0)
    layer 2: lines along +Y, stepping +X      (z = z0 + h)
    layer 3: lines along +X, stepping +Y      (z = z0 + 2h)
    ...

The last line index of each layer seeds the next, so indices increase by
exactly one per weld line across the whole build.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ded_toolpath.errors import ConfigurationError
from ded_toolpath.patterns.generator import LayerSpec, PatternType
from ded_toolpath.toolpath.coords import CoordinateTable

logger = logging.getLogger(__name__)


class AxisSwapRule(str, Enum):
    """How main/line axes change from one layer to the next."""

    NONE = "none"
    ALTERNATE = "alternate"

    @classmethod
    def parse(cls, value: AxisSwapRule | str) -> AxisSwapRule:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(r.value for r in cls)
            raise ConfigurationError(
                f"Unknown axis swap rule {value!r}, expected one of: {allowed}"
            ) from None

    def swaps(self, layer_number: int) -> bool:
        """Whether 1-based *layer_number* uses swapped axes."""
        return self is AxisSwapRule.ALTERNATE and layer_number % 2 == 0


@dataclass(frozen=True, slots=True)
class BuildPlan:
    """Layer stack description.

    Parameters
    ----------
    layer : LayerSpec
        First layer.  Its origin Z is the build start height.
    n_layers : int
        Number of layers, >= 1.
    layer_height : float
        Z increment added to the origin before each following layer (mm).
    swap_rule : AxisSwapRule | str
        ``"none"`` or ``"alternate"``.
    start_line_index : int
        Index preceding the first weld line (0 numbers lines from 1).
    pattern_sequence : tuple[PatternType, ...] | None
        Patterns cycled per layer.  ``None`` repeats ``layer.pattern``.
    """

    layer: LayerSpec
    n_layers: int = 1
    layer_height: float = 0.0
    swap_rule: AxisSwapRule = AxisSwapRule.NONE
    start_line_index: int = 0
    pattern_sequence: tuple[PatternType, ...] | None = None

    def __post_init__(self) -> None:
        try:
            valid = (
                not isinstance(self.n_layers, bool)
                and int(self.n_layers) == self.n_layers
                and self.n_layers >= 1
            )
        except (TypeError, ValueError):
            valid = False
        if not valid:
            raise ConfigurationError(f"n_layers must be an integer >= 1, got {self.n_layers!r}")
        object.__setattr__(self, "n_layers", int(self.n_layers))

        try:
            height = float(self.layer_height)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"layer_height must be a number, got {self.layer_height!r}"
            ) from None
        if not math.isfinite(height):
            raise ConfigurationError(f"layer_height must be finite, got {height}")
        object.__setattr__(self, "layer_height", height)
        object.__setattr__(self, "swap_rule", AxisSwapRule.parse(self.swap_rule))
        if self.pattern_sequence is not None:
            seq = tuple(PatternType.parse(p) for p in self.pattern_sequence)
            if not seq:
                raise ConfigurationError("pattern_sequence must not be empty")
            object.__setattr__(self, "pattern_sequence", seq)


def plan_layers(plan: BuildPlan) -> list[LayerSpec]:
    """Expand a :class:`BuildPlan` into one :class:`LayerSpec` per layer."""
    z0 = plan.layer.origin[2]
    layers = []
    for k in range(1, plan.n_layers + 1):
        spec = plan.layer.with_origin_z(z0 + (k - 1) * plan.layer_height)
        if plan.pattern_sequence is not None:
            spec = spec.with_pattern(
                plan.pattern_sequence[(k - 1) % len(plan.pattern_sequence)]
            )
        if plan.swap_rule.swaps(k):
            spec = spec.with_swapped_axes()
        layers.append(spec)
    return layers


def assemble_layers(
    layers: Iterable[LayerSpec],
    start_line_index: int = 0,
) -> tuple[CoordinateTable, int]:
    """Generate and concatenate layers in order.

    Parameters
    ----------
    layers : Iterable[LayerSpec]
        Layers in build order.
    start_line_index : int
        Index preceding the first weld line.

    Returns
    -------
    tuple[CoordinateTable, int]
        Full-build table (row order preserved) and the last index used.
    """
    tables = []
    last = start_line_index
    for number, spec in enumerate(layers, start=1):
        table, last = spec.generate(last)
        tables.append(table)
        logger.debug(
            "Layer %d: %s, %d lines, z=%.3f",
            number,
            spec.pattern.value,
            spec.n_lines,
            spec.origin[2],
        )
    return CoordinateTable.concat(tables), last


def build_toolpath(plan: BuildPlan) -> CoordinateTable:
    """Generate the complete toolpath described by *plan*."""
    layers = plan_layers(plan)
    table, last = assemble_layers(layers, plan.start_line_index)
    logger.info(
        "Assembled %d layers, %d weld lines (indices %d-%d)",
        len(layers),
        last - plan.start_line_index,
        plan.start_line_index + 1,
        last,
    )
    return table

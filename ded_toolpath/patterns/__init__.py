"""
Pattern generation module.

Single-layer zigzag / raster infill and multi-layer stacking.
"""

from ded_toolpath.patterns.assembler import (
    AxisSwapRule,
    BuildPlan,
    assemble_layers,
    build_toolpath,
    plan_layers,
)
from ded_toolpath.patterns.generator import LayerSpec, PatternType, generate_layer

__all__ = [
    "AxisSwapRule",
    "BuildPlan",
    "LayerSpec",
    "PatternType",
    "assemble_layers",
    "build_toolpath",
    "generate_layer",
    "plan_layers",
]

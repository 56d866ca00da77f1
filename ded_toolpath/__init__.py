"""DED toolpath generation and G-code round-tripping.

Generates deposition toolpaths for layer-by-layer directed energy
deposition builds (zigzag / raster infill of a square region), writes
them as ``G00``/``G01`` motion commands, and parses those commands back
into structured coordinate data.

Subpackages:
    toolpath: Coordinate table, weld lines, summary statistics
    patterns: Single-layer pattern generation and multi-layer assembly
    gcode: G-code encoder and parser
    configs: Build configuration loading and validation
    utils: Atomic file I/O and logging setup
    scripts: Command-line entrypoints

Architecture layers (strict one-way dependency):
    scripts/ → configs/ → {patterns, gcode}/ → toolpath/ → utils/

Key invariants:
    - Geometry in millimeters end-to-end
    - Weld line indices strictly increase by 1 across a whole build
    - Every rapid move (G00) starts a new weld line
"""

__version__ = "0.3.0"

__all__ = ["toolpath", "patterns", "gcode", "configs", "utils", "scripts"]

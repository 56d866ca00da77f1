"""
G-code module.

Encodes coordinate tables as G00/G01 motion commands and parses those
commands back into coordinate tables.
"""

from ded_toolpath.gcode.encoder import GCodeEncoder, encode_gcode, write_gcode_file
from ded_toolpath.gcode.parser import GCodeParser, parse_gcode, read_gcode_file

__all__ = [
    "GCodeEncoder",
    "GCodeParser",
    "encode_gcode",
    "parse_gcode",
    "read_gcode_file",
    "write_gcode_file",
]

#!/usr/bin/env python3
"""
Inspect G-code Script.

Parse a G00/G01 program back into weld lines and report what it holds.

Usage:
    ded-inspect generated_gcode.txt
    ded-inspect generated_gcode.txt --strict
    ded-inspect generated_gcode.txt --csv coords.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

import numpy as np

from ded_toolpath.errors import GCodeParseError
from ded_toolpath.gcode.parser import read_gcode_file
from ded_toolpath.toolpath.summary import summarize
from ded_toolpath.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parse a G-code toolpath and print a summary",
    )
    parser.add_argument(
        "gcode",
        type=str,
        help="G-code file to inspect",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unparsable numbers or unset axes instead of emitting NaN",
    )
    parser.add_argument(
        "--csv",
        type=str,
        help="Write the parsed [line_index, X, Y, Z] table to this CSV file",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Log level (default WARNING)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, context={"app": "inspect"})

    try:
        table = read_gcode_file(args.gcode, strict=args.strict)
    except (GCodeParseError, OSError) as e:
        logger.error("Cannot parse %s: %s", args.gcode, e)
        return 1

    print(f"File:         {args.gcode}")
    for line in summarize(table).describe():
        print(line)

    if args.csv:
        try:
            np.savetxt(
                args.csv,
                table.rows,
                fmt=["%d", "%.3f", "%.3f", "%.3f"],
                delimiter=",",
                header="line_index,x,y,z",
                comments="",
            )
        except OSError as e:
            logger.error("Cannot write %s: %s", args.csv, e)
            return 1
        print(f"Table written to {args.csv}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

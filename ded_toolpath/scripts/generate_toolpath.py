#!/usr/bin/env python3
"""
Generate Toolpath Script.

Build a layered zigzag / raster toolpath from a build file and write it
as G-code.

Usage:
    ded-generate                                  # shipped default build
    ded-generate --config cube.yaml --output cube.gcode
    ded-generate --layers 10 --pattern raster --no-header
    python -m ded_toolpath.scripts.generate_toolpath --config cube.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from ded_toolpath.configs.loader import load_config, save_config
from ded_toolpath.errors import ConfigurationError
from ded_toolpath.gcode.encoder import write_gcode_file
from ded_toolpath.patterns.assembler import AxisSwapRule, build_toolpath
from ded_toolpath.patterns.generator import PatternType
from ded_toolpath.toolpath.summary import summarize
from ded_toolpath.utils.logging_config import push_context, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate DED toolpath G-code from a build file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Patterns: {', '.join(p.value for p in PatternType)}",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Build file path (default: shipped build.yaml)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="G-code output path (overrides output.gcode_path)",
    )
    parser.add_argument(
        "--layers",
        "-n",
        type=int,
        help="Number of layers (overrides build.n_layers)",
    )
    parser.add_argument(
        "--pattern",
        "-p",
        type=str,
        choices=[p.value for p in PatternType],
        help="Layer pattern (overrides layer.pattern)",
    )
    parser.add_argument(
        "--axis-swap",
        type=str,
        choices=[r.value for r in AxisSwapRule],
        help="Axis swap rule (overrides build.axis_swap)",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Omit the comment header and footer",
    )
    parser.add_argument(
        "--save-config",
        type=str,
        help="Also write the effective build file to this path",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides logging.log_level)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)

        overrides: dict[str, dict] = {}
        if args.layers is not None:
            overrides.setdefault("build", {})["n_layers"] = args.layers
        if args.axis_swap is not None:
            overrides.setdefault("build", {})["axis_swap"] = args.axis_swap
        if args.pattern is not None:
            overrides.setdefault("layer", {})["pattern"] = args.pattern
        if args.output is not None:
            overrides.setdefault("output", {})["gcode_path"] = args.output
        if args.no_header:
            overrides.setdefault("output", {})["header"] = False
        if args.log_level is not None:
            overrides.setdefault("logging", {})["log_level"] = args.log_level
        if overrides:
            config = config.with_overrides(**overrides)
    except (ConfigurationError, OSError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(**config.logging.model_dump(), context={"app": "generate"})
    push_context(build=Path(args.config).stem if args.config else "default")

    try:
        table = build_toolpath(config.to_plan())
        out_path = write_gcode_file(
            table,
            config.output.gcode_path,
            config.output.origin_shift_mm,
            header=config.output.header,
            annotate=config.output.annotate,
        )
        if args.save_config:
            save_config(config, args.save_config)
    except (ConfigurationError, OSError) as e:
        logger.error("Toolpath generation failed: %s", e)
        return 1

    print(f"G-code written to {out_path}")
    for line in summarize(table.shifted(config.output.origin_shift_mm)).describe():
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())

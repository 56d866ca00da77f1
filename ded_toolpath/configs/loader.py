"""Configuration loader for toolpath builds.

Loads ``build.yaml`` and validates it against the ``build.v1`` schema.
All geometry (beam width, side length, origin, axes, layer height) comes
from the file -- nothing is hardcoded in the generators.

Usage::

    from ded_toolpath.configs.loader import load_config
    cfg = load_config()                     # shipped default build
    cfg = load_config("/builds/cube.yaml")  # explicit path
    plan = cfg.to_plan()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ded_toolpath.configs.schema import BuildConfig, validate_build_config
from ded_toolpath.errors import ConfigurationError
from ded_toolpath.utils.fs import atomic_yaml_dump, load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "build.yaml"


def load_config(path: str | Path | None = None) -> BuildConfig:
    """Load and validate a build configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to a build file.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    BuildConfig
        Fully validated configuration.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ConfigurationError
        If the file is empty, not valid YAML, or fails validation.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading build configuration from %s", path)

    try:
        data: Any = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigurationError(str(exc)) from exc

    if data is None:
        raise ConfigurationError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(data).__name__}: {path}"
        )

    config = validate_build_config(data, source=str(path))
    logger.info(
        "Configuration loaded: %d x %s layer(s), beam %.3f mm, side %.3f mm",
        config.build.n_layers,
        config.layer.pattern.value,
        config.layer.beam_width_mm,
        config.layer.side_length_mm,
    )
    return config


def save_config(config: BuildConfig, path: str | Path) -> Path:
    """Write *config* as YAML atomically; returns the written path."""
    path = Path(path)
    atomic_yaml_dump(config.to_dict(), path)
    logger.info("Saved build configuration to %s", path)
    return path

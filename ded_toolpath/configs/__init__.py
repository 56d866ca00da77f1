"""Build configuration loading and validation."""

from ded_toolpath.configs.loader import DEFAULT_CONFIG_PATH, load_config, save_config
from ded_toolpath.configs.schema import (
    BuildConfig,
    BuildSection,
    LayerSection,
    LoggingSection,
    OutputSection,
    validate_build_config,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "BuildConfig",
    "BuildSection",
    "LayerSection",
    "LoggingSection",
    "OutputSection",
    "load_config",
    "save_config",
    "validate_build_config",
]

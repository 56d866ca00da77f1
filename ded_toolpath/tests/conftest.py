"""Shared fixtures for the ded_toolpath test suite."""

from __future__ import annotations

import logging

import pytest

from ded_toolpath.patterns.generator import LayerSpec
from ded_toolpath.utils import logging_config


@pytest.fixture()
def base_layer() -> LayerSpec:
    """24 mm zigzag layer with 6 mm beams, lines along +X stepping +Y."""
    return LayerSpec(
        pattern="zigzag",
        beam_width=6.0,
        side_length=24.0,
        origin=(13.0, 37.5, 0.0),
        main_axis=(1.0, 0.0, 0.0),
        line_axis=(0.0, 1.0, 0.0),
    )


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo root-logger changes made by setup_logging()."""
    root = logging.getLogger()
    level = root.level
    yield
    while logging_config._installed_handlers:
        handler = logging_config._installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
    logging_config.pop_context()
    root.setLevel(level)

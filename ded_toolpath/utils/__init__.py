"""Shared helpers with no dependency on the rest of the package.

    fs              atomic G-code / YAML writes, YAML loading
    logging_config  root-logger setup and contextual log fields
"""

from . import fs
from . import logging_config

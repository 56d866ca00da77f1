"""Root-logger setup for the ded-generate and ded-inspect entrypoints.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are attached here, once, by the command-line tools.

Each line carries the contextual fields pushed with :func:`push_context`
(``app``, ``build``, ...).  Two renderings are available:

    human   14:02:51.307 | INFO     | app=generate build=cube | Wrote 20 weld lines
    json    {"t": "...", "lvl": "INFO", "name": "...", "app": "generate", "msg": "..."}

The console is always human-readable; a log file may use either.

Usage:
    from ded_toolpath.utils.logging_config import setup_logging
    setup_logging(**config.logging.model_dump(), context={"app": "generate"})
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_fields: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "ded_log_fields", default={}
)

# Handlers attached by setup_logging(); anything else on the root logger
# (pytest capture, embedding applications) is left alone.
_installed_handlers: list[logging.Handler] = []

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


class ContextFormatter(logging.Formatter):
    """One-line formatter with contextual fields.

    Parameters
    ----------
    mode : str
        ``"human"`` or ``"json"``.
    use_color : bool
        Colour the level name; honoured only when stderr is a TTY.
    """

    def __init__(self, mode: str = "human", use_color: bool = False) -> None:
        if mode not in ("human", "json"):
            raise ValueError(f"Unknown log format {mode!r}, expected 'human' or 'json'")
        super().__init__()
        self.mode = mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        fields = _fields.get()
        if self.mode == "json":
            payload = {
                "t": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                "lvl": record.levelname,
                "name": record.name,
                "pid": os.getpid(),
                **fields,
                "msg": record.getMessage(),
            }
            if record.exc_info:
                payload["exc"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)

        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"

        parts = [f"{stamp}.{int(record.msecs):03d}", level]
        if fields:
            parts.append(" ".join(f"{k}={v}" for k, v in fields.items()))
        parts.append(record.getMessage())
        text = " | ".join(parts)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def setup_logging(
    log_level: str = "INFO",
    log_file: str | None = None,
    *,
    json_format: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    max_bytes: int | None = None,
    backup_count: int = 3,
    context: dict[str, Any] | None = None,
) -> list[logging.Handler]:
    """Attach console and file handlers to the root logger.

    Calling it again replaces the handlers installed by the previous
    call, so it is safe to run once per CLI invocation in one process.

    Parameters
    ----------
    log_level : str
        ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` or ``CRITICAL``
        (case-insensitive).
    log_file : str, optional
        Also log to this file; parent directories are created.
    json_format : bool
        Write the log file as JSON lines instead of human lines.
    color : bool
        Colour console level names when stderr is a terminal.
    to_stderr : bool
        Attach a console handler.
    max_bytes : int, optional
        Rotate the log file once it reaches this size.
    backup_count : int
        Rotated files to keep when *max_bytes* is set.
    context : dict, optional
        Fields pushed with :func:`push_context` before returning.

    Returns
    -------
    list[logging.Handler]
        The handlers now attached by this module.

    Raises
    ------
    ValueError
        If *log_level* is not a standard level name.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    root = logging.getLogger()
    while _installed_handlers:
        old = _installed_handlers.pop()
        root.removeHandler(old)
        old.close()
    root.setLevel(level)

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", use_color=color))
        _installed_handlers.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        if max_bytes:
            file_handler: logging.Handler = logging.handlers.RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        else:
            file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(ContextFormatter("json" if json_format else "human"))
        _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        root.addHandler(handler)
    logging.captureWarnings(True)

    if context:
        push_context(**context)
    return list(_installed_handlers)


def push_context(**fields: Any) -> None:
    """Add *fields* to every subsequent log line of this context."""
    _fields.set({**_fields.get(), **fields})


def pop_context(*keys: str) -> None:
    """Drop the named fields, or all fields when called without keys."""
    if not keys:
        _fields.set({})
        return
    _fields.set({k: v for k, v in _fields.get().items() if k not in keys})


def get_context() -> dict[str, Any]:
    """Copy of the current contextual fields."""
    return dict(_fields.get())

"""File helpers for G-code programs and build files.

Every write goes through a sibling ``<name>.tmp`` file that is flushed,
fsync'd and renamed over the target.  Readers therefore see either the
previous file or the complete new one, never a truncated program.

Usage:
    from ded_toolpath.utils import fs
    fs.atomic_write_text("out/cube.gcode", program)
    data = fs.load_yaml("cube.yaml")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

TMP_SUFFIX = ".tmp"


def ensure_dir(p: str | Path) -> Path:
    """Create *p* (and parents) if missing and return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def _replace_atomically(path: Path, payload: bytes) -> None:
    ensure_dir(path.parent)
    staging = path.with_name(path.name + TMP_SUFFIX)
    try:
        with open(staging, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        staging.replace(path)
    except BaseException:
        staging.unlink(missing_ok=True)
        raise


def atomic_write_text(path: str | Path, text: str, encoding: str = "utf-8") -> None:
    """Write *text* to *path* atomically.

    Parameters
    ----------
    path : str | Path
        Target file; parent directories are created.
    text : str
        Full file content.
    encoding : str
        Text encoding, default ``"utf-8"``.

    Raises
    ------
    OSError
        If the directory, staging file or rename fails.  The staging
        file is removed and *path* is left as it was.
    """
    _replace_atomically(Path(path), text.encode(encoding))


def atomic_yaml_dump(obj: Any, path: str | Path) -> None:
    """Dump *obj* as block-style YAML (key order kept) atomically."""
    text = yaml.safe_dump(obj, sort_keys=False, default_flow_style=None, allow_unicode=True)
    _replace_atomically(Path(path), text.encode("utf-8"))


def load_yaml(path: str | Path) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns
    -------
    Any
        Parsed document; ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    yaml.YAMLError
        If the document is malformed; the message names the file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise yaml.YAMLError(f"{path}: {exc}") from exc

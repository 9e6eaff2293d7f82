"""Locating and reading ``famgraph.toml``.

The file is looked up from the working directory towards the filesystem
root, the way git finds ``.git/``. ``FAMGRAPH_CONFIG`` names a file
explicitly and disables the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "famgraph.toml"
CONFIG_ENV_VAR = "FAMGRAPH_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``famgraph.toml`` at or above *start* (default: cwd).

    When ``FAMGRAPH_CONFIG`` is set, return that path if it is a file and
    None otherwise.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*. Invalid TOML becomes a ClickException naming the file."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


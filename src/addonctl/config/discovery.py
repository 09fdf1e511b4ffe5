"""Config file discovery and loading.

``addonctl.toml`` is looked up from the working directory upwards, the
way git finds ``.git``. ``ADDONCTL_CONFIG`` points at a file directly.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "addonctl.toml"
CONFIG_ENV_VAR = "ADDONCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start* (default: cwd).

    ``ADDONCTL_CONFIG`` wins when set; it yields None if that file is
    missing. Otherwise the nearest ``addonctl.toml`` in *start* or one of
    its parents is returned.
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

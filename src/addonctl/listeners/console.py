"""Built-in listener that echoes toasts and error reports to stderr.

Used by the CLI unless ``--quiet`` or ``--json`` is given.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from addonctl.listeners.hookspecs import hookimpl

if TYPE_CHECKING:
    from addonctl.domain.errors import AddonError

_LEVEL_PREFIX = {
    "success": "OK",
    "error": "ERROR",
    "info": "INFO",
}


class ConsoleListener:
    """Writes toasts as single lines to stderr."""

    @hookimpl
    def show_toast(self, message: str, level: str) -> None:
        prefix = _LEVEL_PREFIX.get(level, level.upper())
        click.echo(f"{prefix}: {message}", err=True)

    @hookimpl
    def addon_errors(self, batch: str, errors: list[AddonError]) -> None:
        click.echo(f"{len(errors)} addon error(s) during {batch}:", err=True)
        for error in errors:
            click.echo(f"  {error.name}: {error.reason} {error.cause.message}", err=True)

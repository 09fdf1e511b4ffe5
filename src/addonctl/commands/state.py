"""Commands: enable, disable, toggle, reload, and forget a single addon.

Each command loads every addon first (so persisted state is applied),
performs one transition, and lets the root group tear the manager down,
which saves the enabled map.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from addonctl.commands._base import AddonCommand, addon_argument

if TYPE_CHECKING:
    from addonctl.commands._context import AppContext


@click.command(
    cls=AddonCommand,
    examples="""\
  addonctl enable dark-mode
  addonctl --json enable dark-mode""",
)
@addon_argument()
@click.pass_obj
def enable(app: AppContext, addon_id: str) -> None:
    """Start an addon and remember it as enabled."""
    app.run_addon_op("enable", addon_id, lambda: app.manager.enable(addon_id))


@click.command(
    cls=AddonCommand,
    examples="""\
  addonctl disable dark-mode""",
)
@addon_argument()
@click.pass_obj
def disable(app: AppContext, addon_id: str) -> None:
    """Stop an addon and remember it as disabled."""
    app.run_addon_op("disable", addon_id, lambda: app.manager.disable(addon_id))


@click.command(
    cls=AddonCommand,
    examples="""\
  addonctl toggle dark-mode""",
)
@addon_argument()
@click.pass_obj
def toggle(app: AppContext, addon_id: str) -> None:
    """Enable a disabled addon, or disable an enabled one."""
    app.run_addon_op("toggle", addon_id, lambda: app.manager.toggle(addon_id))


@click.command(
    cls=AddonCommand,
    examples="""\
  addonctl reload dark-mode
  addonctl reload dark-mode.addon.py""",
)
@addon_argument("target")
@click.pass_obj
def reload(app: AppContext, target: str) -> None:
    """Reload an addon from its source file (by id or filename)."""
    app.run_addon_op("reload", target, lambda: app.manager.reload(target))


@click.command(
    cls=AddonCommand,
    examples="""\
  addonctl forget dark-mode""",
)
@addon_argument()
@click.pass_obj
def forget(app: AppContext, addon_id: str) -> None:
    """Unload an addon and delete its persisted enabled state."""
    app.run_addon_op("forget", addon_id, lambda: app.manager.unload(addon_id, forget=True))

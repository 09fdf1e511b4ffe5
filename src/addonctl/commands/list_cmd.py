"""Command: list discovered addons."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from addonctl.commands._base import AddonCommand
from addonctl.services.result import ServiceResult

if TYPE_CHECKING:
    from addonctl.commands._context import AppContext


@click.command(
    "list",
    cls=AddonCommand,
    examples="""\
  addonctl list
  addonctl list --enabled
  addonctl --json list""",
)
@click.option("--enabled", "only_enabled", is_flag=True, help="Only show enabled addons.")
@click.pass_obj
def list_cmd(app: AppContext, only_enabled: bool) -> None:
    """List addons with their lifecycle state."""
    items = [app.summarize(record) for record in app.manager.list()]
    if only_enabled:
        items = [item for item in items if item["enabled"]]
    warnings = [f"{e.name}: {e.reason}" for e in app.load_errors]
    app.emit(
        ServiceResult(
            ok=True,
            op="list",
            data={"items": items, "count": len(items)},
            warnings=warnings,
        )
    )

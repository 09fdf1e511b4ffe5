"""Command: load every addon and report failures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from addonctl.commands._base import AddonCommand
from addonctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from addonctl.commands._context import AppContext


@click.command(
    cls=AddonCommand,
    examples="""\
  addonctl check
  addonctl --no-autostart check
  addonctl --json check""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Load all addons and report compile, construction, and hook errors."""
    manager = app.manager
    errors = [error.model_dump(mode="json") for error in app.load_errors]
    data = {"loaded": len(manager.list()), "error_count": len(errors)}

    if not errors:
        app.emit(ServiceResult(ok=True, op="check", data=data))
        return

    app.emit(
        ServiceResult(
            ok=False,
            op="check",
            data=data,
            error=ServiceError(
                code="ADDON_ERRORS",
                message=f"{len(errors)} addon error(s) during load",
                detail={"errors": errors},
            ),
        )
    )

"""AppContext: the object the root group hands to every subcommand.

It owns the AddonManager for one invocation and turns manager outcomes
into ServiceResults printed on the right stream.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from addonctl.domain.errors import AddonError, AddonNotFoundError
from addonctl.output.formatters import OutputSettings, format_result
from addonctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from addonctl.config.settings import AddonSettings
    from addonctl.domain.records import AddonRecord
    from addonctl.services.manager import AddonManager


class AppContext:
    """Per-invocation state reached through ``@click.pass_obj``.

    Addon code only runs once a command touches :attr:`manager`, so
    ``--help``, ``--version`` and ``--examples`` never execute it.
    """

    def __init__(self, settings: AddonSettings) -> None:
        self.settings = settings
        self._manager: AddonManager | None = None
        self.load_errors: list[AddonError] = []

        from addonctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def manager(self) -> AddonManager:
        """The addon manager, with every addon loaded (created on first access)."""
        if self._manager is None:
            from addonctl.services.manager import AddonManager

            manager = AddonManager.from_settings(self.settings)
            if not (self.settings.quiet or self.settings.json_output):
                from addonctl.listeners.console import ConsoleListener

                manager.subscribe(ConsoleListener(), name="console")
            manager.notifier.discover()
            self._manager = manager
            self.load_errors = manager.discover_and_load_all()
        return self._manager

    def close(self) -> None:
        """Stop running addons and persist state. No-op if nothing was loaded."""
        if self._manager is not None:
            self._manager.teardown()
            self._manager = None

    def summarize(self, record: AddonRecord) -> dict[str, Any]:
        """Record summary plus its enabled flag."""
        data = record.to_dict()
        data["enabled"] = self.manager.is_enabled(record.id)
        return data

    def run_addon_op(
        self,
        op: str,
        target: str,
        action: Callable[[], AddonRecord | AddonError | None],
    ) -> None:
        """Run a single-addon operation and emit its outcome.

        An unknown *target* is reported as a ``NOT_FOUND`` failure.
        """
        try:
            outcome = action()
        except AddonNotFoundError as exc:
            self.emit(
                ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(code="NOT_FOUND", message=str(exc)),
                )
            )
            return

        error = outcome if isinstance(outcome, AddonError) else None
        record = self.manager.get(target)
        data = self.summarize(record) if record is not None else {"id": target, "state": "unloaded"}
        self.emit(ServiceResult.from_outcome(op, error, data=data))

    def emit(self, result: ServiceResult) -> None:
        """Print *result*: stdout on success, stderr plus exit status 1 on failure.

        Warnings go to stderr, except in JSON mode where the payload carries them.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

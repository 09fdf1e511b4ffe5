"""Pluggy hook specifications for notifications sent to host listeners.

The manager only produces these notifications; rendering toasts, logs,
or error dialogs is up to whichever listeners are subscribed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from addonctl.domain.errors import AddonError

PROJECT_NAME = "addonctl"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class AddonHookSpec:
    """Hook specifications for addonctl listeners."""

    @hookspec
    def addon_loaded(self, addon_id: str) -> None:
        """Called after an addon was compiled, constructed, and registered."""

    @hookspec
    def addon_unloaded(self, addon_id: str) -> None:
        """Called after an addon was removed from the registry."""

    @hookspec
    def addon_started(self, addon_id: str) -> None:
        """Called after an addon's ``start()`` hook succeeded."""

    @hookspec
    def addon_stopped(self, addon_id: str) -> None:
        """Called after an addon's ``stop()`` hook succeeded."""

    @hookspec
    def page_switch(self) -> None:
        """Called once per host navigation, before addons receive ``on_switch``."""

    @hookspec
    def show_toast(self, message: str, level: str) -> None:
        """Surface a short user-facing message (``info``, ``success`` or ``error``)."""

    @hookspec
    def addon_errors(self, batch: str, errors: list[AddonError]) -> None:
        """Report every failure collected during one batch operation."""

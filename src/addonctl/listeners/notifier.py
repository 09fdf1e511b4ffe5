"""Notifier: subscriber list for manager notifications, backed by pluggy.

Each listener implementation is called on its own so that one failing
listener never suppresses delivery to the others.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pluggy

from addonctl.listeners.hookspecs import PROJECT_NAME, AddonHookSpec

if TYPE_CHECKING:
    from addonctl.domain.errors import AddonError

ENTRY_POINT_GROUP = "addonctl.listeners"

logger = logging.getLogger(__name__)


class Notifier:
    """Dispatches manager notifications to subscribed listeners."""

    def __init__(self, *, toasts: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(AddonHookSpec)
        self.toasts = toasts

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: object, name: str | None = None) -> str:
        """Register a listener object carrying ``@hookimpl`` methods."""
        resolved_name = name or listener.__class__.__name__
        self._pm.register(listener, name=resolved_name)
        logger.debug("Subscribed listener: %s", resolved_name)
        return resolved_name

    def unsubscribe(self, listener: object) -> None:
        self._pm.unregister(listener)

    def discover(self) -> list[str]:
        """Load listeners published under the ``addonctl.listeners`` entry-point group."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        return self.list_listener_names()

    def list_listener_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit(self, hook_name: str, **kwargs: Any) -> None:
        """Call *hook_name* on every listener that implements it.

        Listeners run in subscription order.
        A listener that raises is logged and skipped.
        Wrapper implementations (``wrapper=True`` or ``hookwrapper=True``)
        are not supported; they are skipped with a warning.
        """
        caller = getattr(self._pm.hook, hook_name, None)
        if caller is None:
            logger.warning("Unknown notification: %s", hook_name)
            return
        for impl in caller.get_hookimpls():
            if impl.wrapper or impl.hookwrapper:
                logger.warning(
                    "Listener %s wraps %s; wrappers are not supported",
                    impl.plugin_name,
                    hook_name,
                )
                continue
            args = {name: kwargs[name] for name in impl.argnames if name in kwargs}
            try:
                impl.function(**args)
            except Exception:
                logger.warning(
                    "Listener %s failed on %s",
                    impl.plugin_name,
                    hook_name,
                    exc_info=True,
                )

    def loaded(self, addon_id: str) -> None:
        self.emit("addon_loaded", addon_id=addon_id)

    def unloaded(self, addon_id: str) -> None:
        self.emit("addon_unloaded", addon_id=addon_id)

    def started(self, addon_id: str) -> None:
        self.emit("addon_started", addon_id=addon_id)

    def stopped(self, addon_id: str) -> None:
        self.emit("addon_stopped", addon_id=addon_id)

    def page_switch(self) -> None:
        self.emit("page_switch")

    def toast(self, message: str, level: str = "info") -> None:
        if self.toasts:
            self.emit("show_toast", message=message, level=level)

    def errors(self, batch: str, errors: list[AddonError]) -> None:
        self.emit("addon_errors", batch=batch, errors=errors)

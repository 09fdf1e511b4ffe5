"""EventBroadcaster: deliver host events to every started addon.

Delivery is synchronous and follows registry order. Each recipient is its
own trust boundary: a hook that raises is logged and skipped, and
delivery continues with the next addon.

Hooks are expected to return quickly; no timeout is enforced.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from addonctl.config.logging import bound_addon
from addonctl.domain.lifecycle import LIFECYCLE_HOOKS, AddonState

if TYPE_CHECKING:
    from collections.abc import Iterable

    from addonctl.listeners.notifier import Notifier
    from addonctl.services.registry import AddonRegistry

logger = logging.getLogger(__name__)

SWITCH_EVENT = "on_switch"
MUTATION_EVENT = "observer"


class EventBroadcaster:
    """Fan host events out to started addons."""

    def __init__(self, registry: AddonRegistry, notifier: Notifier | None = None) -> None:
        self._registry = registry
        self._notifier = notifier

    def broadcast(self, event_name: str, *payload: Any) -> list[str]:
        """Call ``instance.<event_name>(*payload)`` on each started addon.

        Returns the ids of addons whose hook raised.

        Raises:
            ValueError: *event_name* is one of the lifecycle hooks, which only
                the lifecycle controller may call.
        """
        if event_name in LIFECYCLE_HOOKS:
            msg = f"{event_name!r} is a lifecycle hook, not an event."
            raise ValueError(msg)
        failed: list[str] = []
        # Snapshot: a hook may enable, disable, or unload addons.
        for record in self._registry.started():
            if record.state is not AddonState.STARTED or not record.supports(event_name):
                continue
            with bound_addon(record.id, event_name):
                try:
                    getattr(record.instance, event_name)(*payload)
                except Exception:
                    logger.error(
                        "Unable to fire %s for %s.",
                        event_name,
                        record.name,
                        exc_info=True,
                    )
                    failed.append(record.id)
        return failed

    def on_switch(self) -> list[str]:
        """Host navigated: notify listeners, then every started addon."""
        if self._notifier is not None:
            self._notifier.page_switch()
        return self.broadcast(SWITCH_EVENT)

    def on_mutation(self, mutation: Any) -> list[str]:
        """Forward one observed mutation record to every started addon."""
        return self.broadcast(MUTATION_EVENT, mutation)

    def on_mutations(self, mutations: Iterable[Any]) -> list[str]:
        """Forward a batch of mutation records, one call per record."""
        failed: list[str] = []
        for mutation in mutations:
            failed.extend(self.on_mutation(mutation))
        return failed

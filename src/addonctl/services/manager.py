"""AddonManager: the host-facing facade over the addon subsystem.

Owns one registry, loader, lifecycle controller, broadcaster, and error
aggregator, wired together by reference. Hosts call::

    manager = AddonManager.from_settings(settings)
    manager.init()
    manager.discover_and_load_all()
    manager.enable("dark-mode")
    manager.on_switch()
    ...
    manager.teardown()

INVARIANT: Bulk operations never abort on a single failure. Errors are
collected per batch and reported once through the notifier.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from addonctl.domain.errors import AddonError
from addonctl.domain.ids import DEFAULT_EXTENSION
from addonctl.domain.lifecycle import AddonState
from addonctl.infrastructure.source import AddonSource
from addonctl.infrastructure.state_store import StateStore
from addonctl.listeners.notifier import Notifier
from addonctl.services.aggregator import ErrorAggregator
from addonctl.services.broadcaster import EventBroadcaster
from addonctl.services.lifecycle import AddonLifecycleController
from addonctl.services.loader import AddonLoader
from addonctl.services.registry import AddonRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from addonctl.config.settings import AddonSettings
    from addonctl.domain.records import AddonRecord

logger = logging.getLogger(__name__)

LOAD_ALL_BATCH = "load-all"
REFRESH_BATCH = "refresh"


class AddonManager:
    """Discovers, loads, and drives the lifecycle of addons in one directory.

    Parameters:
        directory: Directory holding addon files.
        extension: Suffix identifying addon files.
        state_path: JSON file for the enabled map (None keeps it in memory).
        autostart: Start addons whose persisted state is enabled when they load.
        notifier: Listener dispatch; a private one is created when omitted.
    """

    def __init__(
        self,
        directory: Path,
        *,
        extension: str = DEFAULT_EXTENSION,
        state_path: Path | None = None,
        autostart: bool = True,
        notifier: Notifier | None = None,
    ) -> None:
        self.autostart = autostart
        self.notifier = notifier or Notifier()
        self.source = AddonSource(directory, extension)
        self.registry = AddonRegistry(StateStore(state_path), self.source.directory)
        self.loader = AddonLoader(self.source, self.registry, self.notifier)
        self.lifecycle = AddonLifecycleController(self.registry, self.loader, self.notifier)
        self.broadcaster = EventBroadcaster(self.registry, self.notifier)
        self.errors = ErrorAggregator(self.notifier)
        self._initialized = False

    @classmethod
    def from_settings(
        cls, settings: AddonSettings, *, notifier: Notifier | None = None
    ) -> AddonManager:
        return cls(
            settings.addons_path,
            extension=settings.addons.extension,
            state_path=settings.state_path,
            autostart=settings.autostart,
            notifier=notifier or Notifier(toasts=settings.notifications.toasts),
        )

    # ------------------------------------------------------------------
    # Setup / teardown
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Load persisted state. Safe to call more than once."""
        if self._initialized:
            return
        self.registry.init()
        self._initialized = True

    def teardown(self) -> None:
        """Stop running addons (keeping their enabled flag) and save state."""
        if not self._initialized:
            return
        for record in reversed(self.registry.list()):
            self.lifecycle.detach(record)
        self.registry.teardown()
        self._initialized = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def discover_and_load_all(self) -> list[AddonError]:
        """Load every addon file in the directory; autostart enabled ones.

        Returns the errors of this ``load-all`` batch.
        """
        self.init()
        with self.errors.batch(LOAD_ALL_BATCH) as batch:
            for path in self.source.discover():
                if self.registry.find(path.resolve()) is not None:
                    continue
                batch.add(self._load_and_start(path))
        logger.debug("Loaded %d addon(s)", len(self.registry))
        return self.errors.get(LOAD_ALL_BATCH)

    def load(self, filename: str | Path) -> AddonRecord | AddonError:
        """Load one addon file; autostart it when its state is enabled."""
        self.init()
        result = self.loader.load(filename)
        if isinstance(result, AddonError):
            return result
        error = self._autostart(result)
        return error if error is not None else result

    def refresh(self) -> list[AddonError]:
        """Sync the registry with the directory contents.

        New files are loaded. Records whose file disappeared are unloaded
        and their enabled entry is deleted.
        """
        self.init()
        present = {path.resolve() for path in self.source.discover()}
        with self.errors.batch(REFRESH_BATCH) as batch:
            for record in self.registry.list():
                if record.filename not in present:
                    batch.add(self.lifecycle.unload(record.id, forget=True))
            for path in sorted(present):
                if self.registry.find(path) is None:
                    batch.add(self._load_and_start(path))
        return self.errors.get(REFRESH_BATCH)

    def _load_and_start(self, path: Path) -> AddonError | None:
        result = self.loader.load(path)
        if isinstance(result, AddonError):
            return result
        return self._autostart(result)

    def _autostart(self, record: AddonRecord) -> AddonError | None:
        if not self.autostart or not self.registry.is_enabled(record.id):
            return None
        if record.state is not AddonState.READY:
            return None
        return self.lifecycle.enable(record.id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def enable(self, addon_id: str) -> AddonError | None:
        return self.lifecycle.enable(addon_id)

    def disable(self, addon_id: str) -> AddonError | None:
        return self.lifecycle.disable(addon_id)

    def toggle(self, addon_id: str) -> AddonError | None:
        return self.lifecycle.toggle(addon_id)

    def unload(self, target: Any, *, forget: bool = False) -> AddonError | None:
        return self.lifecycle.unload(target, forget=forget)

    def reload(self, target: Any) -> AddonRecord | AddonError:
        """Reload an addon and report a failure as its own ``reload:<id>`` batch."""
        record = self.registry.require(target)
        with self.errors.batch(f"reload:{record.id}") as batch:
            result = self.lifecycle.reload(record)
            if isinstance(result, AddonError):
                batch.add(result)
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self) -> list[AddonRecord]:
        return self.registry.list()

    def get(self, target: Any) -> AddonRecord | None:
        return self.registry.find(target)

    def is_enabled(self, addon_id: str) -> bool:
        return self.registry.is_enabled(addon_id)

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def broadcast(self, event_name: str, *payload: Any) -> list[str]:
        return self.broadcaster.broadcast(event_name, *payload)

    def on_switch(self) -> list[str]:
        return self.broadcaster.on_switch()

    def on_mutation(self, mutation: Any) -> list[str]:
        return self.broadcaster.on_mutation(mutation)

    def on_mutations(self, mutations: Iterable[Any]) -> list[str]:
        return self.broadcaster.on_mutations(mutations)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: object, name: str | None = None) -> str:
        return self.notifier.subscribe(listener, name)

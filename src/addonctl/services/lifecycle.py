"""AddonLifecycleController: enable, disable, toggle, unload, and reload.

Every hook call is a trust boundary: a fault raised by ``start()`` or
``stop()`` is logged with the addon name and operation, converted into an
:class:`AddonError`, and returned. It never reaches the caller's caller.

INVARIANT: A failed ``start()``/``stop()`` always leaves the addon
disabled. A record without an instance is never started.
INVARIANT: Reload stops and detaches the old instance before the new one
is constructed, so two instances of one id never run at the same time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from addonctl.config.logging import bound_addon
from addonctl.domain.errors import AddonError, ErrorCause, ErrorKind
from addonctl.domain.lifecycle import AddonState, can_start

if TYPE_CHECKING:
    from addonctl.domain.records import AddonRecord
    from addonctl.listeners.notifier import Notifier
    from addonctl.services.loader import AddonLoader
    from addonctl.services.registry import AddonRegistry

logger = logging.getLogger(__name__)

START_REASON = "start() could not be fired."
STOP_REASON = "stop() could not be fired."
NOT_RUNNABLE_REASON = "Addon has no runnable instance."
IN_HOOK_REASON = "Addon is running one of its own hooks."
DROPPED_REASON = "Addon was unloaded while starting."


class AddonLifecycleController:
    """Drives lifecycle transitions for the records in a registry.

    No lock is held while a hook runs, so a hook may call back into the
    controller for another addon. While an addon's hook runs, enable and
    disable for that addon are no-ops, and unload, reload and detach are
    refused with a ``state`` error. A start() that unregisters its own
    record is undone with stop() and reported instead of marking it started.
    """

    def __init__(
        self,
        registry: AddonRegistry,
        loader: AddonLoader,
        notifier: Notifier | None = None,
    ) -> None:
        self._registry = registry
        self._loader = loader
        self._notifier = notifier
        self._in_hook: set[str] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def enable(self, addon_id: str) -> AddonError | None:
        """Start the addon and mark it enabled.

        Returns None on success (including when it is already started).

        Raises:
            AddonNotFoundError: No addon has this id.
        """
        record = self._registry.require(addon_id)
        if record.state is AddonState.STARTED or record.id in self._in_hook:
            return None

        if record.partial or not can_start(record.state):
            self._registry.set_enabled(record.id, False)
            logger.error(
                "%s cannot be started from state %s", record.name, record.state
            )
            self._toast(f"{record.name} v{record.version} could not be started.", "error")
            return self._state_error(
                record, NOT_RUNNABLE_REASON, f"Cannot start an addon in state {record.state!s}."
            )

        with bound_addon(record.id, "start"):
            exc = self._fire(record, "start")
            if exc is not None:
                logger.error("%s could not be started.", record.name, exc_info=exc)
        if exc is not None:
            self._registry.set_enabled(record.id, False)
            self._toast(f"{record.name} v{record.version} could not be started.", "error")
            return self._hook_error(record, START_REASON, exc)

        if self._registry.get(record.id) is not record or record.instance is None:
            return self._abandon(record)

        record.state = AddonState.STARTED
        self._registry.set_enabled(record.id, True)
        if self._notifier is not None:
            self._notifier.started(record.id)
        self._toast(f"{record.name} v{record.version} has started.", "success")
        return None

    def disable(self, addon_id: str) -> AddonError | None:
        """Stop the addon and mark it disabled.

        Returns None on success (including when it is not running).

        Raises:
            AddonNotFoundError: No addon has this id.
        """
        record = self._registry.require(addon_id)
        if record.id in self._in_hook:
            return None
        if record.state is not AddonState.STARTED:
            self._registry.set_enabled(record.id, False)
            return None

        error = self._stop(record)
        self._registry.set_enabled(record.id, False)
        return error

    def toggle(self, addon_id: str) -> AddonError | None:
        """Disable the addon when enabled, enable it otherwise."""
        if self._registry.is_enabled(addon_id):
            return self.disable(addon_id)
        return self.enable(addon_id)

    def unload(self, target: Any, *, forget: bool = False) -> AddonError | None:
        """Disable (when running), detach, and remove an addon.

        ``forget=True`` also deletes the persisted enabled entry, as when the
        addon's file was removed.

        Raises:
            AddonNotFoundError: Nothing matches *target*.
        """
        record = self._registry.require(target)
        busy = self._refuse_in_hook(record, "unload")
        if busy is not None:
            return busy
        error = self.disable(record.id)
        self._loader.release(record)
        self._registry.remove(record.id, forget=forget)
        logger.debug("Unloaded addon %s", record.id)
        if self._notifier is not None:
            self._notifier.unloaded(record.id)
        return error

    def reload(self, target: Any) -> AddonRecord | AddonError:
        """Replace the addon's instance with one built from the current source.

        The enabled flag is preserved: an enabled addon is started again
        after the new instance loads. When the new source fails to load, the
        record stays listed as partial so a later reload can retry.

        Raises:
            AddonNotFoundError: Nothing matches *target*.
        """
        record = self._registry.require(target)
        busy = self._refuse_in_hook(record, "reload")
        if busy is not None:
            return busy
        stop_error = self.detach(record)
        record.state = AddonState.PARTIAL

        result = self._loader.load(record.filename, replace=True)
        if stop_error is not None:
            return stop_error
        if isinstance(result, AddonError):
            return result

        if self._registry.is_enabled(result.id):
            start_error = self.enable(result.id)
            if start_error is not None:
                return start_error
        return result

    def detach(self, target: Any) -> AddonError | None:
        """Stop a running addon and release its instance; the record stays listed.

        The enabled flag is kept (unless ``stop()`` fails), so the addon is
        started again the next time it loads. Used by reload and shutdown.

        Raises:
            AddonNotFoundError: Nothing matches *target*.
        """
        record = self._registry.require(target)
        busy = self._refuse_in_hook(record, "detach")
        if busy is not None:
            return busy
        error: AddonError | None = None
        if record.state is AddonState.STARTED:
            error = self._stop(record)
        self._loader.release(record)
        return error

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _stop(self, record: AddonRecord) -> AddonError | None:
        """Fire ``stop()``; the addon ends up stopped either way.

        Does not touch the enabled flag on success, so reload can keep it.
        """
        with bound_addon(record.id, "stop"):
            exc = self._fire(record, "stop")
            if exc is not None:
                logger.error("%s could not be stopped.", record.name, exc_info=exc)
        record.state = AddonState.STOPPED
        if exc is not None:
            self._registry.set_enabled(record.id, False)
            self._toast(f"{record.name} v{record.version} could not be stopped.", "error")
            return self._hook_error(record, STOP_REASON, exc)

        if self._notifier is not None:
            self._notifier.stopped(record.id)
        self._toast(f"{record.name} v{record.version} has stopped.", "info")
        return None

    def _fire(self, record: AddonRecord, hook: str) -> Exception | None:
        """Invoke an optional hook on the instance; return the fault, if any."""
        if not record.supports(hook):
            return None
        self._in_hook.add(record.id)
        try:
            getattr(record.instance, hook)()
        except Exception as exc:
            return exc
        finally:
            self._in_hook.discard(record.id)
        return None

    def _refuse_in_hook(self, record: AddonRecord, operation: str) -> AddonError | None:
        """A STATE error when *record* is inside one of its own hooks, else None."""
        if record.id not in self._in_hook:
            return None
        logger.warning("%s: %s refused from inside its own hook", record.name, operation)
        return self._state_error(
            record, IN_HOOK_REASON, f"Cannot {operation} {record.id!r} while its hook runs."
        )

    def _abandon(self, record: AddonRecord) -> AddonError:
        """Undo a start() whose record left the registry while it ran."""
        with bound_addon(record.id, "stop"):
            exc = self._fire(record, "stop")
            if exc is not None:
                logger.error("%s could not be stopped.", record.name, exc_info=exc)
        logger.warning("%s was unloaded while starting", record.name)
        return self._state_error(
            record, DROPPED_REASON, "The addon left the registry during start()."
        )

    @staticmethod
    def _state_error(record: AddonRecord, reason: str, message: str) -> AddonError:
        return AddonError(
            name=record.name,
            filename=str(record.filename),
            reason=reason,
            kind=ErrorKind.STATE,
            cause=ErrorCause(message=message),
            addon_id=record.id,
        )

    @staticmethod
    def _hook_error(record: AddonRecord, reason: str, exc: Exception) -> AddonError:
        return AddonError.from_exception(
            exc,
            name=record.name,
            filename=record.filename,
            reason=reason,
            kind=ErrorKind.HOOK,
            addon_id=record.id,
        )

    def _toast(self, message: str, level: str) -> None:
        if self._notifier is not None:
            self._notifier.toast(message, level)

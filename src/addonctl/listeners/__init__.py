"""Notification layer: host listeners via pluggy.

Listeners subscribe to lifecycle notifications (started, stopped,
page switch, toasts, error reports). Discovery: direct ``subscribe()`` or
the ``addonctl.listeners`` entry-point group.
INVARIANT: Listener failures are warnings, never errors.
"""

from addonctl.listeners.hookspecs import hookimpl
from addonctl.listeners.notifier import Notifier

__all__ = ["Notifier", "hookimpl"]

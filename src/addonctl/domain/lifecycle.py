"""Addon lifecycle states and the transition map.

State machine per addon id:

    unloaded -> partial | ready -> started <-> stopped -> unloaded

``partial`` records are listed but have no instance, so they can only be
reloaded (back to ``ready``) or unloaded. Started addons must be stopped
before they are unloaded.
"""

from __future__ import annotations

from enum import StrEnum


class AddonState(StrEnum):
    """Lifecycle state of a single addon record."""

    UNLOADED = "unloaded"
    PARTIAL = "partial"
    READY = "ready"
    STARTED = "started"
    STOPPED = "stopped"


ADDON_TRANSITIONS: dict[str, list[str]] = {
    "unloaded": ["partial", "ready"],
    "partial": ["ready", "unloaded"],
    "ready": ["started", "unloaded"],
    "started": ["stopped"],
    "stopped": ["started", "unloaded"],
}

# Hooks an addon may implement. All are optional.
LIFECYCLE_HOOKS = ("load", "start", "stop")
EVENT_HOOKS = ("on_switch", "observer")
ADDON_HOOKS = LIFECYCLE_HOOKS + EVENT_HOOKS


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = ADDON_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


def can_start(state: str) -> bool:
    """Whether an addon in *state* may be started."""
    return is_valid_transition(state, AddonState.STARTED)

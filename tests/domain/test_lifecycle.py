"""Tests for addon lifecycle states and transitions."""

from addonctl.domain.lifecycle import (
    ADDON_HOOKS,
    ADDON_TRANSITIONS,
    AddonState,
    can_start,
    is_valid_transition,
)


class TestAddonState:
    def test_members(self) -> None:
        assert {s.value for s in AddonState} == {
            "unloaded",
            "partial",
            "ready",
            "started",
            "stopped",
        }

    def test_str_values(self) -> None:
        assert str(AddonState.STARTED) == "started"

    def test_every_state_has_transitions(self) -> None:
        assert set(ADDON_TRANSITIONS) == {s.value for s in AddonState}


class TestTransitions:
    def test_load_paths(self) -> None:
        assert is_valid_transition("unloaded", "ready")
        assert is_valid_transition("unloaded", "partial")
        assert is_valid_transition("partial", "ready")

    def test_start_stop_cycle(self) -> None:
        assert is_valid_transition("ready", "started")
        assert is_valid_transition("started", "stopped")
        assert is_valid_transition("stopped", "started")

    def test_started_must_stop_before_unload(self) -> None:
        assert not is_valid_transition("started", "unloaded")
        assert is_valid_transition("stopped", "unloaded")

    def test_unknown_state(self) -> None:
        assert not is_valid_transition("bogus", "ready")


class TestCanStart:
    def test_startable(self) -> None:
        assert can_start(AddonState.READY)
        assert can_start(AddonState.STOPPED)

    def test_not_startable(self) -> None:
        assert not can_start(AddonState.PARTIAL)
        assert not can_start(AddonState.UNLOADED)
        assert not can_start(AddonState.STARTED)


class TestConstants:
    def test_hooks(self) -> None:
        assert ADDON_HOOKS == ("load", "start", "stop", "on_switch", "observer")

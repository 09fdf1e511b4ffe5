"""Tests for AddonManager: bulk load, autostart, refresh, and teardown."""

from __future__ import annotations

import json
from pathlib import Path

from addonctl.config.settings import AddonSettings
from addonctl.domain.errors import AddonError, ErrorKind
from addonctl.domain.lifecycle import AddonState
from addonctl.services.manager import LOAD_ALL_BATCH, REFRESH_BATCH, AddonManager
from tests.conftest import (
    BOOM_START_SOURCE,
    RecordingListener,
    WriteAddon,
    addon_calls,
    calls_source,
)


class TestDiscoverAndLoadAll:
    def test_loads_every_file(self, manager: AddonManager, write_addon: WriteAddon) -> None:
        write_addon("b", calls_source("B"))
        write_addon("a", calls_source("A"))
        assert manager.discover_and_load_all() == []
        assert [r.id for r in manager.list()] == ["a", "b"]
        assert all(r.state is AddonState.READY for r in manager.list())

    def test_errors_reported_as_one_batch(
        self,
        manager: AddonManager,
        write_addon: WriteAddon,
        listener: RecordingListener,
    ) -> None:
        write_addon("good", calls_source())
        write_addon("bad", "def broken(:\n")
        write_addon("empty", "x = 1\n")

        errors = manager.discover_and_load_all()

        assert {e.kind for e in errors} == {ErrorKind.COMPILE, ErrorKind.EXPORT}
        assert len(listener.error_reports) == 1
        assert listener.error_reports[0][0] == LOAD_ALL_BATCH
        assert manager.get("good").state is AddonState.READY
        assert manager.get("bad") is None
        assert manager.get("empty").partial

    def test_second_call_skips_loaded(
        self, manager: AddonManager, write_addon: WriteAddon
    ) -> None:
        write_addon("a", calls_source())
        manager.discover_and_load_all()
        assert manager.discover_and_load_all() == []
        assert addon_calls("a") == ["load"]


class TestAutostart:
    def test_enabled_addons_start(
        self, addon_dir: Path, tmp_path: Path, write_addon: WriteAddon
    ) -> None:
        state = tmp_path / "addons.json"
        state.write_text(json.dumps({"foo": True, "bar": False}), encoding="utf-8")
        write_addon("foo", calls_source())
        write_addon("bar", calls_source())

        manager = AddonManager(addon_dir, state_path=state)
        manager.discover_and_load_all()

        assert manager.get("foo").state is AddonState.STARTED
        assert manager.get("bar").state is AddonState.READY
        manager.teardown()

    def test_autostart_disabled(
        self, addon_dir: Path, tmp_path: Path, write_addon: WriteAddon
    ) -> None:
        state = tmp_path / "addons.json"
        state.write_text('{"foo": true}', encoding="utf-8")
        write_addon("foo", calls_source())

        manager = AddonManager(addon_dir, state_path=state, autostart=False)
        manager.discover_and_load_all()

        assert manager.get("foo").state is AddonState.READY
        assert manager.is_enabled("foo")
        manager.teardown()

    def test_start_failure_in_batch(
        self,
        addon_dir: Path,
        tmp_path: Path,
        write_addon: WriteAddon,
    ) -> None:
        state = tmp_path / "addons.json"
        state.write_text('{"boom": true, "foo": true}', encoding="utf-8")
        write_addon("boom", BOOM_START_SOURCE)
        write_addon("foo", calls_source())

        manager = AddonManager(addon_dir, state_path=state)
        errors = manager.discover_and_load_all()

        assert [e.addon_id for e in errors] == ["boom"]
        assert manager.get("foo").state is AddonState.STARTED
        assert not manager.is_enabled("boom")
        manager.teardown()


class TestRefresh:
    def test_picks_up_new_and_removed_files(
        self,
        manager: AddonManager,
        write_addon: WriteAddon,
        listener: RecordingListener,
    ) -> None:
        gone = write_addon("gone", calls_source())
        write_addon("kept", calls_source())
        manager.discover_and_load_all()
        manager.enable("gone")

        gone.unlink()
        write_addon("new", "def broken(:\n")
        errors = manager.refresh()

        assert [r.id for r in manager.list()] == ["kept"]
        assert "gone" not in manager.registry.state
        assert [e.kind for e in errors] == [ErrorKind.COMPILE]
        assert listener.error_reports[-1][0] == REFRESH_BATCH
        assert ("unloaded", "gone") in listener.events


class TestTeardown:
    def test_stops_and_keeps_enabled_flag(
        self, addon_dir: Path, tmp_path: Path, write_addon: WriteAddon
    ) -> None:
        state = tmp_path / "addons.json"
        write_addon("foo", calls_source())
        manager = AddonManager(addon_dir, state_path=state)
        manager.discover_and_load_all()
        manager.enable("foo")
        calls = addon_calls("foo")

        manager.teardown()

        assert calls[-1] == "stop"
        assert json.loads(state.read_text()) == {"foo": True}
        assert manager.list() == []

    def test_enabled_state_survives_restart(
        self, addon_dir: Path, tmp_path: Path, write_addon: WriteAddon
    ) -> None:
        state = tmp_path / "addons.json"
        write_addon("foo", calls_source())
        first = AddonManager(addon_dir, state_path=state)
        first.discover_and_load_all()
        first.enable("foo")
        first.teardown()

        second = AddonManager(addon_dir, state_path=state)
        second.discover_and_load_all()
        assert second.get("foo").state is AddonState.STARTED
        second.teardown()

    def test_teardown_without_init_is_noop(self, addon_dir: Path) -> None:
        AddonManager(addon_dir).teardown()


class TestFromSettings:
    def test_paths_from_settings(self, tmp_path: Path) -> None:
        settings = AddonSettings.from_cli(root=tmp_path, no_autostart=True)
        manager = AddonManager.from_settings(settings)
        assert manager.source.directory == tmp_path / "addons"
        assert manager.autostart is False

    def test_toasts_disabled(self, tmp_path: Path, write_addon: WriteAddon) -> None:
        settings = AddonSettings.from_cli(root=tmp_path)
        settings = settings.model_copy(
            update={"notifications": settings.notifications.model_copy(update={"toasts": False})}
        )
        listener = RecordingListener()
        manager = AddonManager.from_settings(settings)
        manager.subscribe(listener)
        write_addon("foo", calls_source())
        manager.discover_and_load_all()
        manager.enable("foo")
        assert listener.toasts == []
        assert ("started", "foo") in listener.events
        manager.teardown()


class TestLoad:
    def test_load_returns_conflict_for_loaded_file(
        self, manager: AddonManager, write_addon: WriteAddon
    ) -> None:
        write_addon("foo", calls_source())
        manager.load("foo.addon.py")
        error = manager.load("foo.addon.py")
        assert isinstance(error, AddonError)
        assert error.kind is ErrorKind.CONFLICT

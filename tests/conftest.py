"""Shared pytest fixtures and test helpers for addonctl tests."""

from __future__ import annotations

import logging
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from addonctl.infrastructure.source import MODULE_PREFIX
from addonctl.listeners.hookspecs import hookimpl
from addonctl.listeners.notifier import Notifier
from addonctl.services.manager import AddonManager

WriteAddon = Callable[..., Path]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _drop_addon_modules() -> None:
    """Remove compiled addon modules left in sys.modules by a test."""
    yield
    for name in [n for n in sys.modules if n.startswith(MODULE_PREFIX)]:
        del sys.modules[name]


@pytest.fixture
def addon_dir(tmp_path: Path) -> Path:
    """Empty addon directory inside the temp project root."""
    directory = tmp_path / "addons"
    directory.mkdir()
    return directory


@pytest.fixture
def write_addon(addon_dir: Path) -> WriteAddon:
    """Write an addon source file and return its path.

    ``write_addon("foo", source)`` creates ``addons/foo.addon.py``.
    The source is dedented so tests can use indented triple-quoted strings.
    """

    def _write(stem: str, source: str, *, extension: str = ".addon.py") -> Path:
        path = addon_dir / f"{stem}{extension}"
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return path

    return _write


class RecordingListener:
    """Listener that records every notification it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.toasts: list[tuple[str, str]] = []
        self.error_reports: list[tuple[str, list[Any]]] = []

    @hookimpl
    def addon_loaded(self, addon_id: str) -> None:
        self.events.append(("loaded", addon_id))

    @hookimpl
    def addon_unloaded(self, addon_id: str) -> None:
        self.events.append(("unloaded", addon_id))

    @hookimpl
    def addon_started(self, addon_id: str) -> None:
        self.events.append(("started", addon_id))

    @hookimpl
    def addon_stopped(self, addon_id: str) -> None:
        self.events.append(("stopped", addon_id))

    @hookimpl
    def page_switch(self) -> None:
        self.events.append(("page_switch", None))

    @hookimpl
    def show_toast(self, message: str, level: str) -> None:
        self.toasts.append((message, level))

    @hookimpl
    def addon_errors(self, batch: str, errors: list[Any]) -> None:
        self.error_reports.append((batch, list(errors)))


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def manager(addon_dir: Path, tmp_path: Path, listener: RecordingListener) -> AddonManager:
    """Initialized manager over ``addon_dir`` with a recording listener."""
    notifier = Notifier()
    notifier.subscribe(listener, name="recorder")
    m = AddonManager(addon_dir, state_path=tmp_path / "addons.json", notifier=notifier)
    m.init()
    try:
        yield m
    finally:
        m.teardown()


@pytest.fixture
def _restore_logging() -> None:
    """Restore root logger state after a test that configures logging."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    addonctl_logger = logging.getLogger("addonctl")
    addonctl_level = addonctl_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    addonctl_logger.setLevel(addonctl_level)


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project root so the CLI uses ``./addons``.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes. Env overrides are cleared so a developer's shell does not leak in.
    """
    for key in ("ADDONCTL_CONFIG", "ADDONCTL_QUIET", "ADDONCTL_VERBOSE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared addon sources
# ---------------------------------------------------------------------------

# Appends to a module-level list so tests can observe hook order.
CALLS_SOURCE = '''
CALLS = []


class Addon:
    def load(self):
        CALLS.append("load")

    def start(self):
        CALLS.append("start")

    def stop(self):
        CALLS.append("stop")

    def on_switch(self):
        CALLS.append("on_switch")

    def observer(self, mutation):
        CALLS.append(("observer", mutation))


exports.update(name="{name}", version="{version}", type=Addon)
'''


def calls_source(name: str = "Foo", version: str = "1.0") -> str:
    return CALLS_SOURCE.replace("{name}", name).replace("{version}", version)


BOOM_START_SOURCE = '''
class Boom:
    def start(self):
        raise RuntimeError("x")

    def stop(self):
        pass


exports.update(name="Boom", version="0.1", type=Boom)
'''


def addon_calls(addon_id: str) -> list[Any]:
    """Hook calls recorded by a ``calls_source`` addon that is currently compiled."""
    return sys.modules[f"{MODULE_PREFIX}{addon_id}"].CALLS

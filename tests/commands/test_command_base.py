"""Tests for the shared click command classes and addon argument."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from addonctl.cli import cli
from addonctl.commands._base import AddonCommand, complete_addon_ids
from addonctl.commands.state import enable
from tests.conftest import WriteAddon, calls_source


def _enable_context(addon_dir: Path | None) -> click.Context:
    root = click.Context(cli, info_name="addonctl")
    root.params = {"config_path": None, "addon_dir": addon_dir}
    return click.Context(enable, parent=root, info_name="enable")


def _completions(ctx: click.Context, incomplete: str) -> list[str]:
    param = enable.params[0]
    return [item.value for item in complete_addon_ids(ctx, param, incomplete)]


@pytest.mark.usefixtures("_isolated_project")
class TestAddonIdCompletion:
    def test_completes_from_default_directory(self, write_addon: WriteAddon) -> None:
        write_addon("dark-mode", calls_source())
        write_addon("debug", calls_source())
        write_addon("zen", calls_source())
        assert _completions(_enable_context(None), "d") == ["dark-mode", "debug"]

    def test_uses_addon_dir_flag(self, tmp_path: Path) -> None:
        other = tmp_path / "elsewhere"
        other.mkdir()
        (other / "Foo.addon.py").write_text(calls_source(), encoding="utf-8")
        assert _completions(_enable_context(other), "") == ["foo"]

    def test_missing_directory(self) -> None:
        assert _completions(_enable_context(None), "") == []


class TestAddonCommand:
    def test_no_examples_option_without_examples(self) -> None:
        command = AddonCommand("plain", callback=lambda: None)
        assert all(param.name != "examples" for param in command.params)

    def test_examples_output(self) -> None:
        command = AddonCommand("demo", callback=lambda: None, examples="  demo --x")
        result = CliRunner().invoke(command, ["--examples"])
        assert result.exit_code == 0
        assert "Examples for 'demo':" in result.stdout
        assert "demo --x" in result.stdout

"""Subcommand modules for addonctl.

Provides register_commands() which uses deferred imports to keep
``addonctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from addonctl.commands.check import check
    from addonctl.commands.list_cmd import list_cmd
    from addonctl.commands.state import disable, enable, forget, reload, toggle

    cli.add_command(list_cmd)
    cli.add_command(check)
    cli.add_command(enable)
    cli.add_command(disable)
    cli.add_command(toggle)
    cli.add_command(reload)
    cli.add_command(forget)

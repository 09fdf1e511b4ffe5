"""Click building blocks shared by addonctl commands.

``AddonCommand``/``AddonGroup`` take an ``examples`` string shown by an eager
``--examples`` flag. ``addon_argument`` declares the positional addon
target with shell completion over the files in the addon directory.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click
from click.shell_completion import CompletionItem

from addonctl.config.settings import AddonSettings
from addonctl.infrastructure.source import AddonSource

F = TypeVar("F", bound=Callable[..., Any])


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(examples)
    ctx.exit(0)


def _examples_option() -> click.Option:
    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_print_examples,
        help="Show usage examples.",
    )


class AddonCommand(click.Command):
    """Command with an optional ``examples`` block behind ``--examples``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option())


class AddonGroup(click.Group):
    """Group counterpart of :class:`AddonCommand`; subcommands default to it."""

    command_class = AddonCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option())


def complete_addon_ids(
    ctx: click.Context, _param: click.Parameter, incomplete: str
) -> list[CompletionItem]:
    """Offer ids of the addon files the invocation would load.

    Runs before the root callback, so settings are rebuilt from the root
    command's parsed ``--config``/``--addon-dir`` values.
    """
    params = ctx.find_root().params
    settings = AddonSettings.from_cli(
        config_path=params.get("config_path"),
        addon_dir=params.get("addon_dir"),
    )
    source = AddonSource(settings.addons_path, settings.addons.extension)
    ids = (source.addon_id(path) for path in source.discover())
    return [CompletionItem(addon_id) for addon_id in ids if addon_id.startswith(incomplete)]


def addon_argument(name: str = "addon_id") -> Callable[[F], F]:
    """Positional addon target with id completion."""
    return click.argument(name, shell_complete=complete_addon_ids)

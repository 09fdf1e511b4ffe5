"""Root CLI group for addonctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from addonctl import __version__
from addonctl.commands import register_commands
from addonctl.commands._base import AddonGroup
from addonctl.commands._context import AppContext
from addonctl.config.settings import AddonSettings


@click.group(
    cls=AddonGroup,
    invoke_without_command=True,
    examples="""\
  addonctl list
  addonctl --json check
  addonctl --addon-dir ./plugins enable foo
  addonctl --no-autostart list --enabled""",
)
@click.version_option(version=__version__, prog_name="addonctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--addon-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Override the addon directory.",
)
@click.option("--no-autostart", is_flag=True, help="Do not start previously enabled addons.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    addon_dir: Path | None,
    no_autostart: bool,
) -> None:
    """addonctl: discover, load, and manage addons."""
    settings = AddonSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        addon_dir=addon_dir,
        no_autostart=no_autostart,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)

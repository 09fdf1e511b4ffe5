"""Human-readable rendering of ServiceResult with Rich.

``list`` becomes a table of addons, single-addon operations become a
key/value block, and ``check`` shows counts. Any other op is printed as
plain fields.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from addonctl.output.console import create_console, get_output, style_for_state

if TYPE_CHECKING:
    from rich.console import Console

    from addonctl.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result*; plain text when stdout is not a terminal."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("id", "")) for item in items if isinstance(item, dict))

    return f"OK: {result.op}"


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="addon.ok")
    op = Text(f"  {result.op}", style="addon.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="addon.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="addon.id")
    elif key == "filename":
        v = Text(str(value), style="addon.path")
    elif key == "name":
        v = Text(str(value), style="addon.name")
    elif key == "state":
        v = Text(str(value), style=style_for_state(str(value)))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _addon_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a list of addon summaries."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="addon.id", no_wrap=True)
    table.add_column("Name", style="addon.name")
    table.add_column("Version")
    table.add_column("State")
    table.add_column("Enabled")
    if verbose:
        table.add_column("Author")
        table.add_column("File", style="addon.path")

    for item in items:
        state = str(item.get("state", ""))
        row: list[Any] = [
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("version", "")),
            Text(state, style=style_for_state(state)),
            "yes" if item.get("enabled") else "no",
        ]
        if verbose:
            row.append(str(item.get("author", "")))
            row.append(str(item.get("filename", "")))
        table.add_row(*row)

    return table


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "addon.error"), " ", (result.op, "addon.op"), ": ", msg)
    )

    if err and err.detail.get("errors"):
        for item in err.detail["errors"]:
            cause_msg = (item.get("cause") or {}).get("message", "")
            console.print(Text(f"  {item.get('name', '?')}: {item.get('reason', '')} {cause_msg}"))
    elif err and err.detail:
        cause = err.detail.get("cause") or {}
        if cause.get("message"):
            console.print(Text(f"  cause: {cause['message']}"))
        if verbose:
            if cause.get("stack"):
                console.print(Text(cause["stack"].rstrip(), style="dim"))
            console.print(Text(f"  filename: {err.detail.get('filename', '')}", style="dim"))


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    _status_line(console, result)
    if not items:
        console.print(Text("  No addons found.", style="dim"))
        return
    console.print(_addon_table(items, verbose=verbose))


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "loaded", result.data.get("loaded", 0))
    _field(console, "error_count", result.data.get("error_count", 0))


def _render_addon(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render enable/disable/toggle/reload/forget results."""
    _status_line(console, result)
    for key in ("id", "name", "version", "state", "enabled"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose and "filename" in result.data:
        _field(console, "filename", result.data["filename"])


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "list": _render_list,
    "check": _render_check,
    "enable": _render_addon,
    "disable": _render_addon,
    "toggle": _render_addon,
    "reload": _render_addon,
    "forget": _render_addon,
}

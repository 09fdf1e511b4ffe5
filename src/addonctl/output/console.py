"""Rich Console factory and theme for addonctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ADDON_THEME = Theme(
    {
        "addon.ok": "bold green",
        "addon.error": "bold red",
        "addon.warning": "bold yellow",
        "addon.op": "bold cyan",
        "addon.key": "dim",
        "addon.id": "bold blue",
        "addon.path": "dim",
        "addon.name": "bold",
        "addon.state.started": "green",
        "addon.state.stopped": "yellow",
        "addon.state.ready": "cyan",
        "addon.state.partial": "red",
    }
)

_STATE_STYLES: dict[str, str] = {
    "started": "addon.state.started",
    "stopped": "addon.state.stopped",
    "ready": "addon.state.ready",
    "partial": "addon.state.partial",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=ADDON_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_state(state: str) -> str:
    """Return the Rich style name for a lifecycle state."""
    return _STATE_STYLES.get(state, "")

"""JSON persistence for the enabled/disabled state map.

The file holds a flat ``{"addon-id": true|false}`` object. A missing file
is an empty map; a corrupt one is logged and treated as empty so a broken
state file never prevents addons from loading.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class StateStore:
    """Reads and writes the enabled map. ``path=None`` keeps it in memory only."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path

    def load(self) -> dict[str, bool]:
        if self.path is None or not self.path.is_file():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable addon state file %s", self.path, exc_info=True)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring addon state file %s: expected an object", self.path)
            return {}
        return {str(key): bool(value) for key, value in raw.items()}

    def save(self, state: dict[str, bool]) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(state, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

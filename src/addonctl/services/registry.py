"""AddonRegistry: ordered collection of addon records and the enabled map.

Records are kept in insertion order, which is the order used for event
broadcasts. Replacing a record with the same id keeps its position.

INVARIANT: The registry's state map is the single source of truth for
enabled/disabled. It is keyed by id, survives reloads, and is written
through to the StateStore on every change.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from addonctl.domain.errors import AddonNotFoundError
from addonctl.domain.lifecycle import AddonState
from addonctl.domain.records import AddonRecord
from addonctl.infrastructure.state_store import StateStore

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class AddonConflictError(ValueError):
    """A different file already owns the requested addon id."""

    def __init__(self, existing: AddonRecord, filename: Path) -> None:
        super().__init__(
            f"Addon id {existing.id!r} is already used by {existing.filename}; "
            f"refusing to register {filename}"
        )
        self.existing = existing
        self.filename = filename


class AddonRegistry:
    """In-memory registry of addon records with a persisted enabled map."""

    def __init__(
        self, state_store: StateStore | None = None, directory: Path | None = None
    ) -> None:
        self._store = state_store or StateStore()
        self._directory = directory
        self._records: dict[str, AddonRecord] = {}
        self._state: dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Setup / teardown
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Load the persisted enabled map."""
        self._state = self._store.load()
        logger.debug("Loaded state for %d addon(s)", len(self._state))

    def teardown(self) -> None:
        """Persist the enabled map and drop all records."""
        self._store.save(self._state)
        self._records.clear()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add(self, record: AddonRecord, *, replace: bool = False) -> None:
        """Insert *record*.

        With ``replace=True`` an existing record for the same file is swapped
        in place. A record owned by a different file is never replaced.

        Raises:
            AddonConflictError: The id is taken (by another file, or by the
                same file when ``replace`` is False).
        """
        existing = self._records.get(record.id)
        if existing is not None and not (replace and existing.filename == record.filename):
            raise AddonConflictError(existing, record.filename)
        self._records[record.id] = record

    def remove(self, addon_id: str, *, forget: bool = False) -> AddonRecord | None:
        """Remove a record. ``forget=True`` also deletes its enabled entry."""
        record = self._records.pop(addon_id, None)
        if forget and self._state.pop(addon_id, None) is not None:
            self._store.save(self._state)
        return record

    def get(self, addon_id: str) -> AddonRecord | None:
        return self._records.get(addon_id)

    def find(self, target: Any) -> AddonRecord | None:
        """Look up a record by id, filename, or record.

        A bare filename matches any record with that basename. Other relative
        paths resolve against the addon directory.
        """
        if isinstance(target, AddonRecord):
            return self._records.get(target.id)
        if isinstance(target, Path):
            return self._find_by_path(target)
        if isinstance(target, str):
            record = self._records.get(target)
            if record is not None:
                return record
            return self._find_by_path(Path(target))
        return None

    def require(self, target: Any) -> AddonRecord:
        """Like :meth:`find`, but raise :class:`AddonNotFoundError` on a miss."""
        record = self.find(target)
        if record is None:
            raise AddonNotFoundError(target)
        return record

    def list(self) -> list[AddonRecord]:
        """All records in registry order."""
        return list(self._records.values())

    def started(self) -> list[AddonRecord]:
        """Snapshot of the records currently in the started state."""
        return [r for r in self._records.values() if r.state is AddonState.STARTED]

    def _find_by_path(self, path: Path) -> AddonRecord | None:
        # A bare filename matches by basename; anything longer names one file.
        if not path.is_absolute() and len(path.parts) == 1:
            return next((r for r in self._records.values() if r.filename.name == path.name), None)
        if not path.is_absolute():
            path = (self._directory or Path.cwd()) / path
        path = path.resolve()
        return next((r for r in self._records.values() if r.filename == path), None)

    def __contains__(self, addon_id: object) -> bool:
        return addon_id in self._records

    def __iter__(self) -> Iterator[AddonRecord]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Enabled state
    # ------------------------------------------------------------------

    def is_enabled(self, addon_id: str) -> bool:
        return self._state.get(addon_id, False)

    def set_enabled(self, addon_id: str, enabled: bool) -> None:
        if self._state.get(addon_id) is enabled:
            return
        self._state[addon_id] = enabled
        self._store.save(self._state)

    @property
    def state(self) -> dict[str, bool]:
        """Copy of the enabled map."""
        return dict(self._state)

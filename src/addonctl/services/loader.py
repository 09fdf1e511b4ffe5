"""AddonLoader: turn an addon file into a registered AddonRecord.

Steps for :meth:`AddonLoader.load`:

1. Reject malformed ids and ids already owned by another record
   (no mutation).
2. Compile the source. Failure returns a ``compile`` error; nothing is registered.
3. Require a usable export. Failure registers a *partial* record.
4. Construct the addon. Failure registers a *partial* record.
5. Apply self-reported metadata, register the record as ``ready``.
6. Fire the optional ``load()`` hook. Failure forces ``enabled=False``
   but leaves the record registered.

Faults inside addon code are returned as :class:`AddonError`, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import replace as dc_replace
from typing import TYPE_CHECKING, Any

from addonctl.domain.errors import AddonError, CompileError, ErrorCause, ErrorKind
from addonctl.domain.ids import validate_id
from addonctl.domain.lifecycle import AddonState
from addonctl.domain.records import METADATA_FIELDS, AddonRecord

if TYPE_CHECKING:
    from pathlib import Path

    from addonctl.domain.records import AddonMetadata
    from addonctl.infrastructure.source import AddonSource
    from addonctl.listeners.notifier import Notifier
    from addonctl.services.registry import AddonRegistry

logger = logging.getLogger(__name__)

COMPILE_REASON = "Could not be compiled."
CONSTRUCT_REASON = "Could not be constructed."
INVALID_ID_REASON = "Filename does not give a valid addon id."
LOAD_HOOK_REASON = "load() could not be fired."


class AddonLoader:
    """Compiles, constructs, and registers addons."""

    def __init__(
        self,
        source: AddonSource,
        registry: AddonRegistry,
        notifier: Notifier | None = None,
    ) -> None:
        self._source = source
        self._registry = registry
        self._notifier = notifier

    @property
    def source(self) -> AddonSource:
        return self._source

    def load(self, filename: str | Path, *, replace: bool = False) -> AddonRecord | AddonError:
        """Load the addon at *filename* and register it.

        ``replace=True`` swaps an existing record for the same file in place
        (used by reload, after the old instance has been detached).
        """
        path = self._source.resolve(filename)
        addon_id = self._source.addon_id(path)

        if not validate_id(addon_id):
            logger.error("Refusing to load %s: invalid id %r", path.name, addon_id)
            return AddonError(
                name=self._source.default_metadata(path).name,
                filename=str(path),
                reason=INVALID_ID_REASON,
                kind=ErrorKind.CONFLICT,
                cause=ErrorCause(
                    message=f"{addon_id!r} must start with a letter, digit or underscore "
                    "and contain only those, dots and dashes."
                ),
                addon_id=addon_id,
            )

        conflict = self._check_conflict(addon_id, path, replace=replace)
        if conflict is not None:
            return conflict

        try:
            compiled = self._source.compile(path)
        except CompileError as exc:
            logger.error("%s could not be compiled: %s", path.name, exc.message)
            return AddonError(
                name=self._source.default_metadata(path).name,
                filename=str(path),
                reason=COMPILE_REASON,
                kind=ErrorKind.COMPILE,
                cause=ErrorCause(message=exc.message, stack=exc.stack),
                addon_id=addon_id,
            )

        record = AddonRecord.from_metadata(
            addon_id, path, compiled.metadata, factory=compiled.factory
        )
        record.state = AddonState.PARTIAL

        if not callable(record.factory):
            record.factory = None
            self._registry.add(record, replace=replace)
            logger.error("%s had no exports", record.name)
            return AddonError(
                name=record.name,
                filename=str(path),
                reason=f"{record.name} had no exports",
                kind=ErrorKind.EXPORT,
                cause=ErrorCause(message="Addon had no exports or no name property."),
                addon_id=addon_id,
            )

        try:
            instance = record.factory()
            metadata = self._self_reported(instance, compiled.metadata)
        except Exception as exc:
            self._registry.add(record, replace=replace)
            logger.error("%s could not be constructed", record.name, exc_info=exc)
            return AddonError.from_exception(
                exc,
                name=record.name,
                filename=path,
                reason=CONSTRUCT_REASON,
                kind=ErrorKind.CONSTRUCTION,
                addon_id=addon_id,
            )

        record.name = metadata.name
        record.author = metadata.author
        record.description = metadata.description
        record.version = metadata.version
        record.attach(instance)
        record.state = AddonState.READY
        self._registry.add(record, replace=replace)

        if record.supports("load"):
            try:
                instance.load()
            except Exception as exc:
                self._registry.set_enabled(addon_id, False)
                logger.error("%s: load() could not be fired", record.name, exc_info=exc)
                return AddonError.from_exception(
                    exc,
                    name=record.name,
                    filename=path,
                    reason=LOAD_HOOK_REASON,
                    kind=ErrorKind.HOOK,
                    addon_id=addon_id,
                )

        logger.debug("Loaded addon %s (%s)", addon_id, record.name)
        if self._notifier is not None:
            self._notifier.loaded(addon_id)
        return record

    def release(self, record: AddonRecord) -> None:
        """Detach the instance of *record* and drop its compiled module."""
        record.detach()
        record.state = AddonState.UNLOADED
        self._source.release(record.id)

    def _check_conflict(self, addon_id: str, path: Path, *, replace: bool) -> AddonError | None:
        existing = self._registry.get(addon_id)
        if existing is None:
            return None
        if replace and existing.filename == path:
            return None
        if existing.filename == path:
            message = f"{existing.name} is already loaded; reload it instead."
        else:
            message = f"Addon id {addon_id!r} is already used by {existing.filename}."
        logger.warning("Refusing to load %s: %s", path, message)
        return AddonError(
            name=existing.name,
            filename=str(path),
            reason="There is already an addon with this id.",
            kind=ErrorKind.CONFLICT,
            cause=ErrorCause(message=message),
            addon_id=addon_id,
        )

    @staticmethod
    def _self_reported(instance: Any, metadata: AddonMetadata) -> AddonMetadata:
        """Prefer ``get_name()``-style accessors over exported metadata."""
        overrides: dict[str, str] = {}
        for key in METADATA_FIELDS:
            getter = getattr(instance, f"get_{key}", None)
            if not callable(getter):
                continue
            value = getter()
            if value:
                overrides[key] = str(value)
        return dc_replace(metadata, **overrides)

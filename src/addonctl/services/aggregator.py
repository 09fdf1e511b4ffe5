"""ErrorAggregator: group AddonErrors by the batch operation that produced them.

A batch is one host-level operation such as ``"load-all"`` at startup or
``"reload:dark-mode"``. Listeners receive one consolidated report per
batch instead of one notification per failure.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from addonctl.domain.errors import AddonError
    from addonctl.listeners.notifier import Notifier


class ErrorBatch:
    """Collector handed out by :meth:`ErrorAggregator.batch`."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.errors: list[AddonError] = []

    def add(self, error: AddonError | None) -> None:
        """Record *error*; ``None`` (success) is ignored."""
        if error is not None:
            self.errors.append(error)

    def extend(self, errors: Iterable[AddonError]) -> None:
        self.errors.extend(errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __bool__(self) -> bool:
        return bool(self.errors)


class ErrorAggregator:
    """Keeps the errors of each batch until they are cleared."""

    def __init__(self, notifier: Notifier | None = None) -> None:
        self._notifier = notifier
        self._batches: dict[str, list[AddonError]] = {}

    @contextmanager
    def batch(self, name: str) -> Iterator[ErrorBatch]:
        """Collect errors for *name*; report them once when the block exits.

        Re-running a batch name replaces its previous errors.
        """
        collector = ErrorBatch(name)
        try:
            yield collector
        finally:
            self._batches[name] = list(collector.errors)
            if collector and self._notifier is not None:
                self._notifier.errors(name, list(collector.errors))

    def get(self, name: str) -> list[AddonError]:
        return list(self._batches.get(name, []))

    def batches(self) -> dict[str, list[AddonError]]:
        """Copy of all non-empty batches."""
        return {name: list(errors) for name, errors in self._batches.items() if errors}

    def clear(self, name: str | None = None) -> None:
        if name is None:
            self._batches.clear()
        else:
            self._batches.pop(name, None)

    def __len__(self) -> int:
        return sum(len(errors) for errors in self._batches.values())

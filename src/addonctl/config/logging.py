"""Logging setup: structlog rendering over stdlib ``logging``.

Modules log with ``logging.getLogger(__name__)``. A single stderr handler
renders every record through structlog, as console text or as JSON lines
(``--log-json``). Records emitted inside :func:`bound_addon` carry
``addon_id`` and ``operation`` fields.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager

import structlog

PACKAGE_LOGGER = "addonctl"


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all logging to stderr through structlog.

    The ``addonctl`` logger is at DEBUG when *verbose*, WARNING otherwise;
    third-party loggers stay at WARNING. Calling this again replaces the
    handler instead of adding another one.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)


def bound_addon(addon_id: str, operation: str) -> AbstractContextManager[None]:
    """Tag every record logged inside the block with the addon and operation."""
    return structlog.contextvars.bound_contextvars(addon_id=addon_id, operation=operation)

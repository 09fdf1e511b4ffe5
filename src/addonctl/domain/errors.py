"""AddonError and the exceptions raised around addon handling.

Every fault raised inside addon code is converted into an
:class:`AddonError` value at the point of invocation. The aggregator,
listeners, and CLI consume this one shape.

Only two exceptions cross component boundaries:

- :class:`CompileError`: raised by the source layer, converted by the
  loader into an ``AddonError`` of kind ``compile``.
- :class:`AddonNotFoundError`: a caller error (unknown id/filename),
  raised immediately and never retried.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class ErrorKind(StrEnum):
    """Which stage of addon handling failed."""

    COMPILE = "compile"
    EXPORT = "export"
    CONSTRUCTION = "construction"
    HOOK = "hook"
    CONFLICT = "conflict"
    STATE = "state"


class ErrorCause(BaseModel):
    """Message and formatted stack of the underlying fault."""

    model_config = {"frozen": True}

    message: str
    stack: str = ""


class AddonError(BaseModel):
    """Structured failure record for one addon.

    Attributes:
        name: Display name of the addon (or its filename when unknown).
        filename: Source file of the addon.
        reason: Short human-readable reason, e.g. ``"start() could not be fired."``.
        kind: Failure stage.
        cause: Message and stack of the fault.
        addon_id: Registry id, when one was derived.
    """

    model_config = {"frozen": True}

    name: str
    filename: str
    reason: str
    kind: ErrorKind
    cause: ErrorCause
    addon_id: str | None = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        name: str,
        filename: Any,
        reason: str,
        kind: ErrorKind,
        addon_id: str | None = None,
    ) -> AddonError:
        """Build an error record from a caught exception."""
        return cls(
            name=name,
            filename=str(filename),
            reason=reason,
            kind=kind,
            cause=ErrorCause(message=exception_message(exc), stack=format_stack(exc)),
            addon_id=addon_id,
        )


class CompileError(Exception):
    """Addon source could not be turned into an executable module."""

    def __init__(self, filename: Any, message: str, stack: str = "") -> None:
        super().__init__(f"{filename}: {message}")
        self.filename = str(filename)
        self.message = message
        self.stack = stack

    @classmethod
    def from_exception(cls, filename: Any, exc: BaseException) -> CompileError:
        return cls(filename, exception_message(exc), format_stack(exc))


class AddonNotFoundError(LookupError):
    """No addon matches the requested id, filename, or record."""

    def __init__(self, target: Any) -> None:
        super().__init__(f"No addon found for {target!r}")
        self.target = target


def exception_message(exc: BaseException) -> str:
    """``str(exc)``, or the exception type name when the message is empty."""
    return str(exc) or type(exc).__name__


def format_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(exc))

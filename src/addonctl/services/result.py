"""ServiceResult and ServiceError: the contract between the manager and the CLI.

CLI commands translate manager return values (records, ``AddonError`` or
None) into a ServiceResult, which the output layer renders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from addonctl.domain.errors import AddonError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_addon_error(cls, error: AddonError) -> ServiceError:
        return cls(
            code=str(error.kind).upper(),
            message=f"{error.name}: {error.reason}",
            detail=error.model_dump(mode="json"),
        )


class ServiceResult(BaseModel):
    """Universal return type of CLI-facing operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"enable"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def from_outcome(
        cls,
        op: str,
        error: AddonError | None,
        *,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Success when *error* is None, failure carrying *error* otherwise."""
        if error is None:
            return cls(ok=True, op=op, data=data or {}, warnings=warnings or [])
        return cls(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError.from_addon_error(error),
        )

"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, addonctl.toml only contains overrides.
An empty (or absent) addonctl.toml is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from addonctl.domain.ids import DEFAULT_EXTENSION

# --- addonctl.toml sections ---


class AddonsConfig(BaseModel):
    """[addons] section."""

    model_config = {"frozen": True}

    directory: str = "addons"
    extension: str = DEFAULT_EXTENSION
    state_file: str = "addons.json"
    autostart: bool = True

    @field_validator("extension")
    @classmethod
    def _dotted_extension(cls, value: str) -> str:
        if not value.startswith("."):
            msg = f"extension must start with '.': {value!r}"
            raise ValueError(msg)
        return value


class NotificationsConfig(BaseModel):
    """[notifications] section."""

    model_config = {"frozen": True}

    toasts: bool = True


class AddonctlConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    addons: AddonsConfig = Field(default_factory=AddonsConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)

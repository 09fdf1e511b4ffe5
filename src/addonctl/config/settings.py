"""AddonSettings: one frozen object built from flags, env vars, and TOML.

Sources, highest priority first:

1. keyword arguments (the CLI flags)
2. ``ADDONCTL_*`` environment variables, ``__`` between nested keys
   (``ADDONCTL_ADDONS__DIRECTORY=plugins``)
3. the ``[addons]``/``[notifications]`` tables of ``addonctl.toml``
4. defaults from :mod:`addonctl.config.models`
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from addonctl.config.discovery import find_config, read_toml
from addonctl.config.models import AddonctlConfig, AddonsConfig, NotificationsConfig

# TOML file for the settings object currently being built by from_cli().
_active_toml: ContextVar[Path | None] = ContextVar("_active_toml", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over the section tables of one TOML file.

    Top-level keys that are not config sections are ignored, so the file
    cannot set CLI-only fields such as ``root`` or ``quiet``.
    """

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        data = read_toml(toml_path) if toml_path is not None else {}
        self._sections = {
            key: value for key, value in data.items() if key in AddonctlConfig.model_fields
        }

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._sections.get(field_name), field_name, field_name in self._sections

    def __call__(self) -> dict[str, Any]:
        return dict(self._sections)


class AddonSettings(BaseSettings):
    """Settings for the addon manager and the CLI around it.

    Attributes:
        root: Directory holding ``addonctl.toml`` (the working directory
            when there is none). Relative paths resolve against it.
        config_path: The TOML file that was read, if any.
        addon_dir: ``--addon-dir``; replaces ``[addons].directory``.
        no_autostart: ``--no-autostart``; previously enabled addons stay idle.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ADDONCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    addon_dir: Path | None = None
    no_autostart: bool = False

    addons: AddonsConfig = Field(default_factory=AddonsConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _active_toml.get()),
        )

    def _under_root(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    @property
    def addons_path(self) -> Path:
        """Directory scanned for addon files."""
        return self._under_root(self.addon_dir or Path(self.addons.directory))

    @property
    def state_path(self) -> Path:
        """JSON file holding the persisted enabled map."""
        return self._under_root(Path(self.addons.state_file))

    @property
    def autostart(self) -> bool:
        return self.addons.autostart and not self.no_autostart

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | Path | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> AddonSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* must exist. Without one, ``addonctl.toml``
        is looked up from *root* (or the working directory) upwards, and
        *root* defaults to the directory holding it. Flags that are None
        are dropped so they do not mask env or TOML values.

        Raises:
            click.ClickException: The explicit config file is missing, or
                the TOML does not parse.
        """
        if config_path is not None:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {toml_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path is not None else Path.cwd()

        flags = {key: value for key, value in cli_flags.items() if value is not None}
        token = _active_toml.set(toml_path)
        try:
            return cls(root=root, config_path=toml_path, **flags)
        finally:
            _active_toml.reset(token)

"""AddonSource: turn addon files into executable modules.

Each addon file is read as text, compiled, and executed in a fresh module
whose namespace is pre-seeded with an ``exports`` dict. The addon fills
it to describe itself::

    # META {"author": "Jane", "version": "1.2.0"}

    class DarkMode:
        def start(self): ...
        def stop(self): ...

    exports.update(name="Dark Mode", type=DarkMode)

Addons written without ``exports`` still load through a narrow legacy
shim: the factory is the module attribute named by the header's
``exports`` key, or else by the addon name.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import types
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from addonctl.domain.errors import CompileError
from addonctl.domain.ids import DEFAULT_EXTENSION, addon_stem, derive_addon_id
from addonctl.domain.records import AddonMetadata

logger = logging.getLogger(__name__)

MODULE_PREFIX = "addonctl_addon_"
EXPORTS_NAME = "exports"

_META_HEADER = re.compile(r"^#\s*META\s*(\{.*\})\s*$")


@dataclass(frozen=True)
class CompiledAddon:
    """Result of compiling one addon file."""

    addon_id: str
    path: Path
    metadata: AddonMetadata
    factory: Any
    module: types.ModuleType


def parse_meta_header(text: str) -> dict[str, Any]:
    """Parse the optional ``# META {json}`` first line of an addon source.

    Returns an empty dict when the header is absent or not valid JSON.
    """
    first_line = text.split("\n", 1)[0].strip()
    match = _META_HEADER.match(first_line)
    if match is None:
        return {}
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed META header: %s", first_line)
        return {}
    return data if isinstance(data, dict) else {}


def module_name_for(addon_id: str) -> str:
    return f"{MODULE_PREFIX}{addon_id}"


class AddonSource:
    """Reads addon files from a directory and compiles them into modules.

    Parameters:
        directory: Directory holding addon files (scanned non-recursively).
        extension: File suffix that identifies an addon.
    """

    def __init__(self, directory: Path, extension: str = DEFAULT_EXTENSION) -> None:
        self.directory = directory
        self.extension = extension

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self) -> list[Path]:
        """List addon files in the directory, sorted by name.

        ``_``-prefixed files are skipped. A missing directory yields no files.
        """
        if not self.directory.is_dir():
            return []
        return sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file()
            and path.name.endswith(self.extension)
            and not path.name.startswith("_")
        )

    def resolve(self, filename: str | Path) -> Path:
        """Resolve *filename* against the addon directory."""
        path = Path(filename)
        if not path.is_absolute():
            path = self.directory / path
        return path.resolve()

    def addon_id(self, filename: str | Path) -> str:
        return derive_addon_id(filename, self.extension)

    def default_metadata(self, filename: str | Path) -> AddonMetadata:
        """Metadata derived from the filename alone."""
        return AddonMetadata(name=addon_stem(filename, self.extension))

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def compile(self, filename: str | Path) -> CompiledAddon:
        """Read, compile, and execute the addon at *filename*.

        Raises:
            CompileError: The file could not be read, has a syntax error,
                or raised while executing its top level.
        """
        path = self.resolve(filename)
        addon_id = self.addon_id(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CompileError.from_exception(path, exc) from exc

        header = parse_meta_header(text)
        module_name = module_name_for(addon_id)
        module = types.ModuleType(module_name)
        module.__file__ = str(path)
        setattr(module, EXPORTS_NAME, {})

        # Registered before execution so dataclasses/pickling inside the
        # addon can resolve their own module.
        sys.modules[module_name] = module
        try:
            code = compile(text, str(path), "exec", dont_inherit=True)
            exec(code, module.__dict__)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            raise CompileError.from_exception(path, exc) from exc

        metadata, factory = self._extract(module, header, path)
        logger.debug("Compiled addon %s from %s", addon_id, path)
        return CompiledAddon(
            addon_id=addon_id,
            path=path,
            metadata=metadata,
            factory=factory,
            module=module,
        )

    def release(self, addon_id: str) -> None:
        """Forget the compiled module of *addon_id*."""
        sys.modules.pop(module_name_for(addon_id), None)

    def _extract(
        self,
        module: types.ModuleType,
        header: dict[str, Any],
        path: Path,
    ) -> tuple[AddonMetadata, Any]:
        """Pull metadata and the factory out of an executed module."""
        default_name = self.default_metadata(path).name
        exports = getattr(module, EXPORTS_NAME, None)

        # ``exports = SomeClass`` rebinds the surface to a sole default export.
        if exports is not None and not isinstance(exports, dict):
            metadata = AddonMetadata.from_mapping(header, default_name=default_name)
            return metadata, exports

        if exports:
            metadata = AddonMetadata.from_mapping(
                {**header, **exports}, default_name=default_name
            )
            factory = exports.get("type") or exports.get("default")
            return metadata, factory

        # Legacy addons never touch ``exports``.
        metadata = AddonMetadata.from_mapping(header, default_name=default_name)
        export_name = header.get("exports") or metadata.name
        factory = getattr(module, export_name, None) if isinstance(export_name, str) else None
        return metadata, factory

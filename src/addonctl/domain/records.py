"""AddonRecord: one discovered addon: metadata, runtime instance, and state.

Records carry no behavior beyond capability probing. The registry owns
them; the enabled flag lives in the registry's state map so that it
survives the instance swap performed by a reload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from addonctl.domain.lifecycle import ADDON_HOOKS, AddonState

METADATA_FIELDS = ("name", "author", "description", "version")

DEFAULT_AUTHOR = "No author"
DEFAULT_DESCRIPTION = "No description"
DEFAULT_VERSION = "No version"


@dataclass(frozen=True)
class AddonMetadata:
    """Display metadata reported by (or derived for) an addon."""

    name: str
    author: str = DEFAULT_AUTHOR
    description: str = DEFAULT_DESCRIPTION
    version: str = DEFAULT_VERSION

    @classmethod
    def from_mapping(cls, data: dict[str, Any], *, default_name: str) -> AddonMetadata:
        """Take string metadata fields from *data*, falling back to defaults."""
        values: dict[str, str] = {}
        for key in METADATA_FIELDS:
            value = data.get(key)
            if isinstance(value, str) and value:
                values[key] = value
        values.setdefault("name", default_name)
        return cls(**values)


def detect_capabilities(instance: Any) -> frozenset[str]:
    """Return the names of the optional hooks *instance* implements."""
    if instance is None:
        return frozenset()
    return frozenset(name for name in ADDON_HOOKS if callable(getattr(instance, name, None)))


@dataclass
class AddonRecord:
    """One addon as tracked by the registry.

    Attributes:
        id: Stable id derived from the filename.
        filename: Absolute path of the addon source.
        name: Display name.
        author: Display author.
        description: Display description.
        version: Display version.
        factory: Exported class/callable, present after a usable export was found.
        instance: Constructed addon object, present after successful construction.
        state: Current lifecycle state.
        capabilities: Hooks implemented by ``instance``, detected once.
    """

    id: str
    filename: Path
    name: str
    author: str = DEFAULT_AUTHOR
    description: str = DEFAULT_DESCRIPTION
    version: str = DEFAULT_VERSION
    factory: Any = field(default=None, repr=False)
    instance: Any = field(default=None, repr=False)
    state: AddonState = AddonState.UNLOADED
    capabilities: frozenset[str] = frozenset()

    @classmethod
    def from_metadata(
        cls,
        addon_id: str,
        filename: Path,
        metadata: AddonMetadata,
        *,
        factory: Any = None,
    ) -> AddonRecord:
        return cls(
            id=addon_id,
            filename=filename,
            name=metadata.name,
            author=metadata.author,
            description=metadata.description,
            version=metadata.version,
            factory=factory,
        )

    @property
    def partial(self) -> bool:
        """Listed, but without a runnable instance."""
        return self.instance is None

    def attach(self, instance: Any) -> None:
        """Adopt a freshly constructed *instance* and cache its capabilities."""
        self.instance = instance
        self.capabilities = detect_capabilities(instance)

    def detach(self) -> None:
        """Drop the instance and factory so nothing keeps them alive."""
        self.instance = None
        self.factory = None
        self.capabilities = frozenset()

    def supports(self, hook: str) -> bool:
        """Whether the instance implements *hook*.

        Known hooks are answered from the cached capabilities; any other host event
        name is looked up on the instance.
        """
        if self.instance is None:
            return False
        if hook in ADDON_HOOKS:
            return hook in self.capabilities
        return callable(getattr(self.instance, hook, None))

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary used by the CLI and listeners."""
        return {
            "id": self.id,
            "filename": str(self.filename),
            "name": self.name,
            "author": self.author,
            "description": self.description,
            "version": self.version,
            "state": str(self.state),
            "partial": self.partial,
        }

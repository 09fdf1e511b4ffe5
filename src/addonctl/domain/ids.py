"""Addon id derivation and validation.

An addon id is derived from its filename: the configured extension is
stripped, then the stem is NFKC-normalized and lowercased.

INVARIANT: IDs are stable. The same file always maps to the same id,
and one id is never reused for a different file within a process.
"""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path

DEFAULT_EXTENSION = ".addon.py"

ID_PATTERN = re.compile(r"^[\w][\w.\-]*$")


def addon_stem(filename: str | Path, extension: str = DEFAULT_EXTENSION) -> str:
    """Return the file name with *extension* removed, case preserved.

    Falls back to stripping the last suffix when the name does not end
    with *extension*.
    """
    name = Path(filename).name
    if extension and name.endswith(extension) and len(name) > len(extension):
        return name[: -len(extension)]
    return Path(name).stem


def normalize_id(raw: str) -> str:
    """NFKC-normalize, lowercase, and trim an id candidate."""
    return unicodedata.normalize("NFKC", raw).strip().lower()


def derive_addon_id(filename: str | Path, extension: str = DEFAULT_EXTENSION) -> str:
    """Derive the registry id for the addon stored at *filename*.

    Examples:
        >>> derive_addon_id("foo.addon.py")
        'foo'
        >>> derive_addon_id("/srv/addons/Dark-Mode.addon.py")
        'dark-mode'
    """
    return normalize_id(addon_stem(filename, extension))


def validate_id(addon_id: str) -> bool:
    """Check whether *addon_id* is a well-formed addon id."""
    return ID_PATTERN.match(addon_id) is not None

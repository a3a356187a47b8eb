"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying solution
manifests and feed files. This keeps hand-edited manifests readable and
diff-friendly after ``apply`` writes them back.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.container import Container
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Item


class ManifestError(ValueError):
    """A manifest or feed file is missing, unreadable or malformed."""


def load_document(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Returns a TOMLDocument that preserves formatting when modified and saved.

    Raises:
        ManifestError: If the file does not exist or is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except FileNotFoundError as exc:
        raise ManifestError(f"{path}: file not found") from exc
    except TOMLKitError as exc:
        raise ManifestError(f"{path}: {exc}") from exc


def save_document(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_table(container: Any, key: str, path: Path) -> dict[str, Any]:
    """Return ``container[key]`` as a table, or an empty dict if absent.

    Raises:
        ManifestError: If the key holds something other than a table.
    """
    value = container.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"{path}: [{key}] must be a table")
    return value


def get_array_of_tables(doc: tomlkit.TOMLDocument, key: str, path: Path) -> list[dict[str, Any]]:
    """Return the ``[[key]]`` entries of a document, or an empty list."""
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ManifestError(f"{path}: [[{key}]] must be an array of tables")
    return list(value)


def require_str(table: dict[str, Any], key: str, path: Path, where: str) -> str:
    """Return a required string value from ``table``."""
    value = table.get(key)
    if not isinstance(value, str) or not value:
        raise ManifestError(f"{path}: {where} needs a non-empty '{key}'")
    return str(value)


def plain(value: Any) -> Any:
    """Convert tomlkit items to plain Python values."""
    if isinstance(value, (Item, Container)):
        return value.unwrap()
    return value

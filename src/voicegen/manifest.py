"""Manifest loading for voicegen.

A manifest is a JSON array of speech items::

    [
        {"path": "digits", "fileName": "1", "speechText": "one"},
        {"path": "custom/ivr", "fileName": "welcome", "speechText": "Welcome!"}
    ]

``relativePath`` is accepted as an alias of ``path``.
"""

import json
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ManifestError

logger = logging.getLogger(__name__)


def normalize_relative_path(*parts: str) -> str:
    """Join path parts into a canonical forward-slash relative path.

    Backslashes are treated as separators regardless of host platform, so
    a manifest written on Windows keys the same cache entries as on Linux.

    Returns:
        Normalized relative path without leading slash ("" for empty input)
    """
    joined = "/".join(part.replace("\\", "/") for part in parts if part)
    if not joined:
        return ""
    normalized = posixpath.normpath(joined).lstrip("/")
    return "" if normalized == "." else normalized


@dataclass(frozen=True)
class ManifestItem:
    """One speech item from the manifest.

    Attributes:
        path: Directory of the item relative to the output root
        file_name: Output file stem, without extension
        speech_text: Text to synthesize
    """

    path: str
    file_name: str
    speech_text: str

    @property
    def relative_path(self) -> str:
        """Stable cache key and output stem, e.g. ``digits/1``."""
        return normalize_relative_path(self.path, self.file_name)


def _field(entry: dict[str, Any], *names: str) -> str:
    for name in names:
        value = entry.get(name)
        if value is not None:
            return str(value)
    return ""


def parse_manifest(data: Any) -> list[ManifestItem]:
    """Build manifest items from decoded JSON data.

    Missing fields are kept as empty strings; the generation stage skips
    such items instead of failing the run.

    Raises:
        ManifestError: If the structure is not a list of objects or an item
            path escapes the output root
    """
    if not isinstance(data, list):
        raise ManifestError(
            f"Manifest must be a JSON array, got {type(data).__name__}"
        )

    items = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ManifestError(
                f"Manifest entry {index} must be an object, got {type(entry).__name__}"
            )

        item = ManifestItem(
            path=_field(entry, "path", "relativePath"),
            file_name=_field(entry, "fileName"),
            speech_text=_field(entry, "speechText"),
        )

        key = item.relative_path
        if key == ".." or key.startswith("../"):
            raise ManifestError(
                f"Manifest entry {index} escapes the output root: {key}"
            )

        items.append(item)

    return items


def load_manifest(manifest_path: Path) -> list[ManifestItem]:
    """Read and parse a JSON manifest file.

    Args:
        manifest_path: Path to the manifest JSON file

    Returns:
        Manifest items in file order

    Raises:
        ManifestError: If the file cannot be read or is not a valid manifest
    """
    try:
        raw = Path(manifest_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read manifest {manifest_path}: {e}", e) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in manifest {manifest_path}: {e}", e) from e

    items = parse_manifest(data)
    logger.info(f"Loaded {len(items)} manifest items from {manifest_path}")
    return items

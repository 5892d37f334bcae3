"""Data models for cache storage."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class CacheEntry:
    """Cache entry recording the last successful generation of one item.

    Attributes:
        key: Item relative path (e.g., "digits/1")
        fingerprint: Content fingerprint the artifact was generated from
        last_updated: When this entry was written
    """

    key: str
    fingerprint: str
    last_updated: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk JSON value (the key is the mapping key)."""
        return {
            "fingerprint": self.fingerprint,
            "timestamp": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any]) -> "CacheEntry":
        """Deserialize an on-disk JSON value.

        Raises:
            ValueError: If the value is not a well-formed entry
        """
        if not isinstance(data, dict):
            raise ValueError(f"entry must be an object, got {type(data).__name__}")

        fingerprint = data.get("fingerprint")
        if not isinstance(fingerprint, str) or not fingerprint:
            raise ValueError("entry has no fingerprint")

        timestamp = data.get("timestamp")
        last_updated = (
            datetime.fromisoformat(timestamp)
            if isinstance(timestamp, str)
            else datetime.min
        )

        return cls(key=key, fingerprint=fingerprint, last_updated=last_updated)

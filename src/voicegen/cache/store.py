"""JSON sidecar cache store for generated artifacts."""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from ..errors import CacheIOError
from .models import CacheEntry

logger = logging.getLogger(__name__)

CACHE_FILENAME = ".voicegen-cache.json"
DEFAULT_MIN_ARTIFACT_BYTES = 1024


class CacheStore:
    """In-memory cache of item fingerprints backed by one JSON file.

    The file is read once by load(), mutated only in memory while the batch
    runs, and written back at most once by flush_if_dirty(). The cache is an
    optimization: every I/O failure degrades to regeneration, never to a
    failed run.

    Example:
        store = CacheStore(output_root)
        store.load()

        if not await store.is_valid("digits/1", fp, output_root / "digits/1.mp3"):
            ...  # regenerate
            await store.update("digits/1", fp)

        await store.flush_if_dirty()
    """

    def __init__(
        self,
        output_root: Path,
        min_artifact_bytes: int = DEFAULT_MIN_ARTIFACT_BYTES,
        cache_path: Path | None = None,
    ) -> None:
        """Initialize cache store for an output root.

        Args:
            output_root: Directory holding generated artifacts
            min_artifact_bytes: Files at or below this size are treated as corrupt
            cache_path: Override for the cache file location
        """
        if min_artifact_bytes < 0:
            raise ValueError(
                f"min_artifact_bytes must be non-negative, got {min_artifact_bytes}"
            )

        self.output_root = Path(output_root)
        self.cache_path = cache_path or self.output_root / CACHE_FILENAME
        self.min_artifact_bytes = min_artifact_bytes

        self._entries: dict[str, CacheEntry] = {}
        self._dirty = False
        self._lock = asyncio.Lock()

    @property
    def dirty(self) -> bool:
        """True when at least one entry changed since load."""
        return self._dirty

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored for an item key, if any."""
        return self._entries.get(key)

    def load(self) -> None:
        """Load the persisted mapping, starting empty on any failure."""
        self._entries = {}
        self._dirty = False

        try:
            self._entries = self._read()
        except CacheIOError as e:
            logger.warning(f"{e}; starting with an empty cache")
            return

        logger.info(f"Cache loaded: {len(self._entries)} entries from {self.cache_path}")

    def _read(self) -> dict[str, CacheEntry]:
        if not self.cache_path.exists():
            logger.debug(f"No cache file at {self.cache_path}")
            return {}

        try:
            data = json.loads(self.cache_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheIOError(f"Failed to load cache {self.cache_path}: {e}", e) from e

        if not isinstance(data, dict):
            raise CacheIOError(
                f"Failed to load cache {self.cache_path}: "
                f"expected an object, got {type(data).__name__}"
            )

        entries = {}
        for key, value in data.items():
            try:
                entries[key] = CacheEntry.from_dict(key, value)
            except ValueError as e:
                logger.warning(f"Dropping malformed cache entry '{key}': {e}")
        return entries

    async def is_valid(self, key: str, fingerprint: str, artifact_path: Path) -> bool:
        """Check whether the stored artifact for an item can be reused.

        Args:
            key: Item relative path
            fingerprint: Fingerprint of the item's current content
            artifact_path: Primary output file the entry vouches for

        Returns:
            True iff the fingerprint matches and the file exists and is
            larger than the minimum plausible artifact size
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss: no entry for {key}")
            return False

        if entry.fingerprint != fingerprint:
            logger.debug(f"Cache miss: content changed for {key}")
            return False

        try:
            size = (await asyncio.to_thread(Path(artifact_path).stat)).st_size
        except OSError:
            logger.debug(f"Cache miss: artifact missing for {key}: {artifact_path}")
            return False

        if size <= self.min_artifact_bytes:
            logger.warning(
                f"Cache entry for {key} points at a truncated artifact "
                f"({size} bytes): {artifact_path}"
            )
            return False

        return True

    async def update(self, key: str, fingerprint: str) -> None:
        """Upsert the entry for an item and mark the store dirty."""
        async with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                fingerprint=fingerprint,
                last_updated=datetime.now(timezone.utc),
            )
            self._dirty = True

    async def flush_if_dirty(self) -> bool:
        """Persist the full mapping if any entry changed since load.

        Returns:
            True if the cache file was written
        """
        async with self._lock:
            if not self._dirty:
                logger.debug("Cache unchanged, skipping write")
                return False

            snapshot = {
                key: entry.to_dict() for key, entry in sorted(self._entries.items())
            }

            try:
                await asyncio.to_thread(self._write, snapshot)
            except CacheIOError as e:
                logger.error(f"{e}; affected items will be regenerated next run")
                return False

            self._dirty = False
            logger.info(f"Cache saved: {len(snapshot)} entries to {self.cache_path}")
            return True

    def _write(self, snapshot: dict[str, dict[str, str]]) -> None:
        tmp_path = None
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.cache_path.parent, prefix=".voicegen-cache-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.cache_path)
        except OSError as e:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            raise CacheIOError(f"Failed to save cache {self.cache_path}: {e}", e) from e

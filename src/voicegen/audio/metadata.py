"""Embedded ID3 audit tags for generated MP3 artifacts.

Tags record the item path, fingerprint and generation time inside the
artifact itself so a file found outside the build tree can be traced back
to its manifest entry. They are written after each generation and are
never consulted to decide whether an artifact is up to date; that decision
belongs to the sidecar cache alone.
"""

import asyncio
import logging
from pathlib import Path

from mutagen import MutagenError
from mutagen.id3 import ID3, TALB, TIT2, TPE1, TXXX, ID3NoHeaderError

logger = logging.getLogger(__name__)

ARTIST = "voicegen"
ALBUM = "Telephony Prompts"
AUDIT_FIELDS = ("path", "fingerprint", "timestamp")


def write_audit_tags(
    filepath: Path, relative_path: str, fingerprint: str, timestamp: str
) -> bool:
    """Write title, artist, album and TXXX audit frames to an MP3 file.

    Args:
        filepath: MP3 artifact to tag
        relative_path: Manifest key of the item
        fingerprint: Fingerprint the artifact was generated from
        timestamp: ISO-8601 generation time

    Returns:
        True if the tags were saved, False if tagging failed (logged)
    """
    try:
        try:
            tags = ID3(filepath)
        except ID3NoHeaderError:
            tags = ID3()

        tags.setall("TIT2", [TIT2(encoding=3, text=[Path(filepath).name])])
        tags.setall("TPE1", [TPE1(encoding=3, text=[ARTIST])])
        tags.setall("TALB", [TALB(encoding=3, text=[ALBUM])])

        values = {"path": relative_path, "fingerprint": fingerprint, "timestamp": timestamp}
        for desc in AUDIT_FIELDS:
            tags.delall(f"TXXX:{desc}")
            tags.add(TXXX(encoding=3, desc=desc, text=[values[desc]]))

        tags.save(filepath)
    except (MutagenError, OSError) as e:
        logger.warning(f"Failed to write ID3 tags to {filepath}: {e}")
        return False

    logger.debug(f"ID3 tags updated for {Path(filepath).name}")
    return True


async def write_audit_tags_async(
    filepath: Path, relative_path: str, fingerprint: str, timestamp: str
) -> bool:
    """Async wrapper around write_audit_tags()."""
    return await asyncio.to_thread(
        write_audit_tags, filepath, relative_path, fingerprint, timestamp
    )


def read_audit_tags(filepath: Path) -> dict[str, str]:
    """Read the TXXX audit frames from an MP3 file.

    Returns:
        Mapping of audit field to value; empty if the file has no tags
    """
    try:
        tags = ID3(filepath)
    except (MutagenError, OSError):
        return {}

    result = {}
    for desc in AUDIT_FIELDS:
        frame = tags.get(f"TXXX:{desc}")
        if frame is not None and frame.text:
            result[desc] = str(frame.text[0])
    return result

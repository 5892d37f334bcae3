"""Content fingerprints for speech items."""

import hashlib
import re

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to a single space and trim both ends."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def fingerprint(voice_id: str, language: str, text: str) -> str:
    """Compute the synthesis fingerprint of a speech item.

    The digest covers everything that changes the synthesized audio:
    the voice, the language and the normalized text. Incidental whitespace
    differences in the source text produce the same fingerprint.

    Args:
        voice_id: Provider voice identifier
        language: Language code used for synthesis
        text: Raw speech text from the manifest

    Returns:
        64-character lowercase SHA-256 hex digest

    Raises:
        ValueError: If any input parameter is None
    """
    if voice_id is None or language is None or text is None:
        raise ValueError("All parameters (voice_id, language, text) must be non-None")

    payload = f"{voice_id}|{language}|{normalize_text(text)}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

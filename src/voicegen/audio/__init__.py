"""Artifact I/O package for voicegen.

Writes synthesized audio to the output tree and stamps MP3 artifacts
with ID3 audit tags using mutagen.
"""

from .files import save_audio, save_audio_async
from .metadata import read_audit_tags, write_audit_tags, write_audit_tags_async

__all__ = [
    "read_audit_tags",
    "save_audio",
    "save_audio_async",
    "write_audit_tags",
    "write_audit_tags_async",
]

"""Telephony format conversion for generated artifacts."""

from .engine import ConversionEngine
from .models import FormatOutcome, GeneratedArtifact
from .presets import DEFAULT_FORMATS, PRESETS, FormatPreset

__all__ = [
    "DEFAULT_FORMATS",
    "PRESETS",
    "ConversionEngine",
    "FormatOutcome",
    "FormatPreset",
    "GeneratedArtifact",
]

"""Data models for generated artifacts and their derived formats."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class GeneratedArtifact:
    """Freshly synthesized audio for one item.

    Attributes:
        primary_path: Synthesized source audio (e.g., out/digits/1.mp3)
        base_path: Path stem all related files derive from (out/digits/1)
    """

    primary_path: Path
    base_path: Path

    def derived_path(self, fmt: str) -> Path:
        """Output path for a derived format, e.g. out/digits/1.ulaw."""
        return self.base_path.with_name(f"{self.base_path.name}.{fmt}")


@dataclass(frozen=True)
class FormatOutcome:
    """Result of converting one artifact to one target format."""

    fmt: str
    path: Path
    ok: bool
    strategy: str | None = None
    error: str | None = None

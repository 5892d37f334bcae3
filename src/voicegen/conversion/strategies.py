"""Transformation strategies tried in order for each target format."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from .presets import (
    INTERMEDIATE_WAV,
    FormatPreset,
    asterisk_command,
    ffmpeg_command,
    get_preset,
)

if TYPE_CHECKING:
    from .engine import ConversionEngine

# Formats ffmpeg usually cannot encode; asterisk's translator handles them
ASTERISK_FALLBACK_FORMATS = frozenset({"g729"})


@contextmanager
def scoped_intermediate(path: Path) -> Iterator[Path]:
    """Yield a scratch file path that is removed on exit, success or not."""
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


@dataclass(frozen=True)
class DirectTranscode:
    """Encode the source straight to the target with ffmpeg."""

    name: ClassVar[str] = "ffmpeg"
    preset: FormatPreset

    async def apply(
        self, engine: "ConversionEngine", source: Path, target: Path
    ) -> None:
        await engine.run(ffmpeg_command(engine.ffmpeg, source, target, self.preset))


@dataclass(frozen=True)
class IntermediateTranscode:
    """Decode to signed-linear WAV with ffmpeg, then let asterisk encode it."""

    name: ClassVar[str] = "ffmpeg+asterisk"
    intermediate: FormatPreset = INTERMEDIATE_WAV

    async def apply(
        self, engine: "ConversionEngine", source: Path, target: Path
    ) -> None:
        scratch = target.with_name(
            f".{target.name}.intermediate.{self.intermediate.name}"
        )
        with scoped_intermediate(scratch) as path:
            await engine.run(
                ffmpeg_command(engine.ffmpeg, source, path, self.intermediate)
            )
            await engine.run(asterisk_command(engine.asterisk, path, target))


Strategy = DirectTranscode | IntermediateTranscode


def strategies_for(fmt: str) -> tuple[Strategy, ...]:
    """Ordered strategies for a format.

    Raises:
        KeyError: If the format is not supported
    """
    preset = get_preset(fmt)
    if fmt in ASTERISK_FALLBACK_FORMATS:
        return (DirectTranscode(preset), IntermediateTranscode())
    return (DirectTranscode(preset),)

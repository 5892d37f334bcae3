"""Multi-format conversion fan-out for generated artifacts."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

from ..errors import ConversionError
from .models import FormatOutcome, GeneratedArtifact
from .strategies import strategies_for
from .tools import run_tool

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0

ToolRunner = Callable[[list[str], float | None], Awaitable[None]]


class ConversionEngine:
    """Derives telephony formats from one synthesized artifact.

    All requested formats are converted concurrently. Each format walks its
    ordered strategy list until one produces a non-empty output file. A
    format that exhausts its strategies is reported as failed without
    affecting its siblings.

    Example:
        engine = ConversionEngine(ffmpeg="ffmpeg", asterisk="asterisk")
        outcomes = await engine.convert(artifact, ["alaw", "ulaw", "g729"])
        failed = [o.fmt for o in outcomes if not o.ok]
    """

    def __init__(
        self,
        ffmpeg: str = "ffmpeg",
        asterisk: str = "asterisk",
        timeout: float | None = DEFAULT_TIMEOUT,
        runner: ToolRunner = run_tool,
    ) -> None:
        """Initialize conversion engine.

        Args:
            ffmpeg: ffmpeg executable name or path
            asterisk: asterisk executable name or path
            timeout: Per-invocation tool timeout in seconds
            runner: Coroutine executing one tool command (injectable for tests)
        """
        self.ffmpeg = ffmpeg
        self.asterisk = asterisk
        self.timeout = timeout
        self._runner = runner

    async def run(self, cmd: list[str]) -> None:
        """Run one tool command with the configured timeout."""
        await self._runner(cmd, self.timeout)

    async def convert(
        self, artifact: GeneratedArtifact, formats: Iterable[str]
    ) -> list[FormatOutcome]:
        """Convert an artifact to every requested format concurrently.

        Args:
            artifact: Freshly generated source audio
            formats: Target format names (see conversion.presets)

        Returns:
            One outcome per format, in request order
        """
        formats = list(dict.fromkeys(formats))
        if not formats:
            return []

        return list(
            await asyncio.gather(*(self._convert_one(artifact, fmt) for fmt in formats))
        )

    async def _convert_one(self, artifact: GeneratedArtifact, fmt: str) -> FormatOutcome:
        target = artifact.derived_path(fmt)

        try:
            strategies = strategies_for(fmt)
        except KeyError as e:
            logger.error(f"Conversion error: {e.args[0]}")
            return FormatOutcome(fmt=fmt, path=target, ok=False, error=e.args[0])

        last_error: Exception | None = None
        for strategy in strategies:
            try:
                await strategy.apply(self, artifact.primary_path, target)
                self._check_output(target)
            except (ConversionError, OSError) as e:
                last_error = e
                target.unlink(missing_ok=True)
                logger.debug(f"{strategy.name} could not produce {target.name}: {e}")
                continue

            logger.info(f"Converted {target.name} via {strategy.name}")
            return FormatOutcome(fmt=fmt, path=target, ok=True, strategy=strategy.name)

        error = ConversionError(
            f"All strategies failed for {target.name}: {last_error}",
            fmt=fmt,
            original_error=last_error,
        )
        logger.error(f"Conversion error: {error}")
        return FormatOutcome(fmt=fmt, path=target, ok=False, error=str(error))

    @staticmethod
    def _check_output(target: Path) -> None:
        # Some tools (asterisk -rx) exit 0 even when nothing was written
        if not target.exists() or target.stat().st_size == 0:
            raise ConversionError(f"No output written to {target}")

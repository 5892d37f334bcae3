"""Generation orchestrator for voicegen.

Fans out over every manifest item, reuses artifacts whose fingerprint is
still valid in the cache store, and sends everything else through the
rate-limited scheduler to the synthesis provider.
"""

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from ..audio import save_audio_async, write_audit_tags_async
from ..cache import CacheStore
from ..conversion import ConversionEngine, GeneratedArtifact
from ..fingerprint import fingerprint
from ..manifest import ManifestItem
from ..providers.base import TTSProvider
from ..scheduler import RateLimitedScheduler
from .models import ItemOutcome, ItemStatus

logger = logging.getLogger(__name__)

# A single <tag> or [tag] token, e.g. "<silence>" or "[beep]"
_TAG_TOKEN = re.compile(r"<[^<>]*>|\[[^\[\]]*\]")


def should_skip(item: ManifestItem) -> bool:
    """Return True for items that need no synthesis.

    Items without a file name or speech text are skipped, as are items
    whose text consists only of bracket/tag notation with no literal words.
    """
    if not item.file_name or not item.speech_text:
        return True

    text = item.speech_text.strip()
    if not text:
        return True

    # Strip repeatedly so nested tags like "<<silence>>" vanish entirely
    stripped = _TAG_TOKEN.sub("", text)
    while stripped != text:
        text, stripped = stripped, _TAG_TOKEN.sub("", stripped)
    return not stripped.strip()


class GenerationOrchestrator:
    """Turns manifest items into artifacts, regenerating only what changed.

    Every item is dispatched concurrently; the scheduler is the only bound
    on external calls. Each item resolves to an ItemOutcome, so one failing
    item never aborts the batch.

    Example:
        orchestrator = GenerationOrchestrator(
            provider=provider,
            scheduler=RateLimitedScheduler(max_requests_per_second=2),
            cache_store=store,
            output_root=Path("generatedFiles"),
            voice="Camila",
            language="pt-BR",
            converter=ConversionEngine(),
            formats=("alaw", "ulaw"),
        )
        outcomes = await orchestrator.run(items)
    """

    def __init__(
        self,
        provider: TTSProvider,
        scheduler: RateLimitedScheduler,
        cache_store: CacheStore,
        output_root: Path,
        voice: str,
        language: str,
        converter: ConversionEngine | None = None,
        formats: Sequence[str] = (),
        embed_metadata: bool = True,
    ) -> None:
        self.provider = provider
        self.scheduler = scheduler
        self.cache_store = cache_store
        self.output_root = Path(output_root)
        self.voice = voice
        self.language = language
        self.converter = converter
        self.formats = tuple(formats)
        self.embed_metadata = embed_metadata

        logger.debug(
            f"GenerationOrchestrator initialized with provider={provider.name}, "
            f"voice={voice}, language={language}, formats={list(self.formats)}"
        )

    def artifact_for(self, item: ManifestItem) -> GeneratedArtifact:
        """Primary and base output paths for an item."""
        base_path = self.output_root / item.relative_path
        primary_path = base_path.with_name(
            f"{base_path.name}.{self.provider.file_extension}"
        )
        return GeneratedArtifact(primary_path=primary_path, base_path=base_path)

    async def run(self, items: Iterable[ManifestItem]) -> list[ItemOutcome]:
        """Process all items concurrently.

        When several items share a relative path, the last one wins and the
        earlier ones are reported as skipped.
        """
        latest: dict[str, int] = {}
        items = list(items)
        for index, item in enumerate(items):
            if item.file_name and item.relative_path in latest:
                logger.warning(
                    f"Duplicate manifest entry for {item.relative_path}; "
                    "the later entry replaces the earlier one"
                )
            latest[item.relative_path] = index

        async def _dispatch(index: int, item: ManifestItem) -> ItemOutcome:
            if latest[item.relative_path] != index:
                return ItemOutcome(key=item.relative_path, status=ItemStatus.SKIPPED)
            return await self.process_item(item)

        return list(
            await asyncio.gather(
                *(_dispatch(index, item) for index, item in enumerate(items))
            )
        )

    async def process_item(self, item: ManifestItem) -> ItemOutcome:
        """Process one manifest item to a final outcome. Never raises."""
        key = item.relative_path

        if should_skip(item):
            logger.debug(f"Skipping {key or '<unnamed>'} - nothing to synthesize")
            return ItemOutcome(key=key, status=ItemStatus.SKIPPED)

        item_fingerprint = fingerprint(self.voice, self.language, item.speech_text)
        artifact = self.artifact_for(item)

        # === CACHE LOOKUP PHASE ===
        if await self.cache_store.is_valid(
            key, item_fingerprint, artifact.primary_path
        ):
            logger.info(f"Skipping {key} - no changes detected")
            return ItemOutcome(
                key=key, status=ItemStatus.CACHED, fingerprint=item_fingerprint
            )

        # === SYNTHESIS PHASE ===
        logger.info(f"Processing: {key}")
        try:
            audio_data = await self.scheduler.submit(
                self.provider.synthesize,
                item.speech_text,
                self.voice,
                self.language,
                label=key,
            )
            await save_audio_async(audio_data, artifact.primary_path)
        except Exception as e:
            logger.error(f"Audio generation failed for {key}: {e}")
            return ItemOutcome(
                key=key,
                status=ItemStatus.FAILED,
                fingerprint=item_fingerprint,
                error=str(e),
            )

        # === DERIVED OUTPUT PHASE ===
        try:
            if self.embed_metadata and artifact.primary_path.suffix == ".mp3":
                await write_audit_tags_async(
                    artifact.primary_path,
                    key,
                    item_fingerprint,
                    datetime.now(timezone.utc).isoformat(),
                )

            conversions = ()
            if self.converter is not None and self.formats:
                conversions = tuple(
                    await self.converter.convert(artifact, self.formats)
                )

            await self.cache_store.update(key, item_fingerprint)
        except Exception as e:
            # No cache entry recorded; the item regenerates on the next run
            logger.error(f"Post-processing failed for {key}: {e}")
            return ItemOutcome(
                key=key,
                status=ItemStatus.FAILED,
                fingerprint=item_fingerprint,
                error=str(e),
            )

        logger.info(f"File processed: {key}")

        return ItemOutcome(
            key=key,
            status=ItemStatus.GENERATED,
            fingerprint=item_fingerprint,
            artifact=artifact,
            conversions=conversions,
        )

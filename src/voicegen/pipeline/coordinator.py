"""Batch coordination: aggregate outcomes and persist the cache once."""

import logging
from collections.abc import Iterable

from ..cache import CacheStore
from ..manifest import ManifestItem
from .models import BatchReport, ItemStatus
from .orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)


class BatchCoordinator:
    """Runs one batch and decides what happens after it.

    The cache store is flushed exactly once, after every item and every
    derived-format conversion has finished. The returned report tells the
    caller whether downstream packaging should run.
    """

    def __init__(
        self, orchestrator: GenerationOrchestrator, cache_store: CacheStore
    ) -> None:
        self.orchestrator = orchestrator
        self.cache_store = cache_store

    async def run(self, items: Iterable[ManifestItem]) -> BatchReport:
        """Generate, convert, persist the cache and summarize.

        Returns:
            Aggregated BatchReport with one outcome per item
        """
        outcomes = await self.orchestrator.run(items)

        for outcome in outcomes:
            if outcome.status is ItemStatus.GENERATED and outcome.failed_formats:
                logger.warning(
                    f"{outcome.key} generated without formats: "
                    f"{', '.join(outcome.failed_formats)}"
                )

        cache_saved = await self.cache_store.flush_if_dirty()

        report = BatchReport.from_outcomes(outcomes, cache_saved=cache_saved)
        logger.info(f"Batch complete - {report.summary()}")

        if report.should_package:
            logger.info(f"{report.generated} new artifacts; packaging required")
        else:
            logger.info("No file changes detected; packaging not required")

        return report

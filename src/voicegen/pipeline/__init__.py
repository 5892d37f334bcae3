"""Incremental generation pipeline for voicegen."""

from .coordinator import BatchCoordinator
from .models import BatchReport, ItemOutcome, ItemStatus
from .orchestrator import GenerationOrchestrator, should_skip

__all__ = [
    "BatchCoordinator",
    "BatchReport",
    "GenerationOrchestrator",
    "ItemOutcome",
    "ItemStatus",
    "should_skip",
]

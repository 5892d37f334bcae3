"""Per-item and per-batch outcome models."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from ..conversion.models import FormatOutcome, GeneratedArtifact


class ItemStatus(str, Enum):
    """What happened to one manifest item during a run."""

    GENERATED = "generated"
    CACHED = "cached"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemOutcome:
    """Inspectable result of processing one manifest item.

    Attributes:
        key: Item relative path
        status: Final item status
        fingerprint: Content fingerprint (None for skipped items)
        artifact: Generated artifact, only for GENERATED items
        conversions: Derived-format outcomes, only for GENERATED items
        error: Failure description, only for FAILED items
    """

    key: str
    status: ItemStatus
    fingerprint: str | None = None
    artifact: GeneratedArtifact | None = None
    conversions: tuple[FormatOutcome, ...] = ()
    error: str | None = None

    @property
    def failed_formats(self) -> list[str]:
        return [c.fmt for c in self.conversions if not c.ok]


@dataclass
class BatchReport:
    """Aggregated outcome of one run."""

    total: int = 0
    generated: int = 0
    cached: int = 0
    skipped: int = 0
    failed: int = 0
    conversions_ok: int = 0
    conversions_failed: int = 0
    cache_saved: bool = False
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(
        cls, outcomes: list[ItemOutcome], cache_saved: bool = False
    ) -> "BatchReport":
        counts = Counter(outcome.status for outcome in outcomes)
        conversions = [c for outcome in outcomes for c in outcome.conversions]
        return cls(
            total=len(outcomes),
            generated=counts[ItemStatus.GENERATED],
            cached=counts[ItemStatus.CACHED],
            skipped=counts[ItemStatus.SKIPPED],
            failed=counts[ItemStatus.FAILED],
            conversions_ok=sum(1 for c in conversions if c.ok),
            conversions_failed=sum(1 for c in conversions if not c.ok),
            cache_saved=cache_saved,
            outcomes=list(outcomes),
        )

    @property
    def should_package(self) -> bool:
        """Packaging runs only when this run produced new artifacts."""
        return self.generated > 0

    def summary(self) -> str:
        return (
            f"{self.total} items: {self.generated} generated, {self.cached} cached, "
            f"{self.skipped} skipped, {self.failed} failed; "
            f"conversions {self.conversions_ok} ok, {self.conversions_failed} failed"
        )

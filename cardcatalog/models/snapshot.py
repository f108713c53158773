"""
Snapshot and refresh result models.

A snapshot is the last-known-good card list per dataset variant. Fetch and
resolve results are ephemeral values passed between the orchestrators and
the API layer; they are never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum

from cardcatalog.models.card import Card, DatasetVariant


class Freshness(str, Enum):
    """How a returned card list relates to the external catalog."""

    FRESH = "fresh"  # fetched and persisted during this call
    CACHED = "cached"  # served from the snapshot, no refresh requested
    STALE = "stale"  # served from the snapshot after a refresh did not succeed
    UNAVAILABLE = "unavailable"  # nothing to serve


@dataclass(frozen=True)
class SnapshotDataset:
    """Cards persisted for one variant, with the epoch-millisecond write time."""

    updated_at: int = 0
    cards: list[Card] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """
    Persisted catalog state.

    Always holds an entry for every DatasetVariant; variants that were never
    written have updated_at == 0 and no cards.
    """

    updated_at: int
    datasets: dict[DatasetVariant, SnapshotDataset]

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls(
            updated_at=0,
            datasets={variant: SnapshotDataset() for variant in DatasetVariant},
        )

    def dataset(self, variant: DatasetVariant) -> SnapshotDataset:
        return self.datasets.get(variant, SnapshotDataset())


@dataclass
class FetchAttemptResult:
    """
    Outcome of walking a source registry.

    Attributes:
        cards: Deduplicated cards from the first source that yielded any
        source: URL of that source, or None if every source failed
        errors: One "<source>: <reason>" entry per failed source, in order
    """

    cards: list[Card] = field(default_factory=list)
    source: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class ResolveResult:
    """Cards handed back to a caller together with their freshness."""

    cards: list[Card]
    freshness: Freshness
    updated_at: int
    errors: list[str] = field(default_factory=list)
    source: str | None = None

    @property
    def is_available(self) -> bool:
        return self.freshness != Freshness.UNAVAILABLE

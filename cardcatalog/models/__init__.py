from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.models.failure import (
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    SnapshotUnavailableError,
)
from cardcatalog.models.snapshot import (
    FetchAttemptResult,
    Freshness,
    ResolveResult,
    Snapshot,
    SnapshotDataset,
)

__all__ = [
    "ApiResponse",
    "Card",
    "DatasetVariant",
    "FailureDetail",
    "FailureKind",
    "FetchAttemptResult",
    "Freshness",
    "KnownError",
    "OutcomeType",
    "ResolveResult",
    "Snapshot",
    "SnapshotDataset",
    "SnapshotUnavailableError",
]

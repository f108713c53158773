"""
Refresh orchestrator.

Decides whether to serve the snapshot or go to the external catalog, and
persists successful refreshes. The failure cascade is:

    fresh -> stale-but-served -> empty-with-errors

so a transient catalog outage never blanks a search experience that was
already working.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from cardcatalog.db.snapshot_store import SnapshotStore
from cardcatalog.models.card import DatasetVariant
from cardcatalog.models.snapshot import (
    FetchAttemptResult,
    Freshness,
    ResolveResult,
    SnapshotDataset,
)
from cardcatalog.services.fetcher import fetch_cards_from_sources

logger = logging.getLogger(__name__)

REMOTE_FETCH_DISABLED = "remote fetch disabled"

FetchFn = Callable[[DatasetVariant], Awaitable[FetchAttemptResult]]


@dataclass
class RefreshOutcome:
    """A fetch attempt and, when it yielded cards, the dataset it persisted."""

    attempt: FetchAttemptResult
    dataset: SnapshotDataset | None = None

    @property
    def succeeded(self) -> bool:
        return self.dataset is not None


async def refresh_snapshot(
    variant: DatasetVariant,
    store: SnapshotStore,
    fetch: FetchFn = fetch_cards_from_sources,
) -> RefreshOutcome:
    """
    Fetch a variant from its sources and persist the result if non-empty.

    An attempt that yields no cards leaves the stored snapshot untouched.

    Raises:
        SQLAlchemyError: If persisting the fetched cards fails
    """
    attempt = await fetch(variant)
    if not attempt.cards:
        logger.warning(
            "snapshot_refresh_failed",
            extra={"variant": variant.value, "errors": attempt.errors},
        )
        return RefreshOutcome(attempt=attempt)

    dataset = await store.write(variant, attempt.cards)
    return RefreshOutcome(attempt=attempt, dataset=dataset)


def _serve_snapshot(
    dataset: SnapshotDataset,
    freshness: Freshness,
    errors: list[str],
) -> ResolveResult:
    if not dataset.cards:
        freshness = Freshness.UNAVAILABLE
    return ResolveResult(
        cards=list(dataset.cards),
        freshness=freshness,
        updated_at=dataset.updated_at,
        errors=list(errors),
    )


async def resolve(
    variant: DatasetVariant,
    force_refresh: bool,
    remote_allowed: bool,
    store: SnapshotStore,
    fetch: FetchFn = fetch_cards_from_sources,
) -> ResolveResult:
    """
    Return the cards a caller should see for a variant.

    Args:
        variant: Dataset variant to resolve
        force_refresh: Attempt a remote refresh before answering
        remote_allowed: Whether remote fetches are permitted at all
        store: Snapshot store holding the last-known-good cards
        fetch: Fetch orchestrator (injectable for tests)

    Returns:
        ResolveResult classified as:
        - CACHED: snapshot served, no refresh requested
        - FRESH: refresh succeeded and was persisted
        - STALE: refresh requested but not performed or failed; prior cards served
        - UNAVAILABLE: no cards to serve; errors explain why

    Raises:
        SQLAlchemyError: If a successful refresh cannot be persisted
    """
    if not force_refresh:
        dataset = await store.read_dataset(variant)
        return _serve_snapshot(dataset, Freshness.CACHED, [])

    if not remote_allowed:
        dataset = await store.read_dataset(variant)
        return _serve_snapshot(dataset, Freshness.STALE, [REMOTE_FETCH_DISABLED])

    outcome = await refresh_snapshot(variant, store, fetch)
    if outcome.dataset is not None:
        return ResolveResult(
            cards=list(outcome.dataset.cards),
            freshness=Freshness.FRESH,
            updated_at=outcome.dataset.updated_at,
            errors=list(outcome.attempt.errors),
            source=outcome.attempt.source,
        )

    dataset = await store.read_dataset(variant)
    result = _serve_snapshot(dataset, Freshness.STALE, outcome.attempt.errors)
    if result.freshness == Freshness.STALE:
        logger.info(
            "Serving stale %s snapshot (%d cards, updatedAt=%d)",
            variant.value,
            len(result.cards),
            result.updated_at,
        )
    return result

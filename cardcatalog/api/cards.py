"""
Card API endpoints.

Provides browsing, refreshing and searching of the catalog snapshot.
"""

import asyncio
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from cardcatalog.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, settings
from cardcatalog.db.database import get_snapshot_store
from cardcatalog.db.snapshot_store import SnapshotStore, now_ms
from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.models.failure import FailureKind, KnownError
from cardcatalog.models.snapshot import Freshness
from cardcatalog.services.catalog import (
    SearchMode,
    list_cards,
    search_cards,
    unavailable_error,
)
from cardcatalog.services.refresh import refresh_snapshot

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """Response model for a single card."""

    id: str
    name: str
    image_url: str
    set_number: str | None = None
    info: str | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            image_url=card.image_url,
            set_number=card.set_number,
            info=card.info,
        )


class CardListResponse(BaseModel):
    """Response model for a variant's card list."""

    variant: DatasetVariant
    cards: list[CardResponse]
    count: int
    freshness: Freshness = Field(
        ...,
        description="fresh (just fetched), cached (snapshot), or stale (refresh failed)",
    )
    updated_at: int = Field(..., description="Snapshot write time in epoch milliseconds")
    source: str | None = None
    errors: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Response model for one page of search results."""

    variant: DatasetVariant
    query: str
    page: int
    page_size: int
    total: int
    updated_at: int
    freshness: Freshness
    cards: list[CardResponse]


class VariantRefreshResult(BaseModel):
    """Outcome of refreshing a single variant."""

    count: int
    source: str | None = None
    errors: list[str] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    """Response model for a scheduled refresh."""

    refreshed_at: int
    snapshot_updated_at: int
    datasets: dict[DatasetVariant, int] = Field(
        default_factory=dict,
        description="Per-variant snapshot write time after the refresh",
    )
    results: dict[DatasetVariant, VariantRefreshResult] = Field(default_factory=dict)


@router.get("", response_model=CardListResponse)
async def get_cards(
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
    variant: DatasetVariant = DatasetVariant.BASE,
    refresh: bool = False,
) -> CardListResponse:
    """
    Get a variant's cards.

    Serves the snapshot unless refresh is requested. A failed refresh
    falls back to the previous snapshot (freshness "stale"). Returns 503
    when there is no snapshot, or 502 when a refresh failed with nothing
    to fall back on.
    """
    remote_allowed = settings.remote_allowed
    listing = await list_cards(variant, refresh, remote_allowed, store)

    if listing.freshness == Freshness.UNAVAILABLE:
        raise unavailable_error(listing, refresh, remote_allowed)

    return CardListResponse(
        variant=variant,
        cards=[CardResponse.from_card(card) for card in listing.cards],
        count=len(listing.cards),
        freshness=listing.freshness,
        updated_at=listing.updated_at,
        source=listing.source,
        errors=listing.errors,
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
    variant: DatasetVariant = DatasetVariant.BASE,
    q: str = "",
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    refresh: bool = False,
    mode: SearchMode = "ranked",
) -> SearchResponse:
    """
    Search a variant's cards by name.

    Ranked mode orders by match quality (exact, prefix, substring, fuzzy)
    and caps results; substring mode keeps ingestion order.
    """
    result = await search_cards(
        variant,
        q,
        page,
        page_size,
        refresh,
        store,
        mode=mode,
        remote_allowed=settings.remote_allowed,
    )

    return SearchResponse(
        variant=variant,
        query=result.query,
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        updated_at=result.updated_at,
        freshness=result.freshness,
        cards=[CardResponse.from_card(card) for card in result.cards],
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_datasets(
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
    base: bool = True,
    all: bool = True,  # noqa: A002
    secret: str | None = None,
) -> RefreshResponse:
    """
    Refresh snapshots from the external catalog (for schedulers).

    Requires the configured cron secret when one is set. Variants are
    refreshed concurrently; each keeps its previous snapshot on failure.
    """
    if settings.cron_secret and not secrets.compare_digest(secret or "", settings.cron_secret):
        raise KnownError(
            kind=FailureKind.UNAUTHORIZED,
            message="Unauthorized",
            suggestion="Pass the configured refresh secret.",
            status_code=401,
        )

    variants = [
        variant
        for variant, wanted in ((DatasetVariant.BASE, base), (DatasetVariant.ALL, all))
        if wanted
    ]
    outcomes = await asyncio.gather(*(refresh_snapshot(variant, store) for variant in variants))

    snapshot = await store.read()
    return RefreshResponse(
        refreshed_at=now_ms(),
        snapshot_updated_at=snapshot.updated_at,
        datasets={variant: snapshot.dataset(variant).updated_at for variant in DatasetVariant},
        results={
            variant: VariantRefreshResult(
                count=len(outcome.attempt.cards),
                source=outcome.attempt.source,
                errors=outcome.attempt.errors,
            )
            for variant, outcome in zip(variants, outcomes, strict=True)
        },
    )

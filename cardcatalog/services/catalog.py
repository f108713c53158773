"""
Catalog boundary operations.

The two entry points the surrounding application uses: browsing/refreshing
a variant's card list, and paginated search over it.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal

from cardcatalog.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cardcatalog.db.snapshot_store import SnapshotStore
from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.models.failure import SnapshotUnavailableError
from cardcatalog.models.snapshot import Freshness, ResolveResult
from cardcatalog.services.fetcher import fetch_cards_from_sources
from cardcatalog.services.refresh import FetchFn, resolve
from cardcatalog.services.search import filter_cards_by_substring, normalize_text, rank_cards

logger = logging.getLogger(__name__)

SearchMode = Literal["ranked", "substring"]


@dataclass
class CardListing:
    """A variant's cards with freshness and the errors met while refreshing."""

    cards: list[Card]
    freshness: Freshness
    updated_at: int
    errors: list[str] = field(default_factory=list)
    source: str | None = None


@dataclass
class SearchPage:
    """One page of search results."""

    query: str
    page: int
    page_size: int
    total: int
    updated_at: int
    freshness: Freshness
    cards: list[Card]


def unavailable_error(
    result: ResolveResult | CardListing,
    force_refresh: bool,
    remote_allowed: bool,
) -> SnapshotUnavailableError:
    """Explain why a variant has nothing to serve."""
    if not force_refresh:
        return SnapshotUnavailableError(
            "Card snapshot not available. Run the ingestion job to build the local index.",
            errors=result.errors,
        )
    if not remote_allowed:
        return SnapshotUnavailableError(
            "Remote fetch disabled. Run the ingestion job to build the local index.",
            errors=result.errors,
        )
    return SnapshotUnavailableError(
        "Unable to fetch card data.",
        errors=result.errors,
        status_code=502,
    )


async def list_cards(
    variant: DatasetVariant,
    force_refresh: bool,
    remote_allowed: bool,
    store: SnapshotStore,
    fetch: FetchFn = fetch_cards_from_sources,
) -> CardListing:
    """
    List a variant's cards, optionally refreshing from the catalog first.

    A listing classified UNAVAILABLE carries no cards; callers decide how
    to surface it (see unavailable_error()).
    """
    result = await resolve(variant, force_refresh, remote_allowed, store, fetch)
    return CardListing(
        cards=result.cards,
        freshness=result.freshness,
        updated_at=result.updated_at,
        errors=result.errors,
        source=result.source,
    )


def _clamp(value: int, minimum: int, maximum: int) -> int:
    return min(max(value, minimum), maximum)


async def search_cards(
    variant: DatasetVariant,
    query: str,
    page: int,
    page_size: int,
    force_refresh: bool,
    store: SnapshotStore,
    mode: SearchMode = "ranked",
    remote_allowed: bool = False,
    fetch: FetchFn = fetch_cards_from_sources,
) -> SearchPage:
    """
    Search a variant's cards and return one page of results.

    Args:
        variant: Dataset variant to search
        query: Raw search text; empty pages through every card in ingestion order
        page: 1-based page number (values below 1 are treated as 1)
        page_size: Cards per page, clamped to [1, MAX_PAGE_SIZE]
        force_refresh: Refresh the variant before searching
        store: Snapshot store
        mode: "ranked" scores and caps results; "substring" filters names
        remote_allowed: Whether a forced refresh may reach the catalog
        fetch: Fetch orchestrator (injectable for tests)

    Returns:
        SearchPage whose total counts all matches, not just this page

    Raises:
        SnapshotUnavailableError: If there are no cards to search
    """
    page = max(1, page)
    page_size = _clamp(page_size or DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)

    result = await resolve(variant, force_refresh, remote_allowed, store, fetch)
    if not result.is_available:
        raise unavailable_error(result, force_refresh, remote_allowed)

    if not normalize_text(query):
        matches = result.cards
    elif mode == "substring":
        matches = filter_cards_by_substring(result.cards, query)
    else:
        matches = rank_cards(result.cards, query)

    start = (page - 1) * page_size
    logger.debug(
        "Search %r on %s (%s): %d matches",
        query,
        variant.value,
        mode,
        len(matches),
    )

    return SearchPage(
        query=query.strip(),
        page=page,
        page_size=page_size,
        total=len(matches),
        updated_at=result.updated_at,
        freshness=result.freshness,
        cards=matches[start : start + page_size],
    )

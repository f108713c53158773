"""
CardCatalog services.

Business logic for catalog ingestion, snapshot refresh and card search.
"""

from cardcatalog.services.catalog import (
    CardListing,
    SearchMode,
    SearchPage,
    list_cards,
    search_cards,
    unavailable_error,
)
from cardcatalog.services.dedupe import card_identity, dedupe_cards
from cardcatalog.services.fetcher import (
    ExtractionEmptyError,
    SourceFetchError,
    TransportError,
    fetch_cards_from_sources,
    fetch_source,
)
from cardcatalog.services.refresh import (
    REMOTE_FETCH_DISABLED,
    RefreshOutcome,
    refresh_snapshot,
    resolve,
)
from cardcatalog.services.search import (
    filter_cards_by_substring,
    rank_cards,
    score_card,
    score_name,
)
from cardcatalog.services.sources import CARD_SOURCES, SourceDescriptor, get_sources

__all__ = [
    "CARD_SOURCES",
    "REMOTE_FETCH_DISABLED",
    "CardListing",
    "ExtractionEmptyError",
    "RefreshOutcome",
    "SearchMode",
    "SearchPage",
    "SourceDescriptor",
    "SourceFetchError",
    "TransportError",
    "card_identity",
    "dedupe_cards",
    "fetch_cards_from_sources",
    "fetch_source",
    "filter_cards_by_substring",
    "get_sources",
    "list_cards",
    "rank_cards",
    "refresh_snapshot",
    "resolve",
    "score_card",
    "score_name",
    "search_cards",
    "unavailable_error",
]

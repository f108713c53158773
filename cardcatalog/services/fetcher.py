"""
Fetch orchestrator.

Walks a variant's source registry strictly in order and returns the cards
of the first source that yields any. Partial yields are never merged
across sources: different source generations must not be interleaved.

Every failed source is recorded as "<url>: <reason>" and the walk moves
on. Exhausting the registry is not an exception; the caller receives an
empty card list with the ordered error list and decides what to serve.
"""

import logging
from collections.abc import Sequence

import httpx

from cardcatalog.config import settings
from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.models.snapshot import FetchAttemptResult
from cardcatalog.parsers.html_state import decode_html_payload
from cardcatalog.parsers.payload import extract_cards
from cardcatalog.services.dedupe import dedupe_cards
from cardcatalog.services.sources import SourceDescriptor, get_sources

logger = logging.getLogger(__name__)


class SourceFetchError(Exception):
    """Raised when a single source attempt does not produce usable cards."""

    pass


class TransportError(SourceFetchError):
    """Network failure, timeout, non-success status or undecodable body."""

    pass


class ExtractionEmptyError(SourceFetchError):
    """The payload was received and parsed but contained no cards."""

    pass


def _describe_status(response: httpx.Response) -> str:
    reason = response.reason_phrase
    return f"status {response.status_code}{f' {reason}' if reason else ''}"


async def fetch_source(client: httpx.AsyncClient, source: SourceDescriptor) -> list[Card]:
    """
    Fetch one source and extract its cards.

    Args:
        client: HTTP client; its timeout bounds the request
        source: Endpoint and expected encoding

    Returns:
        Non-empty list of cards (not yet deduplicated)

    Raises:
        TransportError: If the request fails or the body cannot be decoded
        ExtractionEmptyError: If the payload contains no cards
    """
    try:
        response = await client.get(source.url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TransportError(
            f"Failed to fetch {source.url} ({_describe_status(e.response)})"
        ) from e
    except httpx.RequestError as e:
        # Timeouts are RequestErrors too: an ordinary per-source failure
        raise TransportError(f"Failed to fetch {source.url} ({type(e).__name__}: {e})") from e

    if source.encoding == "html":
        payload = decode_html_payload(response.text)
    else:
        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {source.url}: {e}") from e

    cards = extract_cards(payload) if payload is not None else []
    if not cards:
        raise ExtractionEmptyError(f"No cards found in payload from {source.url}")

    return cards


def build_client() -> httpx.AsyncClient:
    """HTTP client shared by every catalog source request."""
    return httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
        timeout=settings.http_timeout_seconds,
    )


async def _walk_sources(
    client: httpx.AsyncClient,
    sources: Sequence[SourceDescriptor],
) -> FetchAttemptResult:
    errors: list[str] = []

    for source in sources:
        try:
            cards = await fetch_source(client, source)
        except SourceFetchError as e:
            logger.warning("Catalog source failed: %s: %s", source.url, e)
            errors.append(f"{source.url}: {e}")
            continue

        unique = dedupe_cards(cards)
        logger.info(
            "Fetched %d cards from %s (%d duplicates dropped)",
            len(unique),
            source.url,
            len(cards) - len(unique),
        )
        return FetchAttemptResult(cards=unique, source=source.url, errors=errors)

    logger.error(
        "catalog_sources_exhausted",
        extra={"sources": [source.url for source in sources], "errors": errors},
    )
    return FetchAttemptResult(cards=[], source=None, errors=errors)


async def fetch_cards_from_sources(
    variant: DatasetVariant,
    client: httpx.AsyncClient | None = None,
    sources: Sequence[SourceDescriptor] | None = None,
) -> FetchAttemptResult:
    """
    Fetch cards for a variant, trying each registered source in order.

    Args:
        variant: Dataset variant whose registry is walked
        client: Optional httpx client for connection reuse
        sources: Override the registry (defaults to get_sources(variant))

    Returns:
        FetchAttemptResult with deduplicated cards from the first usable
        source, or no cards and one error per source if all failed
    """
    if sources is None:
        sources = get_sources(variant)

    if client is not None:
        return await _walk_sources(client, sources)

    async with build_client() as own_client:
        return await _walk_sources(own_client, sources)

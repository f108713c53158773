"""
Card search ranking.

Scores card names against a query with a fixed, explainable tier system:

- Exact match:        1000
- Prefix match:       800 + up to 50 for names close to the query length
- Substring match:    500 - position of the first occurrence
- Subsequence (fuzzy) 200 + coverage ratio bonus - skipped characters

Tiers never overlap: substring scores are floored above the fuzzy ceiling,
and fuzzy scores are clamped between 1 and that ceiling, so an exact match
always outranks a prefix match, which outranks a substring match, which
outranks a fuzzy match, whatever the name lengths. Cards scoring 0 are
excluded. Ties break on name, ascending.

Example:
    Cards "Aeon Knight", "Aeon" and "Knight of Aeon" searched with "aeon"
    rank as "Aeon" (exact), "Aeon Knight" (prefix), "Knight of Aeon"
    (substring).
"""

import math
from collections.abc import Sequence

from cardcatalog.config import MAX_RESULTS
from cardcatalog.models.card import Card

EXACT_SCORE = 1000
PREFIX_SCORE = 800
PREFIX_LENGTH_BONUS = 50
SUBSTRING_SCORE = 500
FUZZY_SCORE = 200
FUZZY_RATIO_WEIGHT = 100

# Tier boundaries
FUZZY_CEILING = 299
SUBSTRING_FLOOR = FUZZY_CEILING + 1


def normalize_text(value: str) -> str:
    """Trim and case-fold for comparison."""
    return value.strip().casefold()


def _fuzzy_score(name: str, query: str) -> int:
    matched = 0
    gaps = 0
    for char in name:
        if matched == len(query):
            break
        if char == query[matched]:
            matched += 1
        else:
            gaps += 1

    if matched < len(query):
        return 0

    # Round half up so scores do not depend on banker's rounding
    ratio_bonus = math.floor(FUZZY_RATIO_WEIGHT * len(query) / len(name) + 0.5)
    return min(FUZZY_CEILING, max(1, FUZZY_SCORE + ratio_bonus - gaps))


def score_name(name: str, query: str) -> int:
    """
    Score a normalized name against a normalized query.

    Both arguments must already be passed through normalize_text().

    Returns:
        Score > 0 for a match, 0 for no match
    """
    if not query or not name:
        return 0

    if name == query:
        return EXACT_SCORE

    if name.startswith(query):
        return PREFIX_SCORE + max(0, PREFIX_LENGTH_BONUS - (len(name) - len(query)))

    index = name.find(query)
    if index >= 0:
        return max(SUBSTRING_FLOOR, SUBSTRING_SCORE - index)

    return _fuzzy_score(name, query)


def score_card(card: Card, query: str) -> int:
    """Score a card's name against a raw (unnormalized) query."""
    return score_name(normalize_text(card.name), normalize_text(query))


def rank_cards(
    cards: Sequence[Card],
    query: str,
    limit: int | None = MAX_RESULTS,
) -> list[Card]:
    """
    Rank cards against a query.

    Pure and deterministic: the same cards and query always yield the same
    ordered output. The card list is only read.

    Args:
        cards: Candidate cards in ingestion order
        query: Raw search text
        limit: Maximum results (None for no cap)

    Returns:
        Matching cards ordered by score (descending), then case-folded name. An empty
        query returns the first `limit` cards in ingestion order.
    """
    normalized_query = normalize_text(query)
    if not normalized_query:
        return list(cards[:limit])

    scored: list[tuple[int, Card]] = []
    for card in cards:
        score = score_name(normalize_text(card.name), normalized_query)
        if score > 0:
            scored.append((score, card))

    # sort() is stable, so equal score and name keep ingestion order
    scored.sort(key=lambda item: (-item[0], normalize_text(item[1].name)))
    return [card for _, card in scored[:limit]]


def filter_cards_by_substring(cards: Sequence[Card], query: str) -> list[Card]:
    """
    Simple server-side mode: keep cards whose name contains the query.

    Ingestion order is preserved and no cap is applied.
    """
    normalized_query = normalize_text(query)
    if not normalized_query:
        return list(cards)
    return [card for card in cards if normalized_query in normalize_text(card.name)]

"""
Catalog payload extractor.

Turns an arbitrary JSON value from an external catalog into canonical
Card records. Catalog endpoints have changed shape several times and
publish no schema, so extraction is a documented two-phase fallback chain:

1. Known-key phase: concatenate every list found under the conventional
   collection keys (cards, data, items, results) and build a card from each
   element. If this yields any cards, stop here.
2. Deep-traversal phase: visit every dict and list reachable from the
   payload (cycle-safe) and build a card from every dict encountered,
   at any depth. A card-shaped dict is still descended into, so nested
   card-shaped dicts are collected too.

Field resolution uses ordered alias lists; the first alias holding a
non-empty scalar wins.
"""

import logging
from typing import Any

from cardcatalog.models.card import Card

logger = logging.getLogger(__name__)

KNOWN_COLLECTION_KEYS = ("cards", "data", "items", "results")

# Alias priority per canonical field (first present, non-empty value wins)
ID_ALIASES = ("id", "slug", "uuid")
NAME_ALIASES = ("name", "cardName", "title")
IMAGE_URL_ALIASES = ("imageUrl", "image_url", "image", "img", "cardImage")
SET_NUMBER_ALIASES = ("setNumber", "set_number", "cardNumber", "number", "set")
INFO_ALIASES = ("info", "text", "description", "effect")


def _normalize_value(value: Any) -> str | None:
    """Render a scalar as a trimmed string; None for empty or non-scalar values."""
    # bool is an int subclass but never a meaningful field value
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
    elif isinstance(value, int | float):
        text = str(value)
    else:
        return None
    return text or None


def _first_alias(raw: dict[str, Any], aliases: tuple[str, ...]) -> str | None:
    for alias in aliases:
        value = _normalize_value(raw.get(alias))
        if value:
            return value
    return None


def build_card(raw: dict[str, Any], fallback_id: str) -> Card | None:
    """
    Build a Card from one raw record.

    Args:
        raw: A JSON object of unknown shape
        fallback_id: Positional token used for the derived id when the
            record has neither an id alias nor a set number

    Returns:
        The Card, or None if no name or image URL could be resolved
    """
    name = _first_alias(raw, NAME_ALIASES)
    image_url = _first_alias(raw, IMAGE_URL_ALIASES)
    if not name or not image_url:
        return None

    set_number = _first_alias(raw, SET_NUMBER_ALIASES)
    info = _first_alias(raw, INFO_ALIASES)
    card_id = _first_alias(raw, ID_ALIASES) or f"{name}-{set_number or fallback_id}"

    return Card(
        id=card_id,
        name=name,
        image_url=image_url,
        set_number=set_number,
        info=info,
    )


def collect_known_key_cards(payload: Any) -> list[Card]:
    """
    Known-key phase.

    Only applies when the payload is an object. Lists under every known key
    are concatenated in key order; the positional fallback id is the index
    in that concatenation.
    """
    if not isinstance(payload, dict):
        return []

    items: list[Any] = []
    for key in KNOWN_COLLECTION_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            items.extend(value)

    cards: list[Card] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        card = build_card(item, str(index))
        if card:
            cards.append(card)
    return cards


def deep_collect_cards(payload: Any) -> list[Card]:
    """
    Deep-traversal phase.

    Pre-order walk over every reachable dict and list. Containers are
    tracked by identity so shared or cyclic references are visited once.
    An explicit stack keeps arbitrarily deep payloads off the call stack.
    The positional fallback id is the number of cards found so far, which
    is stable for the same payload content.
    """
    cards: list[Card] = []
    visited: set[int] = set()
    stack: list[Any] = [payload]

    while stack:
        value = stack.pop()
        if not isinstance(value, dict | list):
            continue
        if id(value) in visited:
            continue
        visited.add(id(value))

        if isinstance(value, list):
            stack.extend(reversed(value))
            continue

        card = build_card(value, str(len(cards)))
        if card:
            cards.append(card)

        stack.extend(reversed(list(value.values())))

    return cards


def extract_cards(payload: Any) -> list[Card]:
    """
    Extract canonical cards from an arbitrary JSON value.

    Returns:
        Cards in payload order; empty when nothing card-shaped was found
    """
    cards = collect_known_key_cards(payload)
    if cards:
        logger.debug("Extracted %d cards via known collection keys", len(cards))
        return cards

    cards = deep_collect_cards(payload)
    logger.debug("Extracted %d cards via deep traversal", len(cards))
    return cards

"""Card deduplication."""

from collections.abc import Iterable

from cardcatalog.models.card import Card


def card_identity(card: Card) -> str:
    """Composite identity key: name, set number and image URL."""
    return f"{card.name}-{card.set_number or ''}-{card.image_url}"


def dedupe_cards(cards: Iterable[Card]) -> list[Card]:
    """
    Collapse cards sharing an identity key to their first occurrence.

    Order of surviving cards is preserved, so dedupe_cards is idempotent.
    """
    seen: set[str] = set()
    unique: list[Card] = []
    for card in cards:
        key = card_identity(card)
        if key in seen:
            continue
        seen.add(key)
        unique.append(card)
    return unique

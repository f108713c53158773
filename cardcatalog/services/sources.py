"""
Catalog source registry.

Each dataset variant has an ordered list of endpoints. They are different
generations of the same catalog and are tried in order until one yields
usable cards.
"""

from dataclasses import dataclass
from typing import Literal

from cardcatalog.models.card import DatasetVariant

CATALOG_BASE = "https://collect.elestrals.com"
MIRROR_BASE = "https://www.topelestrals.com"

SourceEncoding = Literal["json", "html"]


@dataclass(frozen=True)
class SourceDescriptor:
    """A remote endpoint and the encoding its body is expected in."""

    url: str
    encoding: SourceEncoding = "json"


CARD_SOURCES: dict[DatasetVariant, tuple[SourceDescriptor, ...]] = {
    DatasetVariant.BASE: (
        SourceDescriptor(f"{CATALOG_BASE}/api/cards?base_card=true"),
        SourceDescriptor(f"{CATALOG_BASE}/cards.json"),
        SourceDescriptor(f"{CATALOG_BASE}/api/cards"),
        SourceDescriptor(f"{MIRROR_BASE}/cards", encoding="html"),
    ),
    DatasetVariant.ALL: (
        SourceDescriptor(f"{CATALOG_BASE}/api/cards"),
        SourceDescriptor(f"{CATALOG_BASE}/cards.json"),
        SourceDescriptor(f"{MIRROR_BASE}/cards", encoding="html"),
    ),
}


def get_sources(variant: DatasetVariant) -> tuple[SourceDescriptor, ...]:
    """Return the ordered source list for a dataset variant."""
    return CARD_SOURCES[variant]

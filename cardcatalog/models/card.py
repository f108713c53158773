from dataclasses import dataclass
from enum import Enum
from typing import Any


class DatasetVariant(str, Enum):
    """The two independently cached views of the catalog."""

    BASE = "base"  # canonical/default prints only
    ALL = "all"  # includes variants and promos


@dataclass(frozen=True, slots=True)
class Card:
    """
    A canonical catalog card.

    Attributes:
        id: Stable identifier (from the source, or derived from name and set number)
        name: Card name as published by the catalog
        image_url: Absolute URL of the card image
        set_number: Collector/set number within the release, if known
        info: Rules or flavor text, if known
    """

    id: str
    name: str
    image_url: str
    set_number: str | None = None
    info: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Serialize using the catalog's wire field names."""
        data = {"id": self.id, "name": self.name, "imageUrl": self.image_url}
        if self.set_number is not None:
            data["setNumber"] = self.set_number
        if self.info is not None:
            data["info"] = self.info
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        """
        Rebuild a card previously produced by to_dict().

        Raises:
            ValueError: If a required field is missing or empty
        """
        name = data.get("name")
        image_url = data.get("imageUrl")
        if not isinstance(name, str) or not name or not isinstance(image_url, str) or not image_url:
            raise ValueError(f"Serialized card is missing name or imageUrl: {data!r}")

        return cls(
            id=str(data.get("id") or name),
            name=name,
            image_url=image_url,
            set_number=data.get("setNumber"),
            info=data.get("info"),
        )

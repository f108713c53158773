"""
Snapshot document import/export.

A snapshot document is the portable JSON form of the snapshot store:

    {
      "updatedAt": 1700000000000,
      "datasets": {
        "base": {"updatedAt": 1700000000000, "cards": [...]},
        "all":  {"updatedAt": 1690000000000, "cards": [...]}
      }
    }

Older deployments wrote a single list, {"updatedAt": ..., "cards": [...]},
which applies to both variants.
"""

import json
from pathlib import Path
from typing import Any

from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.models.snapshot import Snapshot, SnapshotDataset


class SnapshotFileError(ValueError):
    """Raised when a snapshot document cannot be interpreted."""

    pass


def _parse_timestamp(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return int(value)


def _parse_cards(value: Any) -> list[Card]:
    if not isinstance(value, list):
        return []
    try:
        return [Card.from_dict(item) for item in value]
    except (AttributeError, ValueError) as e:
        raise SnapshotFileError(f"Invalid card entry in snapshot document: {e}") from e


def parse_snapshot_document(payload: Any) -> Snapshot:
    """
    Build a Snapshot from a decoded snapshot document.

    Raises:
        SnapshotFileError: If the document is not an object or holds malformed cards
    """
    if not isinstance(payload, dict):
        raise SnapshotFileError("Snapshot document must be a JSON object")

    updated_at = _parse_timestamp(payload.get("updatedAt"))

    # Legacy single-list layout
    if isinstance(payload.get("cards"), list):
        cards = _parse_cards(payload["cards"])
        return Snapshot(
            updated_at=updated_at,
            datasets={
                variant: SnapshotDataset(updated_at=updated_at, cards=list(cards))
                for variant in DatasetVariant
            },
        )

    raw_datasets = payload.get("datasets")
    if not isinstance(raw_datasets, dict):
        raw_datasets = {}

    datasets: dict[DatasetVariant, SnapshotDataset] = {}
    for variant in DatasetVariant:
        entry = raw_datasets.get(variant.value)
        if not isinstance(entry, dict):
            datasets[variant] = SnapshotDataset()
            continue
        datasets[variant] = SnapshotDataset(
            updated_at=_parse_timestamp(entry.get("updatedAt")),
            cards=_parse_cards(entry.get("cards")),
        )

    return Snapshot(updated_at=updated_at, datasets=datasets)


def dump_snapshot_document(snapshot: Snapshot) -> dict[str, Any]:
    """Serialize a Snapshot to the document layout."""
    return {
        "updatedAt": snapshot.updated_at,
        "datasets": {
            variant.value: {
                "updatedAt": snapshot.dataset(variant).updated_at,
                "cards": [card.to_dict() for card in snapshot.dataset(variant).cards],
            }
            for variant in DatasetVariant
        },
    }


def load_snapshot_file(path: Path) -> Snapshot:
    """
    Read a snapshot document from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        SnapshotFileError: If the file is not a valid snapshot document
    """
    with open(path, encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except ValueError as e:
            raise SnapshotFileError(f"Snapshot file {path} is not valid JSON: {e}") from e

    return parse_snapshot_document(payload)


def save_snapshot_file(snapshot: Snapshot, path: Path) -> Path:
    """Write a snapshot document to disk, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump_snapshot_document(snapshot), f, indent=2)
        f.write("\n")
    return path

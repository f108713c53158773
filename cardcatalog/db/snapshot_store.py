"""
Snapshot store.

Durable last-known-good card lists, one row per dataset variant.

Reads never fail: a missing, unreadable or corrupt store is served as an
empty snapshot so callers can keep going. Writes propagate every error,
since a refresh that silently fails to persist would hide staleness.
"""

import asyncio
import logging
import time
from collections.abc import Sequence

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.models.db import CardSnapshotDB
from cardcatalog.models.snapshot import Snapshot, SnapshotDataset

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _row_to_dataset(row: CardSnapshotDB) -> SnapshotDataset:
    if not isinstance(row.cards, list):
        raise ValueError(f"cards column for {row.variant} is not a list")
    return SnapshotDataset(
        updated_at=int(row.updated_at or 0),
        cards=[Card.from_dict(item) for item in row.cards],
    )


class SnapshotStore:
    """
    Snapshot persistence over an async SQLAlchemy session factory.

    Writes to the same variant are serialized by a per-variant lock so
    concurrent refreshes never interleave their read-modify-write. Different
    variants touch different rows and may be written concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._locks = {variant: asyncio.Lock() for variant in DatasetVariant}

    async def read(self) -> Snapshot:
        """
        Read the full snapshot.

        Returns:
            Snapshot with an entry for every variant. Empty (updated_at == 0)
            if the store is absent, unreachable or corrupt.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(CardSnapshotDB))
                rows = list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Snapshot read failed, serving empty snapshot: %s", e)
            return Snapshot.empty()

        datasets = {variant: SnapshotDataset() for variant in DatasetVariant}
        try:
            for row in rows:
                try:
                    variant = DatasetVariant(row.variant)
                except ValueError:
                    logger.warning("Ignoring snapshot row for unknown variant %r", row.variant)
                    continue
                datasets[variant] = _row_to_dataset(row)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Snapshot is corrupt, serving empty snapshot: %s", e)
            return Snapshot.empty()

        updated_at = max(dataset.updated_at for dataset in datasets.values())
        return Snapshot(updated_at=updated_at, datasets=datasets)

    async def read_dataset(self, variant: DatasetVariant) -> SnapshotDataset:
        """Read the dataset entry for one variant."""
        snapshot = await self.read()
        return snapshot.dataset(variant)

    async def write(self, variant: DatasetVariant, cards: Sequence[Card]) -> SnapshotDataset:
        """
        Replace a variant's cards.

        The new updated_at is never earlier than the call and always later
        than the previous write of the same variant.

        Args:
            variant: Dataset variant to replace
            cards: Non-empty card list, stored in order

        Returns:
            The persisted dataset entry

        Raises:
            ValueError: If cards is empty (an empty refresh never clobbers a snapshot)
            SQLAlchemyError: If the write fails
        """
        if not cards:
            raise ValueError(f"Refusing to overwrite {variant.value} snapshot with no cards")

        payload = [card.to_dict() for card in cards]

        async with self._locks[variant]:
            async with self._session_factory() as session, session.begin():
                existing = await session.get(CardSnapshotDB, variant.value)
                previous = int(existing.updated_at or 0) if existing else 0
                updated_at = max(now_ms(), previous + 1)

                if existing:
                    existing.cards = payload
                    existing.updated_at = updated_at
                else:
                    session.add(
                        CardSnapshotDB(variant=variant.value, updated_at=updated_at, cards=payload)
                    )

        logger.info(
            "Wrote %d cards to %s snapshot (updatedAt=%d)", len(cards), variant.value, updated_at
        )
        return SnapshotDataset(updated_at=updated_at, cards=list(cards))

    async def ping(self) -> bool:
        """Check that the backing database answers queries."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            return False
        return True

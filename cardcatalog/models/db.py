"""
SQLAlchemy ORM models for persistent storage.

Models mirror the snapshot dataclasses but add database persistence.
"""

from typing import Any

from sqlalchemy import JSON, BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardSnapshotDB(Base):
    """
    Last-known-good card list for one dataset variant.

    One row per variant; a successful refresh replaces the row's cards
    wholesale in a single transaction.
    """

    __tablename__ = "card_snapshots"

    variant: Mapped[str] = mapped_column(String(16), primary_key=True)

    # Epoch milliseconds of the last successful write
    updated_at: Mapped[int] = mapped_column(BigInteger, default=0)

    # Serialized cards (Card.to_dict), stored as JSON in ingestion order
    cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<CardSnapshotDB(variant={self.variant}, cards={len(self.cards or [])})>"

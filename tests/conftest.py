from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardcatalog.db.snapshot_store import SnapshotStore
from cardcatalog.models.card import Card
from cardcatalog.models.db import Base


@pytest.fixture
async def async_engine(tmp_path: Path):
    """Create a file-backed SQLite engine so concurrent sessions see one database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'snapshot.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory) -> SnapshotStore:
    """Snapshot store over the test database."""
    return SnapshotStore(session_factory)


@pytest.fixture
def sample_cards() -> list[Card]:
    """Three well-formed catalog cards."""
    return [
        Card(
            id="ember-001",
            name="Ember",
            image_url="https://img.example.com/ember.png",
            set_number="001",
            info="Deal 2 damage.",
        ),
        Card(
            id="aeon-002",
            name="Aeon",
            image_url="https://img.example.com/aeon.png",
            set_number="002",
        ),
        Card(
            id="tidal-wave",
            name="Tidal Wave",
            image_url="https://img.example.com/tidal.png",
        ),
    ]


@pytest.fixture
def catalog_payload() -> dict:
    """Catalog API response in the current (cards/camelCase) shape."""
    return {
        "cards": [
            {
                "id": "ember-001",
                "name": "Ember",
                "imageUrl": "https://img.example.com/ember.png",
                "setNumber": "001",
                "info": "Deal 2 damage.",
            },
            {
                "slug": "aeon-002",
                "cardName": "Aeon",
                "image_url": "https://img.example.com/aeon.png",
                "number": 2,
            },
            {
                "title": "Tidal Wave",
                "img": "https://img.example.com/tidal.png",
            },
        ],
        "total": 3,
    }

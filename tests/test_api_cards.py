"""Tests for the card API endpoints."""

from unittest.mock import patch

import httpx
import pytest
import respx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from cardcatalog.config import settings
from cardcatalog.db.database import get_snapshot_store
from cardcatalog.db.snapshot_store import SnapshotStore
from cardcatalog.main import app
from cardcatalog.models.card import Card, DatasetVariant
from cardcatalog.services.sources import CATALOG_BASE, MIRROR_BASE

BASE_CARD_URL = f"{CATALOG_BASE}/api/cards?base_card=true"
API_CARDS_URL = f"{CATALOG_BASE}/api/cards"
CARDS_JSON_URL = f"{CATALOG_BASE}/cards.json"
MIRROR_URL = f"{MIRROR_BASE}/cards"


@pytest.fixture
async def client(store: SnapshotStore):
    """Provide an async test client bound to the test snapshot store."""
    app.dependency_overrides[get_snapshot_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def remote_enabled():
    """Allow request handlers to reach the (mocked) catalog."""
    with (
        patch.object(settings, "environment", "development"),
        patch.object(settings, "cron_secret", ""),
    ):
        yield


def _mock_catalog(router: respx.MockRouter, payload: dict, working_url: str) -> None:
    # The query-bearing route goes first so it wins over its bare path
    for url in (BASE_CARD_URL, API_CARDS_URL, CARDS_JSON_URL):
        if url == working_url:
            router.get(url).mock(return_value=httpx.Response(200, json=payload))
        else:
            router.get(url).mock(return_value=httpx.Response(503))
    router.get(MIRROR_URL).mock(return_value=httpx.Response(200, text="<html></html>"))


class TestGetCards:
    async def test_serves_snapshot(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """Stored cards are served as cached."""
        written = await store.write(DatasetVariant.BASE, sample_cards)

        response = await client.get("/cards")

        assert response.status_code == 200
        data = response.json()
        assert data["variant"] == "base"
        assert data["freshness"] == "cached"
        assert data["count"] == 3
        assert data["updated_at"] == written.updated_at
        assert data["cards"][0] == {
            "id": "ember-001",
            "name": "Ember",
            "image_url": "https://img.example.com/ember.png",
            "set_number": "001",
            "info": "Deal 2 damage.",
        }

    async def test_variant_selection(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """The variant query parameter picks the dataset."""
        await store.write(DatasetVariant.ALL, sample_cards[:1])

        response = await client.get("/cards", params={"variant": "all"})

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["cards"]] == ["Ember"]

    async def test_unknown_variant_rejected(self, client: AsyncClient) -> None:
        """Unknown variants fail validation."""
        response = await client.get("/cards", params={"variant": "promo"})

        assert response.status_code == 422

    async def test_no_snapshot_returns_503(self, client: AsyncClient) -> None:
        """An empty store is explained, not a crash."""
        response = await client.get("/cards")

        assert response.status_code == 503
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "service_unavailable"
        assert "ingestion job" in data["failure"]["message"]

    async def test_refresh_with_remote_disabled(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """In production without opt-in, a refresh serves the snapshot as stale."""
        await store.write(DatasetVariant.BASE, sample_cards)

        with (
            patch.object(settings, "environment", "production"),
            patch.object(settings, "remote_fetch_enabled", False),
        ):
            response = await client.get("/cards", params={"refresh": "true"})

        assert response.status_code == 200
        data = response.json()
        assert data["freshness"] == "stale"
        assert data["errors"] == ["remote fetch disabled"]

    @pytest.mark.usefixtures("remote_enabled")
    async def test_refresh_falls_back_to_second_source(
        self, client: AsyncClient, store: SnapshotStore, catalog_payload: dict
    ) -> None:
        """A refresh walks past a failing source and persists the result."""
        with respx.mock(assert_all_called=False) as router:
            _mock_catalog(router, catalog_payload, CARDS_JSON_URL)
            response = await client.get("/cards", params={"variant": "all", "refresh": "true"})

        assert response.status_code == 200
        data = response.json()
        assert data["freshness"] == "fresh"
        assert data["source"] == CARDS_JSON_URL
        assert data["count"] == 3
        assert len(data["errors"]) == 1
        assert data["errors"][0].startswith(f"{API_CARDS_URL}: ")
        assert len((await store.read_dataset(DatasetVariant.ALL)).cards) == 3

    @pytest.mark.usefixtures("remote_enabled")
    async def test_refresh_failure_serves_stale(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """When every source fails, the previous snapshot is served."""
        written = await store.write(DatasetVariant.ALL, sample_cards)

        with respx.mock(assert_all_called=False) as router:
            _mock_catalog(router, {}, working_url="")
            response = await client.get("/cards", params={"variant": "all", "refresh": "true"})

        assert response.status_code == 200
        data = response.json()
        assert data["freshness"] == "stale"
        assert data["updated_at"] == written.updated_at
        assert len(data["errors"]) == 3

    @pytest.mark.usefixtures("remote_enabled")
    async def test_refresh_failure_without_snapshot_returns_502(
        self, client: AsyncClient
    ) -> None:
        """When every source fails and nothing is stored, the errors are reported."""
        with respx.mock(assert_all_called=False) as router:
            _mock_catalog(router, {}, working_url="")
            response = await client.get("/cards", params={"variant": "all", "refresh": "true"})

        assert response.status_code == 502
        failure = response.json()["failure"]
        assert failure["kind"] == "external_api_error"
        assert [e.split(": ", 1)[0] for e in failure["errors"]] == [
            API_CARDS_URL,
            CARDS_JSON_URL,
            MIRROR_URL,
        ]


class TestSearch:
    async def test_ranked_search(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """Search returns a ranked page."""
        await store.write(DatasetVariant.BASE, sample_cards)

        response = await client.get("/cards/search", params={"q": "aeon"})

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "aeon"
        assert data["total"] == 1
        assert data["page"] == 1
        assert data["page_size"] == 50
        assert data["freshness"] == "cached"
        assert [c["name"] for c in data["cards"]] == ["Aeon"]

    async def test_empty_query_pages_everything(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """A blank query pages through all cards in ingestion order."""
        await store.write(DatasetVariant.BASE, sample_cards)

        response = await client.get("/cards/search", params={"page": 2, "page_size": 2})

        data = response.json()
        assert data["total"] == 3
        assert [c["name"] for c in data["cards"]] == ["Tidal Wave"]

    async def test_substring_mode(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """Substring mode excludes fuzzy-only matches."""
        await store.write(DatasetVariant.BASE, sample_cards)

        response = await client.get("/cards/search", params={"q": "tdw", "mode": "substring"})

        assert response.json()["total"] == 0

    async def test_page_size_limit(self, client: AsyncClient) -> None:
        """Page sizes above the maximum are rejected."""
        response = await client.get("/cards/search", params={"page_size": 101})

        assert response.status_code == 422

    async def test_invalid_mode(self, client: AsyncClient) -> None:
        """Unknown search modes are rejected."""
        response = await client.get("/cards/search", params={"mode": "regex"})

        assert response.status_code == 422

    async def test_no_snapshot_returns_503(self, client: AsyncClient) -> None:
        """Searching an empty store is a known failure."""
        response = await client.get("/cards/search", params={"q": "aeon"})

        assert response.status_code == 503
        assert response.json()["failure"]["kind"] == "service_unavailable"


class TestRefreshEndpoint:
    async def test_rejects_wrong_secret(self, client: AsyncClient) -> None:
        """A configured secret must be supplied."""
        with patch.object(settings, "cron_secret", "s3cret"):
            response = await client.post("/cards/refresh", params={"secret": "nope"})

        assert response.status_code == 401
        assert response.json()["failure"]["kind"] == "unauthorized"

    async def test_rejects_missing_secret(self, client: AsyncClient) -> None:
        """Omitting the secret is the same as a wrong one."""
        with patch.object(settings, "cron_secret", "s3cret"):
            response = await client.post("/cards/refresh")

        assert response.status_code == 401

    async def test_refreshes_both_variants(
        self, client: AsyncClient, store: SnapshotStore, catalog_payload: dict
    ) -> None:
        """Both variants are refreshed and reported."""
        with (
            patch.object(settings, "cron_secret", "s3cret"),
            respx.mock(assert_all_called=False) as router,
        ):
            _mock_catalog(router, catalog_payload, CARDS_JSON_URL)
            response = await client.post("/cards/refresh", params={"secret": "s3cret"})

        assert response.status_code == 200
        data = response.json()
        snapshot = await store.read()
        assert data["results"]["base"]["count"] == 3
        assert data["results"]["all"]["count"] == 3
        assert data["results"]["base"]["source"] == CARDS_JSON_URL
        assert data["datasets"]["base"] == snapshot.dataset(DatasetVariant.BASE).updated_at
        assert data["snapshot_updated_at"] == snapshot.updated_at
        assert data["refreshed_at"] >= snapshot.updated_at

    @pytest.mark.usefixtures("remote_enabled")
    async def test_single_variant(
        self, client: AsyncClient, store: SnapshotStore, catalog_payload: dict
    ) -> None:
        """Variants can be excluded from a refresh."""
        with respx.mock(assert_all_called=False) as router:
            _mock_catalog(router, catalog_payload, BASE_CARD_URL)
            response = await client.post("/cards/refresh", params={"all": "false"})

        assert response.status_code == 200
        data = response.json()
        assert set(data["results"]) == {"base"}
        assert data["results"]["base"]["errors"] == []
        assert (await store.read_dataset(DatasetVariant.ALL)).cards == []

    @pytest.mark.usefixtures("remote_enabled")
    async def test_failed_refresh_keeps_snapshot(
        self, client: AsyncClient, store: SnapshotStore, sample_cards: list[Card]
    ) -> None:
        """A variant whose sources all fail keeps its previous snapshot."""
        written = await store.write(DatasetVariant.BASE, sample_cards)

        with respx.mock(assert_all_called=False) as router:
            _mock_catalog(router, {}, working_url="")
            response = await client.post("/cards/refresh", params={"all": "false"})

        data = response.json()
        assert response.status_code == 200
        assert data["results"]["base"]["count"] == 0
        assert len(data["results"]["base"]["errors"]) == 4
        assert data["datasets"]["base"] == written.updated_at


class TestPersistenceFailure:
    @pytest.mark.usefixtures("remote_enabled")
    async def test_write_failure_is_unknown_failure(
        self, client: AsyncClient, store: SnapshotStore, catalog_payload: dict
    ) -> None:
        """A refresh that cannot be persisted is reported, not served as fresh."""
        with (
            patch.object(store, "write", side_effect=OperationalError("INSERT", {}, Exception())),
            respx.mock(assert_all_called=False) as router,
        ):
            _mock_catalog(router, catalog_payload, API_CARDS_URL)
            response = await client.get("/cards", params={"variant": "all", "refresh": "true"})

        assert response.status_code == 500
        data = response.json()
        assert data["outcome"] == "unknown_failure"
        assert data["failure"]["detail"] == "OperationalError"

"""
Tests for the quote server HTTP API.
"""

import asyncio
from functools import partial

import pytest
from fastapi.testclient import TestClient

from quote_relay.server.service import (
    app,
    get_quote_fetcher,
    get_quote_persister,
    get_settings,
)
from quote_relay.server.settings import ServerSettings
from quote_relay.shared.errors import UpstreamUnavailable
from quote_relay.storage.quote_storage import QuoteStorage, persist_quote


class FakeQuoteSource:
    """Records calls and replies after a configurable delay."""

    def __init__(self, quote, events, fetch_delay=0.0, persist_delay=0.0):
        self.quote = quote
        self.events = events
        self.fetch_delay = fetch_delay
        self.persist_delay = persist_delay

    async def fetch(self):
        self.events.append("fetch")
        await asyncio.sleep(self.fetch_delay)
        return self.quote

    async def persist(self, quote):
        self.events.append("persist")
        await asyncio.sleep(self.persist_delay)
        return 1


class TestQuoteServer:
    """Test cases for the /cotacao endpoint."""

    def setup_method(self):
        """Set up test client."""
        self.client = TestClient(app)
        self.events = []

    def teardown_method(self):
        app.dependency_overrides.clear()

    def use_source(self, source, settings=None):
        app.dependency_overrides[get_quote_fetcher] = lambda: source.fetch
        app.dependency_overrides[get_quote_persister] = lambda: source.persist
        if settings is not None:
            app.dependency_overrides[get_settings] = lambda: settings

    def test_quote_served_after_fetch_and_persist(self, sample_quote, quote_payload):
        self.use_source(FakeQuoteSource(sample_quote, self.events, fetch_delay=0.05))

        response = self.client.get("/cotacao")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == quote_payload
        assert self.events == ["fetch", "persist"]

    def test_fetch_timeout_returns_500(self, sample_quote):
        self.use_source(FakeQuoteSource(sample_quote, self.events, fetch_delay=0.5))

        response = self.client.get("/cotacao")

        assert response.status_code == 500
        assert response.content == b""
        assert self.events == ["fetch"]

    def test_fetch_error_returns_500(self, sample_quote):
        async def failing_fetch():
            self.events.append("fetch")
            raise UpstreamUnavailable("provider down")

        source = FakeQuoteSource(sample_quote, self.events)
        self.use_source(source)
        app.dependency_overrides[get_quote_fetcher] = lambda: failing_fetch

        response = self.client.get("/cotacao")

        assert response.status_code == 500
        assert response.content == b""
        assert self.events == ["fetch"]

    def test_persist_timeout_returns_500(self, sample_quote):
        self.use_source(
            FakeQuoteSource(sample_quote, self.events, persist_delay=0.1)
        )

        response = self.client.get("/cotacao")

        assert response.status_code == 500
        assert response.content == b""
        assert self.events == ["fetch", "persist"]

    def test_persist_gets_its_own_budget(self, sample_quote):
        """Persistence is not limited to what the fetch left of its budget."""
        settings = ServerSettings(fetch_timeout=0.5, persist_timeout=0.3)
        self.use_source(
            FakeQuoteSource(
                sample_quote, self.events, fetch_delay=0.4, persist_delay=0.15
            ),
            settings,
        )

        response = self.client.get("/cotacao")

        assert response.status_code == 200

    def test_quote_persisted_to_database(self, sample_quote, database_path):
        settings = ServerSettings(persist_timeout=2.0)
        self.use_source(FakeQuoteSource(sample_quote, self.events), settings)
        app.dependency_overrides[get_quote_persister] = lambda: partial(
            persist_quote, database_path=database_path
        )

        response = self.client.get("/cotacao")

        assert response.status_code == 200
        assert response.json()["bid"] == "5.2500"

        async def read_back():
            async with QuoteStorage(database_path) as storage:
                return await storage.get_latest_quote()

        assert asyncio.run(read_back()) == sample_quote

    def test_unwritable_database_returns_500(self, sample_quote, tmp_path):
        settings = ServerSettings(persist_timeout=2.0)
        self.use_source(FakeQuoteSource(sample_quote, self.events), settings)
        app.dependency_overrides[get_quote_persister] = lambda: partial(
            persist_quote, database_path=str(tmp_path / "missing" / "database.db")
        )

        response = self.client.get("/cotacao")

        assert response.status_code == 500
        assert response.content == b""

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
    @pytest.mark.parametrize("path", ["/other", "/", "/cotacao/", "/cotacao/usd"])
    def test_unknown_route_returns_404(self, sample_quote, method, path):
        self.use_source(FakeQuoteSource(sample_quote, self.events))

        response = self.client.request(method, path, content=b"ignored")

        assert response.status_code == 404
        assert response.content == b""
        assert self.events == []

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    def test_quote_route_only_accepts_get(self, sample_quote, method):
        self.use_source(FakeQuoteSource(sample_quote, self.events))

        response = self.client.request(method, "/cotacao")

        assert response.status_code == 405
        assert self.events == []

"""Tests for exchange adapters, bucketing and the registry."""
import asyncio
import json
from unittest.mock import AsyncMock

import aiohttp
import pytest

from core.exceptions import (
    BinanceAPIError,
    BitstampAPIError,
    DataFetchError,
    RateLimitError,
    UnknownExchangeError,
)
from exchanges import BinanceClient, BitstampClient, ExchangeRegistry, StaticBookSource, get_source
from config import BINANCE_API_URL, BINANCE_SANDBOX_URL
from models.book import RawSnapshot


BINANCE_PAYLOADS = {
    "ticker/24hr": {"lastPrice": "100.50", "highPrice": "110.005", "lowPrice": "90.00"},
    "exchangeInfo": {
        "symbols": [{
            "symbol": "BTCUSDT",
            "quotePrecision": 8,
            "filters": [{"filterType": "PRICE_FILTER", "tickSize": "0.01000000"}],
        }],
    },
    "depth": {"bids": [["100.00", "1.5"], ["99.99", "2"]], "asks": [["100.01", "0.5"]]},
}


def fake_request(payloads):
    async def _request(endpoint, params=None):
        return payloads[endpoint]
    return AsyncMock(side_effect=_request)


class FakeResponse:

    def __init__(self, status, payload=None, text="", headers=None):
        self.status = status
        self._payload = payload
        self._text = text
        self.headers = headers or {}

    async def json(self):
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


class FakeSession:

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None):
        self.calls.append((url, params))
        if self.error is not None:
            raise self.error
        return self.response


class TestBinanceClient:

    @pytest.fixture
    def client(self):
        client = BinanceClient(api_key="")
        client._request = fake_request(BINANCE_PAYLOADS)
        return client

    @pytest.mark.asyncio
    async def test_ticker(self, client):
        assert await client.ticker("BTCUSDT") == 100.5

    @pytest.mark.asyncio
    async def test_average_rounded_to_tick(self, client):
        # (110.005 + 90) / 2 = 100.0025 -> 2 decimals
        assert await client.average24h("BTCUSDT") == 100.0

    @pytest.mark.asyncio
    async def test_raw_bids(self, client):
        snapshot = await client.raw_bids("BTCUSDT")
        assert snapshot.market == "BTCUSDT"
        assert snapshot.price_precision == 2
        assert [(l.price, l.size) for l in snapshot.levels] == [(100.0, 1.5), (99.99, 2.0)]

    @pytest.mark.asyncio
    async def test_raw_asks(self, client):
        snapshot = await client.raw_asks("BTCUSDT")
        assert [l.price for l in snapshot.levels] == [100.01]

    @pytest.mark.asyncio
    async def test_precision_is_cached(self, client):
        await client.raw_bids("BTCUSDT")
        await client.raw_bids("BTCUSDT")
        endpoints = [call.args[0] for call in client._request.await_args_list]
        assert endpoints.count("exchangeInfo") == 1

    @pytest.mark.asyncio
    async def test_unknown_market(self, client):
        with pytest.raises(DataFetchError):
            await client.raw_bids("NOPE")

    @pytest.mark.asyncio
    async def test_malformed_depth_row(self):
        payloads = dict(BINANCE_PAYLOADS, depth={"bids": [["abc", "1"]]})
        client = BinanceClient(api_key="")
        client._request = fake_request(payloads)
        with pytest.raises(DataFetchError):
            await client.raw_bids("BTCUSDT")

    @pytest.mark.asyncio
    async def test_missing_ticker_field(self):
        payloads = dict(BINANCE_PAYLOADS, **{"ticker/24hr": {}})
        client = BinanceClient(api_key="")
        client._request = fake_request(payloads)
        with pytest.raises(DataFetchError):
            await client.ticker("BTCUSDT")

    @pytest.mark.asyncio
    async def test_quote_precision_fallback(self):
        info = {"symbols": [{"symbol": "BTCUSDT", "quotePrecision": 4, "filters": []}]}
        client = BinanceClient(api_key="")
        client._request = fake_request(dict(BINANCE_PAYLOADS, exchangeInfo=info))
        assert await client.price_precision("BTCUSDT") == 4

    def test_api_key_header(self):
        assert BinanceClient(api_key="k")._headers == {"X-MBX-APIKEY": "k"}
        assert BinanceClient(api_key="")._headers == {}


class TestRestRequest:

    @pytest.mark.asyncio
    async def test_requires_session(self):
        with pytest.raises(BinanceAPIError):
            await BinanceClient(api_key="")._request("depth")

    @pytest.mark.asyncio
    async def test_ok(self):
        client = BinanceClient(api_key="")
        client._session = FakeSession(FakeResponse(200, {"ok": True}))
        assert await client._request("ping", {"a": 1}) == {"ok": True}
        assert client._session.calls == [(f"{BINANCE_API_URL}/ping", {"a": 1})]

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        client = BinanceClient(api_key="")
        client._session = FakeSession(FakeResponse(429, headers={"Retry-After": "5"}))
        with pytest.raises(RateLimitError, match="5s"):
            await client._request("depth")

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = BinanceClient(api_key="")
        client._session = FakeSession(FakeResponse(503, text="down"))
        with pytest.raises(BinanceAPIError, match="Server error 503"):
            await client._request("depth")

    @pytest.mark.asyncio
    async def test_client_error_status(self):
        client = BinanceClient(api_key="")
        client._session = FakeSession(FakeResponse(400, text="bad symbol"))
        with pytest.raises(BinanceAPIError, match="API error 400"):
            await client._request("depth")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client = BinanceClient(api_key="")
        client._session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(BinanceAPIError, match="Connection error"):
            await client._request("depth")

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = BinanceClient(api_key="")
        client._session = FakeSession(error=asyncio.TimeoutError())
        with pytest.raises(BinanceAPIError, match="timed out"):
            await client._request("depth")

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with BinanceClient(api_key="") as client:
            assert client._session is not None
        assert client._session is None


class TestBitstampClient:

    def test_no_sandbox(self):
        with pytest.raises(BitstampAPIError):
            BitstampClient(sandbox=True)

    @pytest.mark.asyncio
    async def test_payloads(self):
        payloads = {
            "ticker/btcusd/": {"last": "100", "high": "102.4", "low": "98"},
            "order_book/btcusd/": {"bids": [["99.5", "1"]], "asks": []},
            "trading-pairs-info/": [{"url_symbol": "btcusd", "counter_decimals": 0}],
        }
        client = BitstampClient()
        client._request = fake_request(payloads)

        assert await client.ticker("BTCUSD") == 100
        # (102.4 + 98) / 2 = 100.2 -> 0 decimals
        assert await client.average24h("btcusd") == 100
        snapshot = await client.raw_bids("btcusd")
        assert snapshot.price_precision == 0
        assert [l.price for l in snapshot.levels] == [99.5]

    @pytest.mark.asyncio
    async def test_unknown_market(self):
        client = BitstampClient()
        client._request = fake_request({"trading-pairs-info/": []})
        with pytest.raises(DataFetchError):
            await client.price_precision("xyz")


class TestRegistry:

    def test_lookup_is_case_insensitive(self):
        assert isinstance(get_source("Binance"), BinanceClient)
        assert isinstance(get_source("BITSTAMP"), BitstampClient)

    def test_sandbox_url(self):
        assert get_source("binance", sandbox=True).base_url == BINANCE_SANDBOX_URL

    def test_unknown_exchange(self):
        with pytest.raises(UnknownExchangeError, match="exchange kraken does not exist"):
            get_source("kraken")

    def test_list_all(self):
        assert ExchangeRegistry.list_all() == ["binance", "bitstamp"]


class TestBucket:

    def test_merges_and_keeps_first_appearance(self, scenario_source):
        levels = scenario_source.bucket(scenario_source._bids, "TEST", 2.5)
        # 100, 99 -> 100; 98, 97 -> 97.5
        assert [(l.price, l.size) for l in levels] == [(100, 2), (97.5, 2)]

    def test_rounds_to_price_precision(self):
        snapshot = RawSnapshot.from_pairs("TEST", [(0.3, 1)], price_precision=2)
        levels = StaticBookSource("TEST", 1, 1, bids=[]).bucket(snapshot, "TEST", 0.1)
        assert levels[0].price == 0.3

    def test_rejects_non_positive_granularity(self, scenario_source):
        with pytest.raises(DataFetchError):
            scenario_source.bucket(scenario_source._bids, "TEST", 0)

    def test_rejects_other_market(self, scenario_source):
        with pytest.raises(DataFetchError):
            scenario_source.bucket(scenario_source._bids, "OTHER", 1)

    def test_snapshot_untouched(self, scenario_source):
        before = scenario_source._bids.levels
        scenario_source.bucket(scenario_source._bids, "TEST", 5)
        assert scenario_source._bids.levels == before


class TestStaticBookSource:

    @pytest.mark.asyncio
    async def test_from_file(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text(json.dumps({
            "market": "ETHUSDT",
            "ticker": 2000,
            "average": 1990,
            "price_precision": 2,
            "bids": [[1999.5, 3], [1998, 1]],
        }), encoding="utf-8")

        source = StaticBookSource.from_file(path)
        assert await source.ticker("ETHUSDT") == 2000
        assert await source.average24h("ETHUSDT") == 1990
        snapshot = await source.raw_bids("ETHUSDT")
        assert snapshot.price_precision == 2
        assert len(snapshot) == 2
        assert len(await source.raw_asks("ETHUSDT")) == 0

    def test_bad_file(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataFetchError):
            StaticBookSource.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataFetchError):
            StaticBookSource.from_file(tmp_path / "missing.json")

from __future__ import annotations

import httpx
import pytest

from coinops.services.coingecko import (
    CoinGeckoClient,
    MalformedUpstreamResponse,
    Quote,
    UpstreamUnavailable,
    parse_simple_price,
)


def _client(handler, **kwargs) -> CoinGeckoClient:
    return CoinGeckoClient(base_url="https://cg.test/api/v3", transport=httpx.MockTransport(handler), **kwargs)


def test_fetch_prices_sends_expected_query_and_parses():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "bitcoin": {"usd": 50000.00, "usd_24h_change": 2.5},
                "ethereum": {"usd": 3000.00, "usd_24h_change": -1.2},
            },
        )

    with _client(handler) as client:
        quotes = client.fetch_prices(["bitcoin", "ethereum"])

    assert seen["path"] == "/api/v3/simple/price"
    assert seen["params"] == {
        "ids": "bitcoin,ethereum",
        "vs_currencies": "usd",
        "include_24hr_change": "true",
    }
    assert quotes == {
        "bitcoin": Quote(price=50000.0, change_24h=2.5),
        "ethereum": Quote(price=3000.0, change_24h=-1.2),
    }


def test_timeout_defaults_to_ten_seconds():
    client = CoinGeckoClient()
    try:
        assert client.timeout == 10.0
    finally:
        client.close()


def test_non_2xx_is_upstream_unavailable():
    client = _client(lambda request: httpx.Response(500))
    with pytest.raises(UpstreamUnavailable):
        client.fetch_prices(["bitcoin"])


def test_transport_error_is_upstream_unavailable():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(UpstreamUnavailable):
        _client(handler).fetch_prices(["bitcoin"])


def test_invalid_json_is_malformed():
    client = _client(lambda request: httpx.Response(200, content=b"not json"))
    with pytest.raises(MalformedUpstreamResponse):
        client.fetch_prices(["bitcoin"])


def test_non_object_body_is_malformed():
    client = _client(lambda request: httpx.Response(200, json=[1, 2, 3]))
    with pytest.raises(MalformedUpstreamResponse):
        client.fetch_prices(["bitcoin"])


def test_parse_skips_entries_without_price_and_defaults_change():
    quotes = parse_simple_price(
        {
            "bitcoin": {"usd": 1.5},
            "ethereum": {"usd_24h_change": 3.0},
            "dogecoin": "nope",
            "solana": {"usd": "12"},
        }
    )
    assert quotes == {"bitcoin": Quote(price=1.5, change_24h=0.0)}


def test_parse_uses_target_currency_keys():
    quotes = parse_simple_price({"bitcoin": {"eur": 40000, "eur_24h_change": -0.5}}, "eur")
    assert quotes["bitcoin"] == Quote(price=40000.0, change_24h=-0.5)


def test_parse_rejects_non_finite_and_negative_prices():
    quotes = parse_simple_price(
        {
            "bitcoin": {"usd": -5.0, "usd_24h_change": 1.0},
            "ethereum": {"usd": float("nan"), "usd_24h_change": 1.0},
            "dogecoin": {"usd": float("inf")},
            "solana": {"usd": 0.0, "usd_24h_change": float("-inf")},
            "cardano": {"usd": 0.5, "usd_24h_change": float("nan")},
        }
    )
    assert quotes == {
        "solana": Quote(price=0.0, change_24h=0.0),
        "cardano": Quote(price=0.5, change_24h=0.0),
    }


def test_fetch_ignores_nan_and_infinity_tokens_in_body():
    body = b'{"bitcoin": {"usd": NaN, "usd_24h_change": Infinity}, "ethereum": {"usd": 10, "usd_24h_change": NaN}}'
    client = _client(lambda request: httpx.Response(200, content=body))
    assert client.fetch_prices(["bitcoin", "ethereum"]) == {"ethereum": Quote(price=10.0, change_24h=0.0)}


def test_read_timeout_is_upstream_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamUnavailable):
        _client(handler).fetch_prices(["bitcoin"])

"""Helpers for interacting with the public CoinGecko API."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import httpx


COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
DEFAULT_TIMEOUT_SECONDS = 10.0

logger = logging.getLogger("coinops.coingecko")


class UpstreamUnavailable(Exception):
    """The quote endpoint could not be reached or answered with a non-2xx status."""


class MalformedUpstreamResponse(UpstreamUnavailable):
    """The quote endpoint answered, but the body was not the expected JSON object."""


@dataclass(frozen=True)
class Quote:
    price: float
    change_24h: float


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        # json parses NaN and Infinity tokens
        return v if math.isfinite(v) else None
    return None


def parse_simple_price(payload: Any, vs_currency: str = "usd") -> Dict[str, Quote]:
    """
    Turn a /simple/price body into {coin_id: Quote}.

    Entries without a finite, non-negative price are skipped; a missing or
    non-finite 24h change is 0.0.
    """
    if not isinstance(payload, dict):
        raise MalformedUpstreamResponse(
            f"expected JSON object, got {type(payload).__name__}"
        )

    change_key = f"{vs_currency}_24h_change"
    out: Dict[str, Quote] = {}
    for coin_id, fields in payload.items():
        if not isinstance(fields, dict):
            continue
        price = _as_float(fields.get(vs_currency))
        if price is None or price < 0:
            continue
        change = _as_float(fields.get(change_key))
        out[coin_id] = Quote(price=price, change_24h=change if change is not None else 0.0)
    return out


class CoinGeckoClient:
    """
    Synchronous client for the /simple/price quote endpoint.

    One call == one GET. No retries: callers decide what a failure means.
    """

    def __init__(
        self,
        base_url: str = COINGECKO_BASE_URL,
        vs_currency: str = "usd",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.vs_currency = vs_currency.lower()
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def fetch_prices(self, coin_ids: Iterable[str]) -> Dict[str, Quote]:
        params = {
            "ids": ",".join(coin_ids),
            "vs_currencies": self.vs_currency,
            "include_24hr_change": "true",
        }

        try:
            response = self._client.get(f"{self.base_url}/simple/price", params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"CoinGecko request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse("CoinGecko returned invalid JSON") from exc

        quotes = parse_simple_price(payload, self.vs_currency)
        logger.debug("coingecko quotes received | requested=%s | got=%d", params["ids"], len(quotes))
        return quotes

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CoinGeckoClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

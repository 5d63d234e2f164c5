"""Rate-limited, thread-safe view of current prices for the configured coins."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from coinops.config.settings import CoinConfig
from coinops.services.coingecko import Quote, UpstreamUnavailable


DEFAULT_TTL_SECONDS = 30.0

logger = logging.getLogger("coinops.price_cache")


# Served only on a cold start when the upstream has never answered.
# id -> (price_usd, change_24h_pct)
FALLBACK_PRICES: Dict[str, Tuple[float, float]] = {
    "bitcoin": (43250.00, 2.34),
    "ethereum": (2280.50, -1.12),
    "dogecoin": (0.082, 5.67),
    "solana": (98.75, 3.21),
    "cardano": (0.52, -0.45),
    "ripple": (0.62, 0.88),
    "polkadot": (7.35, -2.10),
    "litecoin": (72.40, 1.05),
}


class CoinNotFoundError(LookupError):
    def __init__(self, coin_id: str) -> None:
        super().__init__("coin not found")
        self.coin_id = coin_id


@dataclass
class CoinEntry:
    id: str
    display_name: str
    price_usd: float
    change_24h_pct: float


class PriceSource(Protocol):
    def fetch_prices(self, coin_ids: Iterable[str]) -> Dict[str, Quote]: ...


class PriceCache:
    """
    Snapshot of prices for a fixed, ordered coin list.

    - At most one upstream fetch per TTL window. A failed fetch also starts a
      new window, so a dead upstream is probed once per TTL, not per request.
    - Concurrent callers that find the snapshot stale share one in-flight fetch.
    - Fetch failures never reach callers: they get the last good snapshot, or
      FALLBACK_PRICES on a cold start.
    - Coins missing from a successful response keep their previous values;
      coins never returned are absent from the snapshot.
    - Every returned list holds fresh CoinEntry copies.
    """

    def __init__(
        self,
        coins: Iterable[CoinConfig],
        source: PriceSource,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._coins: List[CoinConfig] = list(coins)
        self._source = source
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock

        self._entries: Dict[str, CoinEntry] = {}
        self._snapshot_time: Optional[float] = None
        self._last_success: Optional[float] = None
        self._last_error: Optional[str] = None
        self._fetch_count = 0

        # _state_lock guards the fields above; _fetch_lock serializes upstream calls.
        # Order is always fetch -> state.
        self._state_lock = threading.Lock()
        self._fetch_lock = threading.Lock()

    @property
    def coins(self) -> List[CoinConfig]:
        return list(self._coins)

    # ----------------------------
    # public API
    # ----------------------------
    def get_prices(self) -> List[CoinEntry]:
        with self._state_lock:
            if self._is_fresh_locked(self._clock()):
                return self._current_locked()

        with self._fetch_lock:
            with self._state_lock:
                now = self._clock()
                # another caller may have refreshed while we waited
                if self._is_fresh_locked(now):
                    return self._current_locked()

            return self._refresh(now)

    def get_coin(self, coin_id: str) -> CoinEntry:
        for entry in self.get_prices():
            if entry.id == coin_id:
                return entry
        raise CoinNotFoundError(coin_id)

    def search_coins(self, query: str) -> List[CoinEntry]:
        entries = self.get_prices()
        if not query:
            return entries

        needle = query.casefold()
        return [
            e for e in entries
            if needle in e.id.casefold() or needle in e.display_name.casefold()
        ]

    def stats(self) -> Dict[str, Any]:
        with self._state_lock:
            now = self._clock()
            return {
                "entries": len(self._entries),
                "ttl_seconds": self.ttl_seconds,
                "fetch_count": self._fetch_count,
                "age_s": None if self._snapshot_time is None else round(now - self._snapshot_time, 3),
                "last_success_age_s": None if self._last_success is None else round(now - self._last_success, 3),
                "last_error": self._last_error,
                "fresh": self._is_fresh_locked(now),
            }

    # ----------------------------
    # internals
    # ----------------------------
    def _refresh(self, now: float) -> List[CoinEntry]:
        ids = [c.id for c in self._coins]
        try:
            quotes = self._source.fetch_prices(ids)
        except UpstreamUnavailable as exc:
            logger.warning("price fetch failed, serving fallback | coins=%d | error=%s", len(ids), exc)
            with self._state_lock:
                self._fetch_count += 1
                self._snapshot_time = now
                self._last_error = str(exc)
                return self._current_locked()
        except Exception as exc:
            logger.exception("price source raised unexpectedly, serving fallback | coins=%d", len(ids))
            with self._state_lock:
                self._fetch_count += 1
                self._snapshot_time = now
                self._last_error = f"{type(exc).__name__}: {exc}"
                return self._current_locked()

        with self._state_lock:
            self._fetch_count += 1
            self._snapshot_time = now
            self._merge_locked(quotes)
            if quotes:
                self._last_success = now
                self._last_error = None
            else:
                self._last_error = "empty upstream response"
                logger.warning("price fetch returned no quotes | coins=%d", len(ids))
            return self._current_locked()

    def _is_fresh_locked(self, now: float) -> bool:
        if self._snapshot_time is None:
            return False
        return now - self._snapshot_time <= self.ttl_seconds

    def _merge_locked(self, quotes: Dict[str, Quote]) -> None:
        updated = 0
        for coin in self._coins:
            quote = quotes.get(coin.id)
            if quote is None:
                continue
            self._entries[coin.id] = CoinEntry(
                id=coin.id,
                display_name=coin.display_name,
                price_usd=quote.price,
                change_24h_pct=quote.change_24h,
            )
            updated += 1
        logger.info("price snapshot refreshed | updated=%d | configured=%d", updated, len(self._coins))

    def _current_locked(self) -> List[CoinEntry]:
        if self._entries:
            return [replace(self._entries[c.id]) for c in self._coins if c.id in self._entries]
        return self._fallback_table()

    def _fallback_table(self) -> List[CoinEntry]:
        out: List[CoinEntry] = []
        for coin in self._coins:
            row = FALLBACK_PRICES.get(coin.id)
            if row is None:
                continue
            price, change = row
            out.append(CoinEntry(id=coin.id, display_name=coin.display_name, price_usd=price, change_24h_pct=change))
        return out

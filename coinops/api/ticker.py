from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from coinops.api.deps import get_app_settings, get_delay_rng, get_price_cache
from coinops.config.settings import Settings
from coinops.schemas.ticker import CoinRow, TickerResponse
from coinops.services.price_cache import CoinEntry, CoinNotFoundError, PriceCache
from coinops.services.refresh_scheduler import UniformSource, generate_batch


router = APIRouter(tags=["ticker"])


def _to_row(entry: CoinEntry, mean_ms: int, rng: Optional[UniformSource]) -> CoinRow:
    return CoinRow(
        id=entry.id,
        display_name=entry.display_name,
        price=entry.price_usd,
        change_24h=entry.change_24h_pct,
        delays=generate_batch(mean_ms, rng=rng),
    )


def _to_rows(entries: List[CoinEntry], settings: Settings, rng: Optional[UniformSource]) -> List[CoinRow]:
    return [_to_row(e, settings.AVG_REFRESH_INTERVAL_MS, rng) for e in entries]


@router.get("/ticker", response_model=TickerResponse)
def get_ticker(
    cache: PriceCache = Depends(get_price_cache),
    settings: Settings = Depends(get_app_settings),
    rng: Optional[UniformSource] = Depends(get_delay_rng),
):
    """Full table for the initial load."""
    return TickerResponse(coins=_to_rows(cache.get_prices(), settings, rng))


@router.get("/ticker/{coin_id}", response_model=CoinRow)
def get_ticker_coin(
    coin_id: str,
    cache: PriceCache = Depends(get_price_cache),
    settings: Settings = Depends(get_app_settings),
    rng: Optional[UniformSource] = Depends(get_delay_rng),
):
    """
    Single row, polled by the client once its current delay runs out.
    Example: /ticker/bitcoin
    """
    try:
        entry = cache.get_coin(coin_id)
    except CoinNotFoundError:
        raise HTTPException(status_code=404, detail="Coin not found")
    return _to_row(entry, settings.AVG_REFRESH_INTERVAL_MS, rng)


@router.get("/search", response_model=TickerResponse)
def search_ticker(
    search: str = "",
    cache: PriceCache = Depends(get_price_cache),
    settings: Settings = Depends(get_app_settings),
    rng: Optional[UniformSource] = Depends(get_delay_rng),
):
    """
    Case-insensitive substring match on id or display name.
    Example: /search?search=bit
    """
    return TickerResponse(coins=_to_rows(cache.search_coins(search), settings, rng))

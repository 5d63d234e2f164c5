# coinops/config/settings.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class CoinConfig:
    id: str
    display_name: str


DEFAULT_COINS: List[CoinConfig] = [
    CoinConfig("bitcoin", "Bitcoin"),
    CoinConfig("ethereum", "Ethereum"),
    CoinConfig("dogecoin", "Doge"),
    CoinConfig("solana", "Solana"),
    CoinConfig("cardano", "Cardano"),
]


def parse_csv(value: str | None, default: List[str]) -> List[str]:
    if not value:
        return default
    items = [x.strip() for x in value.split(",")]
    return [x for x in items if x]


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


def parse_coins(value: str | None) -> List[CoinConfig]:
    """
    Supports:
      - JSON: [{"id":"bitcoin","display_name":"Bitcoin (BTC)"}, ...]
      - CSV map: "bitcoin=Bitcoin,ethereum=Ethereum,solana"
        (a bare id uses the id as its display name)
    """
    if not value or not value.strip():
        return list(DEFAULT_COINS)

    v = value.strip()
    coins: List[CoinConfig] = []
    if v.startswith("["):
        data = json.loads(v)
        for item in data:
            if not isinstance(item, dict) or not item.get("id"):
                raise ValueError(f"Bad COINOPS_COINS entry: {item!r}")
            coin_id = str(item["id"]).strip().lower()
            coins.append(CoinConfig(coin_id, str(item.get("display_name") or coin_id)))
    else:
        for part in parse_csv(v, []):
            if "=" in part:
                k, name = part.split("=", 1)
                coin_id, name = k.strip().lower(), name.strip()
            else:
                coin_id, name = part.lower(), part
            if not coin_id:
                raise ValueError(f"Bad COINOPS_COINS part: {part}")
            coins.append(CoinConfig(coin_id, name or coin_id))

    seen: set[str] = set()
    for c in coins:
        if c.id in seen:
            raise ValueError(f"Duplicate coin id in COINOPS_COINS: {c.id}")
        seen.add(c.id)
    return coins


@dataclass(frozen=True)
class Settings:
    COINS: List[CoinConfig]
    AVG_REFRESH_INTERVAL_MS: int
    PRICE_CACHE_TTL_SECONDS: float
    COINGECKO_BASE_URL: str
    COINGECKO_VS_CURRENCY: str
    UPSTREAM_TIMEOUT_SECONDS: float
    REPORT_DELAY_SECONDS: float
    LOG_LEVEL: str
    LOG_JSON: bool
    ENVIRONMENT: str
    HOST: str
    PORT: int

    @staticmethod
    def from_env() -> "Settings":
        avg_refresh = parse_int(os.getenv("AVG_REFRESH_INTERVAL_MS"), 5000)
        if avg_refresh < 0:
            raise ValueError(f"AVG_REFRESH_INTERVAL_MS must be >= 0, got {avg_refresh}")

        return Settings(
            COINS=parse_coins(os.getenv("COINOPS_COINS")),
            AVG_REFRESH_INTERVAL_MS=avg_refresh,
            PRICE_CACHE_TTL_SECONDS=parse_float(os.getenv("PRICE_CACHE_TTL_SECONDS"), 30.0),
            COINGECKO_BASE_URL=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"),
            COINGECKO_VS_CURRENCY=os.getenv("COINGECKO_VS_CURRENCY", "usd"),
            UPSTREAM_TIMEOUT_SECONDS=parse_float(os.getenv("UPSTREAM_TIMEOUT_SECONDS"), 10.0),
            REPORT_DELAY_SECONDS=parse_float(os.getenv("REPORT_DELAY_SECONDS"), 3.0),
            LOG_LEVEL=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            LOG_JSON=parse_bool(os.getenv("LOG_JSON"), False),
            ENVIRONMENT=os.getenv("ENVIRONMENT") or os.getenv("ENV") or "production",
            HOST=os.getenv("HOST", "0.0.0.0"),
            PORT=parse_int(os.getenv("PORT"), 3000),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings

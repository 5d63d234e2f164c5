from __future__ import annotations

import pytest

from coinops.config.settings import CoinConfig, Settings

COINS = [
    CoinConfig("bitcoin", "Bitcoin (BTC)"),
    CoinConfig("ethereum", "Ethereum (ETH)"),
    CoinConfig("dogecoin", "Doge"),
]


def build_settings(**overrides) -> Settings:
    values = dict(
        COINS=COINS,
        AVG_REFRESH_INTERVAL_MS=1000,
        PRICE_CACHE_TTL_SECONDS=30.0,
        COINGECKO_BASE_URL="https://cg.test/api/v3",
        COINGECKO_VS_CURRENCY="usd",
        UPSTREAM_TIMEOUT_SECONDS=10.0,
        REPORT_DELAY_SECONDS=0.0,
        LOG_LEVEL="INFO",
        LOG_JSON=False,
        ENVIRONMENT="test",
        HOST="127.0.0.1",
        PORT=3000,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def make_settings():
    return build_settings

# coinops/main.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI

from coinops.api.health import router as health_router
from coinops.api.notifications import router as notifications_router
from coinops.api.ticker import router as ticker_router

from coinops.config.logging_config import configure_logging
from coinops.config.settings import Settings, get_settings
from coinops.middleware.request_id import RequestIDMiddleware
from coinops.middleware.request_logging import RequestLoggingMiddleware
from coinops.services.coingecko import CoinGeckoClient
from coinops.services.notifications import NotificationStore
from coinops.services.price_cache import PriceCache
from coinops.services.refresh_scheduler import UniformSource
from coinops.utils.time import monotonic

logger = logging.getLogger("coinops")


def build_upstream_client(settings: Settings) -> CoinGeckoClient:
    return CoinGeckoClient(
        base_url=settings.COINGECKO_BASE_URL,
        vs_currency=settings.COINGECKO_VS_CURRENCY,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )


def create_app(
    settings: Optional[Settings] = None,
    price_cache: Optional[PriceCache] = None,
    notifications: Optional[NotificationStore] = None,
    delay_rng: Optional[UniformSource] = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="CoinOps Dashboard")
    app.state.settings = settings
    app.state.upstream_client = None
    if price_cache is None:
        app.state.upstream_client = build_upstream_client(settings)
        price_cache = PriceCache(
            settings.COINS,
            app.state.upstream_client,
            ttl_seconds=settings.PRICE_CACHE_TTL_SECONDS,
        )
    app.state.price_cache = price_cache
    app.state.notifications = notifications or NotificationStore()
    app.state.delay_rng = delay_rng
    app.state.started_at = monotonic()

    # Routers
    app.include_router(health_router)
    app.include_router(ticker_router)
    app.include_router(notifications_router)

    # last added runs first: request id is assigned before logging sees the request
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/")
    def root() -> Dict[str, Any]:
        return {
            "message": "CoinOps Dashboard",
            "coins": [c.id for c in settings.COINS],
            "avg_refresh_interval_ms": settings.AVG_REFRESH_INTERVAL_MS,
        }

    @app.on_event("startup")
    def on_startup() -> None:
        logger.info(
            "coinops starting | coins=%d | ttl_s=%.0f | avg_refresh_ms=%d | env=%s",
            len(settings.COINS),
            settings.PRICE_CACHE_TTL_SECONDS,
            settings.AVG_REFRESH_INTERVAL_MS,
            settings.ENVIRONMENT,
        )

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        if app.state.upstream_client is not None:
            app.state.upstream_client.close()

    return app


def app_factory() -> FastAPI:
    """Entry point for `uvicorn --factory coinops.main:app_factory`."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    return create_app(settings)

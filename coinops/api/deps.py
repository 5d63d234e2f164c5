"""FastAPI dependencies. Everything lives on app.state, wired up in create_app()."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from coinops.config.settings import Settings
from coinops.services.notifications import NotificationStore
from coinops.services.price_cache import PriceCache
from coinops.services.refresh_scheduler import UniformSource


def get_price_cache(request: Request) -> PriceCache:
    return request.app.state.price_cache


def get_notification_store(request: Request) -> NotificationStore:
    return request.app.state.notifications


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_delay_rng(request: Request) -> Optional[UniformSource]:
    return getattr(request.app.state, "delay_rng", None)

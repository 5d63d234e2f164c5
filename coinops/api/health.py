# coinops/api/health.py
from __future__ import annotations

import platform
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from coinops.api.deps import get_app_settings, get_price_cache
from coinops.config.settings import Settings
from coinops.schemas.ticker import MetadataResponse
from coinops.services.price_cache import PriceCache
from coinops.utils.time import format_uptime, iso_z, monotonic
from coinops.version import get_version_info

router = APIRouter(tags=["health"])


def _now_meta(started_at: float) -> Dict[str, Any]:
    now_ts = time.time()
    uptime_s = monotonic() - started_at
    return {
        "now_unix": int(now_ts),
        "now_iso": iso_z(datetime.fromtimestamp(now_ts, tz=timezone.utc)),
        "uptime_s": int(uptime_s),
        "uptime": format_uptime(uptime_s),
    }


@router.get("/live")
def live():
    return {"status": "ok"}


@router.get("/health")
def health(request: Request, cache: PriceCache = Depends(get_price_cache)):
    """Runtime stats for monitoring and k8s probes. Never triggers an upstream fetch."""
    return {
        "status": "ok",
        **_now_meta(request.app.state.started_at),
        "threads": threading.active_count(),
        "python_version": platform.python_version(),
        "price_cache": cache.stats(),
    }


@router.get("/metadata", response_model=MetadataResponse)
def metadata(settings: Settings = Depends(get_app_settings)):
    info = get_version_info()
    return MetadataResponse(
        version=info["version"],
        commit=info["commit"],
        build_date=info["build_date"],
        environment=settings.ENVIRONMENT,
        features={"avg_refresh_interval_ms": settings.AVG_REFRESH_INTERVAL_MS},
    )

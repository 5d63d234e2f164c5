from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends

from coinops.api.deps import get_app_settings, get_notification_store
from coinops.config.settings import Settings
from coinops.schemas.ticker import NotificationOut, NotificationsResponse, ReportResponse
from coinops.services.notifications import NotificationStore
from coinops.utils.time import utcnow

logger = logging.getLogger("coinops.reports")

router = APIRouter(tags=["notifications"])


@router.post("/generate-report", response_model=ReportResponse)
def generate_report(
    store: NotificationStore = Depends(get_notification_store),
    settings: Settings = Depends(get_app_settings),
):
    """Stand-in for a slow admin job; leaves a notification when done."""
    if settings.REPORT_DELAY_SECONDS > 0:
        time.sleep(settings.REPORT_DELAY_SECONDS)

    stamp = utcnow().strftime("%Y%m%d_%H%M%S")
    store.add("Report Ready", f"Compliance report {stamp} generated successfully")
    logger.info("report generated | stamp=%s", stamp)

    return ReportResponse(timestamp=stamp, notification_count=store.count())


@router.get("/notifications", response_model=NotificationsResponse)
def list_notifications(store: NotificationStore = Depends(get_notification_store)):
    items = store.get_all()
    return NotificationsResponse(
        notifications=[
            NotificationOut(id=n.id, title=n.title, message=n.message, timestamp=n.timestamp)
            for n in items
        ],
        count=len(items),
    )


@router.delete("/notifications", response_model=NotificationsResponse)
def clear_notifications(store: NotificationStore = Depends(get_notification_store)):
    store.clear()
    return NotificationsResponse(notifications=[], count=0)

"""Pydantic models for dashboard responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class CoinRow(BaseModel):
    """One ticker row plus the delays the client waits before re-polling it."""

    id: str
    display_name: str
    price: float
    change_24h: float
    delays: List[int] = Field(default_factory=list)


class TickerResponse(BaseModel):
    coins: List[CoinRow]


class NotificationOut(BaseModel):
    id: int
    title: str
    message: str
    timestamp: datetime


class NotificationsResponse(BaseModel):
    notifications: List[NotificationOut]
    count: int


class ReportResponse(BaseModel):
    timestamp: str
    notification_count: int


class MetadataResponse(BaseModel):
    """Polled by open tabs to notice a server upgrade."""

    version: str
    commit: str
    build_date: str
    environment: str
    features: Dict[str, Any]

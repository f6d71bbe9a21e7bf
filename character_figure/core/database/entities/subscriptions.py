"""
Subscription entity models.

Each user has at most one subscription row, tracked by ``user_uuid``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class Subscription(Base, table=True):
    """Entity for a user's plan subscription.

    Table: subscriptions
    """

    __tablename__ = "subscriptions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_uuid: str = Field(max_length=64, unique=True, index=True)
    user_email: str = Field(default="", max_length=255)

    # Plan
    plan_id: str = Field(max_length=32)
    plan_name: str = Field(max_length=64)
    status: str = Field(default="active", max_length=32, index=True)
    interval: str = Field(default="month", max_length=32)
    price: int = Field(default=0)
    currency: str = Field(default="usd", max_length=16)

    # Billing period
    started_at: datetime = Field(default_factory=utc_now)
    current_period_start: datetime = Field(default_factory=utc_now)
    current_period_end: Optional[datetime] = Field(default=None)
    cancelled_at: Optional[datetime] = Field(default=None)

    # Usage
    monthly_limit: int = Field(default=10)
    used_this_month: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Subscription(user_uuid={self.user_uuid}, plan_id={self.plan_id}, status={self.status})"

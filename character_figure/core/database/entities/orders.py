"""
Order entity models.

An order is created at checkout with status ``created`` and becomes ``paid``
once the payment provider confirms it. Paid orders carrying credits grant
exactly one ``order_pay`` row in the credits ledger.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class Order(Base, table=True):
    """Entity for a purchase order.

    Table: orders
    """

    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_no: str = Field(max_length=64, unique=True, index=True)

    # Buyer
    user_uuid: str = Field(default="", max_length=64, index=True)
    user_email: str = Field(default="", max_length=255)

    # Pricing (amount in the currency's minor unit)
    amount: int = Field()
    interval: Optional[str] = Field(default=None, max_length=32)
    currency: Optional[str] = Field(default=None, max_length=16)
    product_id: Optional[str] = Field(default=None, max_length=128)
    product_name: Optional[str] = Field(default=None, max_length=255)
    credits: int = Field(default=0)
    valid_months: Optional[int] = Field(default=None)
    expired_at: Optional[datetime] = Field(default=None)

    # Lifecycle
    status: str = Field(default="created", max_length=32, index=True)
    order_detail: Optional[str] = Field(default=None, sa_column=Column(Text))
    sub_id: Optional[str] = Field(default=None, max_length=255)
    paid_at: Optional[datetime] = Field(default=None)
    paid_email: Optional[str] = Field(default=None, max_length=255)
    paid_detail: Optional[str] = Field(default=None, sa_column=Column(Text))

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Order(order_no={self.order_no}, status={self.status}, credits={self.credits})"

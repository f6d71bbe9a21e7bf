"""
Credits ledger entity models.

The ledger is append-only. Grants are positive rows, consumption is a
negative row. A row with ``expired_at`` of ``None`` never expires.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class Credit(Base, table=True):
    """Entity for one credits ledger transaction.

    Table: credits
    """

    __tablename__ = "credits"

    id: Optional[int] = Field(default=None, primary_key=True)
    trans_no: str = Field(max_length=64, unique=True, index=True)
    user_uuid: str = Field(max_length=64, index=True)
    trans_type: str = Field(max_length=64)
    credits: int = Field()
    order_no: str = Field(default="", max_length=64, index=True)
    expired_at: Optional[datetime] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Credit(trans_no={self.trans_no}, user_uuid={self.user_uuid}, credits={self.credits})"

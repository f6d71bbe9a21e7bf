"""
User entity models.

This module contains the database entity for signed-in users. Users are
identified across the system by their ``uuid``; every ledger row, order and
generation references it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class User(Base, table=True):
    """Entity for an application user.

    Table: users
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(max_length=64, unique=True, index=True)

    # Profile
    email: str = Field(max_length=255, index=True)
    nickname: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = Field(default=None, max_length=512)
    locale: Optional[str] = Field(default=None, max_length=16)

    # Sign-in tracking
    signin_type: Optional[str] = Field(default=None, max_length=32)
    signin_ip: Optional[str] = Field(default=None, max_length=64)
    signin_provider: Optional[str] = Field(default=None, max_length=64)
    signin_openid: Optional[str] = Field(default=None, max_length=255)

    # Invitations
    invite_code: str = Field(default="", max_length=64)
    invited_by: str = Field(default="", max_length=64)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"User(uuid={self.uuid}, email={self.email})"

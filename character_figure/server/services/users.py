"""
User sign-in bookkeeping.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import UserRepository
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import CreditsTransType
from character_figure.core.utils import get_uuid, utc_now

from .credits import NEW_USER_CREDITS, increase_credits

logger = get_logger(__name__)

NEW_USER_CREDITS_VALIDITY = timedelta(days=365)


async def save_user(
    session: AsyncSession,
    email: str,
    *,
    nickname: Optional[str] = None,
    avatar_url: Optional[str] = None,
    locale: Optional[str] = None,
    signin_provider: Optional[str] = None,
    signin_ip: Optional[str] = None,
) -> tuple[User, bool]:
    """Insert the user on first sign-in, otherwise refresh their profile.

    A new user is granted ``NEW_USER_CREDITS`` valid for one year.

    Returns:
        Tuple of the user row and whether it was created by this call
    """
    repo = UserRepository(session)
    user = await repo.get_by_email(email)
    if user is not None:
        if nickname:
            user.nickname = nickname
        if avatar_url:
            user.avatar_url = avatar_url
        if signin_ip:
            user.signin_ip = signin_ip
        return await repo.update(user), False

    user = await repo.create(
        User(
            uuid=get_uuid(),
            email=email,
            nickname=nickname or email.split("@")[0],
            avatar_url=avatar_url,
            locale=locale,
            signin_type="oauth" if signin_provider else "credentials",
            signin_provider=signin_provider,
            signin_ip=signin_ip,
        )
    )
    await increase_credits(
        session,
        user.uuid,
        CreditsTransType.new_user,
        NEW_USER_CREDITS,
        expired_at=utc_now() + NEW_USER_CREDITS_VALIDITY,
    )
    logger.info(f"Created user {user.uuid} for {email}")
    return user, True


async def get_user_by_uuid(session: AsyncSession, user_uuid: str) -> Optional[User]:
    return await UserRepository(session).get_by_uuid(user_uuid)

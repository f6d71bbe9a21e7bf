"""
Request Dependencies.

Provides the database session, the signed-in user and the vendor clients to
API endpoints. Vendor clients are built lazily once per process; tests
replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database import get_session
from character_figure.core.database.entities.users import User
from character_figure.core.errors import AuthenticationError
from character_figure.providers import (
    Context7Service,
    CreemClient,
    KlingClient,
    NanoBananaService,
    OpenRouterClient,
    SiliconFlowClient,
    build_context7_service,
    build_creem_client,
    build_kling_client,
    build_nano_banana_service,
    build_openrouter_client,
    build_siliconflow_client,
)

from .auth import decode_access_token
from .users import get_user_by_uuid

SessionDep = Annotated[AsyncSession, Depends(get_session)]

_bearer = HTTPBearer(auto_error=False)


async def get_optional_user(
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[User]:
    """Resolve the bearer token to a user, or None when absent or invalid."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        claims = decode_access_token(credentials.credentials)
    except AuthenticationError:
        return None
    return await get_user_by_uuid(session, claims["sub"])


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]


@lru_cache
def get_nano_banana() -> NanoBananaService:
    return build_nano_banana_service()


@lru_cache
def get_kling() -> KlingClient:
    return build_kling_client()


@lru_cache
def get_creem() -> CreemClient:
    return build_creem_client()


@lru_cache
def get_openrouter() -> OpenRouterClient:
    return build_openrouter_client()


@lru_cache
def get_siliconflow() -> SiliconFlowClient:
    return build_siliconflow_client()


@lru_cache
def get_context7() -> Context7Service:
    return build_context7_service()


NanoBananaDep = Annotated[NanoBananaService, Depends(get_nano_banana)]
KlingDep = Annotated[KlingClient, Depends(get_kling)]
CreemDep = Annotated[CreemClient, Depends(get_creem)]
OpenRouterDep = Annotated[OpenRouterClient, Depends(get_openrouter)]
SiliconFlowDep = Annotated[SiliconFlowClient, Depends(get_siliconflow)]
Context7Dep = Annotated[Context7Service, Depends(get_context7)]

"""
Authentication Endpoints.

Sign-in upserts the user by email and issues a bearer token; the user-info
endpoint returns the signed-in profile with its credit balance.
"""

from fastapi import APIRouter, Request

from character_figure.core.logging_config import get_logger
from character_figure.core.models.io import SigninRequest
from character_figure.server.responses import resp_data
from character_figure.server.services.auth import create_access_token
from character_figure.server.services.credits import get_user_credits
from character_figure.server.services.deps import CurrentUserDep, SessionDep
from character_figure.server.services.users import save_user

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


def _user_to_dict(user) -> dict:
    return user.model_dump(exclude={"id", "signin_ip", "signin_openid"})


@router.post(
    "/auth/signin",
    summary="Sign In",
    description="Create the user on first sign-in (granting the welcome credits) and issue a bearer token.",
    response_description="Access token and user profile.",
    responses={400: {"description": "Invalid email"}},
)
async def signin(body: SigninRequest, request: Request, session: SessionDep):
    user, created = await save_user(
        session,
        body.email,
        nickname=body.nickname,
        avatar_url=body.avatar_url,
        locale=body.locale,
        signin_provider=body.signin_provider,
        signin_ip=request.client.host if request.client else None,
    )
    logger.info(f"User {user.uuid} signed in (new={created})")
    token = create_access_token(user.uuid, user.email)
    return resp_data({"access_token": token, "token_type": "bearer", "user": _user_to_dict(user), "is_new": created})


@router.get(
    "/get-user-info",
    summary="Get User Info",
    description="Return the signed-in user's profile and credit balance.",
    response_description="User profile with credits.",
    responses={401: {"description": "Not signed in"}},
)
async def get_user_info(session: SessionDep, user: CurrentUserDep):
    credits = await get_user_credits(session, user.uuid)
    return resp_data({**_user_to_dict(user), "credits": credits.to_dict()})

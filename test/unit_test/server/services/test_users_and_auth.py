"""Unit tests for sign-in bookkeeping and access tokens."""

import pytest
from jose import jwt

from character_figure.core.errors import AuthenticationError
from character_figure.server.services.auth import create_access_token, decode_access_token
from character_figure.server.services.credits import get_credit_history, get_user_credits
from character_figure.server.services.users import get_user_by_uuid, save_user


class TestSaveUser:
    async def test_first_sign_in_creates_user_with_welcome_credits(self, session):
        user, created = await save_user(session, "carol@example.com", signin_provider="google", signin_ip="10.0.0.1")

        assert created is True
        assert user.nickname == "carol"
        assert user.signin_type == "oauth"
        assert (await get_user_credits(session, user.uuid)).left_credits == 10
        (grant,) = await get_credit_history(session, user.uuid)
        assert grant.trans_type == "new_user"
        assert (grant.expired_at - grant.created_at).days in (364, 365)

    async def test_returning_user_is_updated_without_new_credits(self, session):
        user, _ = await save_user(session, "carol@example.com")

        again, created = await save_user(session, "carol@example.com", nickname="Carol C", avatar_url="https://mock/a.png")

        assert created is False
        assert again.uuid == user.uuid
        assert again.nickname == "Carol C"
        assert again.signin_type == "credentials"
        assert len(await get_credit_history(session, user.uuid)) == 1

    async def test_get_user_by_uuid(self, session, user):
        assert (await get_user_by_uuid(session, user.uuid)).email == "alice@example.com"
        assert await get_user_by_uuid(session, "missing") is None


class TestAccessTokens:
    def test_round_trip(self):
        token = create_access_token("u-1", "alice@example.com", 5)

        claims = decode_access_token(token)

        assert claims["sub"] == "u-1"
        assert claims["email"] == "alice@example.com"

    def test_expired_token(self):
        token = create_access_token("u-1", "alice@example.com", -1)

        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_wrong_secret(self):
        token = create_access_token("u-1", "alice@example.com", secret="other-secret")

        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_token_without_subject(self):
        token = jwt.encode({"email": "alice@example.com"}, "test-auth-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.status_code == 401

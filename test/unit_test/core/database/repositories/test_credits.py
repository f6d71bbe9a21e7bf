"""Tests for the credits ledger repository against in-memory SQLite."""

from __future__ import annotations

from datetime import timedelta

from character_figure.core.database.entities.credits import Credit
from character_figure.core.database.repositories import CreditRepository
from character_figure.core.utils import get_snow_id, utc_now


def _credit(user_uuid: str, credits: int, *, expires_in_days=None, created_offset: int = 0, order_no: str = ""):
    now = utc_now()
    return Credit(
        trans_no=get_snow_id(),
        user_uuid=user_uuid,
        trans_type="order_pay",
        credits=credits,
        order_no=order_no,
        expired_at=None if expires_in_days is None else now + timedelta(days=expires_in_days),
        created_at=now + timedelta(seconds=created_offset),
    )


class TestCreditLookups:
    async def test_find_by_trans_no_and_order_no(self, session, user):
        repo = CreditRepository(session)
        row = await repo.insert_credit(_credit(user.uuid, 150, expires_in_days=30, order_no="1001"))

        assert (await repo.find_by_trans_no(row.trans_no)).id == row.id
        assert (await repo.find_by_order_no("1001")).id == row.id
        assert await repo.find_by_order_no("9999") is None

    async def test_empty_order_no_never_matches(self, session, user):
        repo = CreditRepository(session)
        await repo.insert_credit(_credit(user.uuid, 10))

        assert await repo.find_by_order_no("") is None


class TestValidCreditsView:
    async def test_excludes_expired_rows(self, session, user):
        repo = CreditRepository(session)
        await repo.insert_credit(_credit(user.uuid, 100, expires_in_days=-1))
        live = await repo.insert_credit(_credit(user.uuid, 20, expires_in_days=5))

        rows = await repo.get_user_valid_credits(user.uuid)

        assert [r.id for r in rows] == [live.id]

    async def test_orders_by_expiry_with_permanent_rows_last(self, session, user):
        repo = CreditRepository(session)
        permanent = await repo.insert_credit(_credit(user.uuid, 10, created_offset=-100))
        late = await repo.insert_credit(_credit(user.uuid, 30, expires_in_days=60))
        early = await repo.insert_credit(_credit(user.uuid, 20, expires_in_days=3))

        rows = await repo.get_user_valid_credits(user.uuid)

        assert [r.id for r in rows] == [early.id, late.id, permanent.id]

    async def test_only_returns_rows_of_the_user(self, session, user, other_user):
        repo = CreditRepository(session)
        await repo.insert_credit(_credit(other_user.uuid, 99, expires_in_days=10))

        assert await repo.get_user_valid_credits(user.uuid) == []

    async def test_reference_time_is_honoured(self, session, user):
        repo = CreditRepository(session)
        await repo.insert_credit(_credit(user.uuid, 50, expires_in_days=2))

        later = utc_now() + timedelta(days=3)

        assert await repo.get_user_valid_credits(user.uuid, now=later) == []


class TestCreditHistory:
    async def test_newest_first_with_pagination(self, session, user):
        repo = CreditRepository(session)
        rows = [await repo.insert_credit(_credit(user.uuid, i + 1, created_offset=i)) for i in range(5)]

        first_page = await repo.get_credits_by_user_uuid(user.uuid, page=1, limit=2)
        third_page = await repo.get_credits_by_user_uuid(user.uuid, page=3, limit=2)

        assert [r.id for r in first_page] == [rows[4].id, rows[3].id]
        assert [r.id for r in third_page] == [rows[0].id]

"""Unit tests for checkout validation and order creation."""

import json
from datetime import datetime, timedelta

import pytest

from character_figure.core.database.repositories import OrderRepository
from character_figure.core.errors import ApiError
from character_figure.core.models.io import CheckoutRequest
from character_figure.server.services.checkout import (
    PRICING_ITEMS,
    compute_expired_at,
    create_checkout,
    parse_product_map,
    validate_checkout,
)

PRODUCTS = {"trial-pack": "prod_trial", "pro-monthly": "prod_pro_monthly"}


def _request(base: str = "trial-pack", **overrides) -> CheckoutRequest:
    item = next(i for i in PRICING_ITEMS if i.product_id == base)
    fields = {
        "product_id": item.product_id,
        "credits": item.credits,
        "interval": item.interval,
        "amount": item.amount,
        "currency": item.currency,
        "valid_months": item.valid_months,
        "locale": "en",
    }
    fields.update(overrides)
    return CheckoutRequest(**fields)


class TestValidateCheckout:
    @pytest.mark.parametrize("product_id", [i.product_id for i in PRICING_ITEMS])
    def test_every_pricing_item_validates(self, product_id):
        assert validate_checkout(_request(product_id)).product_id == product_id

    @pytest.mark.parametrize(
        "overrides",
        [
            {"product_id": "free-lunch"},
            {"amount": 1},
            {"credits": 100000},
            {"currency": "eur"},
            {"valid_months": 3},
        ],
    )
    def test_tampered_requests_are_rejected(self, overrides):
        with pytest.raises(ApiError, match="invalid checkout params"):
            validate_checkout(_request(**overrides))


class TestExpiry:
    NOW = datetime(2024, 1, 1)

    def test_one_time_pack(self):
        assert compute_expired_at("one-time", 1, self.NOW) == self.NOW + timedelta(days=30)

    @pytest.mark.parametrize("interval,months,days", [("month", 1, 30), ("year", 12, 360)])
    def test_subscriptions_get_a_day_of_grace(self, interval, months, days):
        assert compute_expired_at(interval, months, self.NOW) == self.NOW + timedelta(days=days, hours=24)


@pytest.mark.parametrize(
    "raw,expected",
    [(None, {}), ("", {}), ("not json", {}), ("[1]", {}), (json.dumps(PRODUCTS), PRODUCTS)],
)
def test_parse_product_map(raw, expected):
    assert parse_product_map(raw) == expected


class TestCreateCheckout:
    async def test_creates_order_and_hosted_checkout(self, session, user, creem, vendors):
        result = await create_checkout(
            session, user, _request(), creem=creem, web_url="http://localhost:3000/", creem_products=PRODUCTS
        )

        assert result["provider"] == "creem"
        assert result["url"] == "https://mock.creem/checkout/ch_1"
        order = await OrderRepository(session).get_by_order_no(result["order_no"])
        assert order.status == "created"
        assert order.user_uuid == user.uuid
        assert order.credits == 150
        assert order.product_name == "Trial Pack"
        assert order.sub_id == "ch_1"
        sent = vendors.requests["creem"][0]
        assert sent["product_id"] == "prod_trial"
        assert sent["request_id"] == result["order_no"]
        assert sent["success_url"] == (
            f"http://localhost:3000/api/pay/callback/creem?order_no={result['order_no']}&locale=en"
        )
        assert sent["metadata"]["order_no"] == result["order_no"]
        assert sent["metadata"]["user_uuid"] == user.uuid

    async def test_unknown_provider(self, session, user, creem):
        with pytest.raises(ApiError, match="invalid provider"):
            await create_checkout(
                session, user, _request(provider="stripe"), creem=creem, web_url="http://x", creem_products=PRODUCTS
            )

    async def test_missing_product_mapping(self, session, user, creem):
        with pytest.raises(ApiError, match="creem product mapping not found"):
            await create_checkout(
                session, user, _request("pro-yearly"), creem=creem, web_url="http://x", creem_products=PRODUCTS
            )

        assert await OrderRepository(session).list(filters={"user_uuid": user.uuid}) == []

    async def test_vendor_failure(self, session, user, creem, vendors):
        vendors.creem_status = 500

        with pytest.raises(ApiError, match="create creem session failed: creem is down"):
            await create_checkout(session, user, _request(), creem=creem, web_url="http://x", creem_products=PRODUCTS)

    async def test_vendor_response_without_url(self, session, user, creem, vendors):
        vendors.creem_checkout_url = ""

        with pytest.raises(ApiError, match="missing URL"):
            await create_checkout(session, user, _request(), creem=creem, web_url="http://x", creem_products=PRODUCTS)

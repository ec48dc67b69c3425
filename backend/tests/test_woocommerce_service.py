"""
Tests for order filtering, daily stats and the WooCommerce client
"""
import asyncio
from datetime import date

import httpx
import pytest
from cryptography.fernet import Fernet

from app.models import BusinessSettings
from app.services.woocommerce_service import (
    WooCommerceClient,
    WooCommerceNotConfigured,
    calculate_daily_stats,
    client_from_settings,
    filter_valid_orders,
    order_date,
)
from app.utils.encryption import encrypt_secret
from conftest import make_order


def _client(handler):
    return WooCommerceClient(
        url="https://shop.example.com/",
        consumer_key=" ck_test ",
        consumer_secret="cs_test",
        transport=httpx.MockTransport(handler),
    )


class TestFilterValidOrders:

    def test_keeps_whitelisted_statuses(self):
        orders = [
            make_order(1, status="completed"),
            make_order(2, status="cancelled"),
            make_order(3, status="refunded"),
        ]
        valid = filter_valid_orders(orders, ["completed", "processing"])
        assert [o["id"] for o in valid] == [1]

    def test_status_match_is_case_insensitive(self):
        valid = filter_valid_orders([make_order(1, status="Completed")], [" completed"])
        assert len(valid) == 1


class TestDailyStats:

    def test_aggregates_revenue_shipping_and_items(self):
        orders = [
            make_order(1, total="100.00", shipping_total="10.00", shipping_methods=["flat_rate"], quantities=(1, 2)),
            make_order(2, total="50.00", shipping_total="5.00", shipping_methods=["local_pickup"], quantities=(1,)),
        ]
        stats = calculate_daily_stats(orders)
        assert stats.revenue == 150
        assert stats.shipping_cost == 10
        assert stats.orders_count == 2
        assert stats.items_count == 4

    def test_fixed_shipping_cost_per_shipped_order(self):
        orders = [
            make_order(1, shipping_total="10.00", shipping_methods=["flat_rate"]),
            make_order(2, shipping_total="0.00", shipping_methods=["free_shipping"]),
            make_order(3, shipping_methods=[]),
        ]
        assert calculate_daily_stats(orders, fixed_shipping_cost=15).shipping_cost == 30

    def test_fixed_shipping_skips_free_orders_when_disabled(self):
        orders = [
            make_order(1, shipping_total="10.00", shipping_methods=["flat_rate"]),
            make_order(2, shipping_total="0.00", shipping_methods=["free_shipping"]),
        ]
        stats = calculate_daily_stats(orders, fixed_shipping_cost=15, charge_shipping_on_free_orders=False)
        assert stats.shipping_cost == 15

    def test_bad_numbers_count_as_zero(self):
        order = make_order(1, total="n/a")
        order["line_items"] = [{"quantity": "x"}]
        stats = calculate_daily_stats([order])
        assert stats.revenue == 0
        assert stats.items_count == 1

    def test_empty_day(self):
        stats = calculate_daily_stats([])
        assert stats.revenue == 0
        assert stats.orders_count == 0


def test_order_date():
    assert order_date(make_order(1, created="2024-03-10T23:30:00")) == date(2024, 3, 10)


@pytest.mark.parametrize("created", ["not a date", 1710072000])
def test_order_date_rejects_garbage(created):
    with pytest.raises(ValueError):
        order_date(make_order(1, created=created))


class TestWooCommerceClient:

    def test_paginates_until_short_page(self):
        seen = []

        def handler(request):
            seen.append(request)
            page = int(request.url.params["page"])
            count = 100 if page == 1 else 30
            return httpx.Response(200, json=[make_order(page * 1000 + i) for i in range(count)])

        orders = asyncio.run(_client(handler).fetch_orders_by_date(date(2024, 3, 10), ["completed"]))

        assert len(orders) == 130
        assert len(seen) == 2
        params = seen[0].url.params
        assert params["after"] == "2024-03-09T23:59:59"
        assert params["before"] == "2024-03-10T23:59:59"
        assert params["per_page"] == "100"
        assert params["status"] == "completed"
        assert seen[0].url.path == "/wp-json/wc/v3/orders"
        assert seen[0].headers["authorization"].startswith("Basic ")

    def test_stops_at_page_limit(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[make_order(i) for i in range(100)])

        orders = asyncio.run(_client(handler).fetch_orders_by_date(date(2024, 3, 10), ["completed"]))

        assert len(seen) == 10
        assert len(orders) == 1000

    def test_http_error_propagates(self):
        def handler(request):
            return httpx.Response(401, json={"code": "woocommerce_rest_cannot_view"})

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(_client(handler).fetch_orders_by_date(date(2024, 3, 10), ["completed"]))


class TestClientFromSettings:

    def test_requires_credentials(self):
        with pytest.raises(WooCommerceNotConfigured):
            client_from_settings(None)
        with pytest.raises(WooCommerceNotConfigured):
            client_from_settings(BusinessSettings(woo_url="https://shop.example.com", consumer_key="ck"))

    def test_decrypts_secret(self):
        settings_row = BusinessSettings(
            woo_url="https://shop.example.com/",
            consumer_key="ck_live",
            consumer_secret_encrypted=encrypt_secret("cs_live"),
        )
        client = client_from_settings(settings_row)
        assert client.auth == ("ck_live", "cs_live")
        assert client.base_url == "https://shop.example.com/wp-json/wc/v3"

    def test_secret_from_another_key_needs_reentry(self):
        foreign = Fernet(Fernet.generate_key()).encrypt(b"cs_live").decode()
        settings_row = BusinessSettings(
            woo_url="https://shop.example.com/",
            consumer_key="ck_live",
            consumer_secret_encrypted=foreign,
        )
        with pytest.raises(WooCommerceNotConfigured, match="cannot be decrypted"):
            client_from_settings(settings_row)

"""
Tests for funnel reconciliation, channel attribution and period statistics
"""
from datetime import date
from types import SimpleNamespace

import pytest

from app.services.analytics_service import (
    channel_metrics,
    classify_channel,
    period_statistics,
    previous_period,
    reconcile_funnel,
)


STEPS = [("session_start", 1000), ("add_to_cart", 200), ("begin_checkout", 80), ("purchase", 30)]


def _day(day, revenue=0.0, profit=0.0, orders=0, expenses=0.0, **costs):
    values = dict(
        google_ads_cost=0.0,
        facebook_ads_cost=0.0,
        tiktok_ads_cost=0.0,
        shipping_cost=0.0,
        materials_cost=0.0,
        credit_card_fees=0.0,
        vat=0.0,
    )
    values.update(costs)
    return SimpleNamespace(
        date=day,
        revenue=revenue,
        profit=profit,
        orders_count=orders,
        total_expenses=expenses,
        **values,
    )


class TestFunnel:

    def test_real_orders_replace_purchase_step(self):
        result = reconcile_funnel(STEPS, real_purchases=40, real_revenue=4000)

        assert [s["users"] for s in result["steps"]] == [1000, 200, 80, 40]
        assert [s["dropoff"] for s in result["steps"]] == pytest.approx([0, 80, 60, 50])
        assert result["conversion_rate"] == pytest.approx(4)
        assert result["cart_abandonment"] == pytest.approx(80)
        assert result["average_order_value"] == pytest.approx(100)
        assert result["real_data"] == {
            "source": "woocommerce",
            "purchases": 40,
            "revenue": 4000,
            "ga4_purchases": 30,
            "discrepancy": 10,
        }

    def test_more_purchases_than_checkouts_floors_dropoff(self):
        result = reconcile_funnel(STEPS, real_purchases=120, real_revenue=6000)
        assert result["steps"][-1]["dropoff"] == 0
        assert result["cart_abandonment"] == pytest.approx(40)

    def test_zero_real_orders(self):
        result = reconcile_funnel(STEPS, real_purchases=0, real_revenue=0)
        assert result["conversion_rate"] == 0
        assert result["average_order_value"] == 0
        assert result["cart_abandonment"] == 100

    def test_without_real_data_keeps_ga4_numbers(self):
        result = reconcile_funnel(STEPS, real_purchases=None, real_revenue=0)
        assert result["steps"][-1]["users"] == 30
        assert result["real_data"]["source"] == "ga4"
        assert result["real_data"]["discrepancy"] == 0

    def test_empty_first_step(self):
        result = reconcile_funnel([("session_start", 0), ("purchase", 0)], real_purchases=3, real_revenue=90)
        assert result["conversion_rate"] == 0
        assert result["steps"][1]["dropoff"] == 0

    def test_requires_steps(self):
        with pytest.raises(ValueError):
            reconcile_funnel([], real_purchases=1, real_revenue=10)


class TestChannels:

    @pytest.mark.parametrize("source,medium,expected", [
        ("(direct)", "(none)", "direct"),
        ("", "", "direct"),
        ("google", "cpc", "google"),
        ("google", "organic", "organic"),
        ("google", None, "organic"),
        ("facebook.com", "referral", "facebook"),
        ("l.instagram.com", "referral", "facebook"),
        ("tiktok", "paid_social", "tiktok"),
        ("bing", "organic", "organic"),
        ("newsletter", "email", "other"),
        ("m.facebook.com", "referral", "facebook"),
        ("fb", "paid_social", "facebook"),
        ("ig", "social", "facebook"),
        ("metacrawler.com", None, "other"),
        ("fbsearch.example", "referral", "organic"),
        ("buffbikes.com", None, "other"),
    ])
    def test_classify(self, source, medium, expected):
        assert classify_channel(source, medium) == expected

    def test_metrics_sorted_by_revenue(self):
        sources = [
            {"source": "google", "medium": "cpc", "sessions": 100, "conversions": 5, "revenue": 500},
            {"source": "google", "medium": "organic", "sessions": 200, "conversions": 4, "revenue": 300},
            {"source": "(direct)", "medium": "(none)", "sessions": 50, "conversions": 2, "revenue": 200},
            {"source": "facebook.com", "medium": "referral", "sessions": 30, "conversions": 1, "revenue": 100},
        ]
        metrics = channel_metrics(sources, {"google": 100, "facebook": 50, "tiktok": 0})

        assert [m["channel"] for m in metrics] == ["google", "organic", "direct", "facebook"]
        google = metrics[0]
        assert google["cpa"] == pytest.approx(20)
        assert google["roas"] == pytest.approx(5)
        assert metrics[-1]["roas"] == pytest.approx(2)
        assert metrics[1]["cpa"] == 0
        assert metrics[1]["roas"] == 0

    def test_spend_without_sessions_is_reported(self):
        metrics = channel_metrics([], {"google": 0, "facebook": 0, "tiktok": 25})
        assert metrics == [{
            "channel": "tiktok",
            "sessions": 0,
            "conversions": 0,
            "revenue": 0,
            "spend": 25,
            "cpa": 0,
            "roas": 0,
        }]


class TestStatistics:

    def test_previous_period(self):
        assert previous_period(date(2024, 3, 1), date(2024, 3, 31)) == (date(2024, 1, 30), date(2024, 2, 29))

    def test_period_totals_and_trends(self):
        records = [
            _day(date(2024, 3, 2), revenue=600, profit=200, orders=6, expenses=400, google_ads_cost=50),
            _day(date(2024, 3, 1), revenue=400, profit=100, orders=4, expenses=300, vat=72),
        ]
        previous = [_day(date(2024, 2, 28), revenue=500, profit=100, orders=5, expenses=400)]

        stats = period_statistics(records, previous, date(2024, 3, 1), date(2024, 3, 2))

        assert stats["total_revenue"] == 1000
        assert stats["total_profit"] == 300
        assert stats["total_orders"] == 10
        assert stats["average_order_value"] == 100
        assert stats["average_daily_revenue"] == 500
        assert stats["average_roi"] == pytest.approx(30)
        assert stats["profit_margin"] == pytest.approx(30)
        assert stats["expenses_breakdown"]["google_ads"] == 50
        assert stats["expenses_breakdown"]["vat"] == 72
        assert stats["trends"]["revenue"] == pytest.approx(100)
        assert stats["trends"]["profit"] == pytest.approx(200)
        assert stats["trends"]["orders"] == pytest.approx(100)
        assert stats["trends"]["roi"] == pytest.approx(50)
        assert [d["date"] for d in stats["daily_data"]] == [date(2024, 3, 1), date(2024, 3, 2)]
        assert stats["best_day"] == {"date": date(2024, 3, 2), "revenue": 600}
        assert stats["worst_day"] == {"date": date(2024, 3, 1), "revenue": 400}
        assert stats["most_profitable_day"] == {"date": date(2024, 3, 2), "profit": 200}
        assert stats["days_with_data"] == 2

    def test_no_previous_data_means_flat_trends(self):
        stats = period_statistics([_day(date(2024, 3, 1), revenue=100, profit=10, orders=1)], [],
                                  date(2024, 3, 1), date(2024, 3, 1))
        assert stats["trends"] == {"revenue": 0, "profit": 0, "orders": 0, "roi": 0}

    def test_empty_period(self):
        stats = period_statistics([], [], date(2024, 3, 1), date(2024, 3, 7))
        assert stats["total_revenue"] == 0
        assert stats["average_order_value"] == 0
        assert stats["best_day"] is None
        assert stats["days_with_data"] == 0

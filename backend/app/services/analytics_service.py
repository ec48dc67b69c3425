"""
Analytics Service

Reconciles GA4-style funnel and traffic data against real orders and ad
spend recorded in daily cashflow. Everything here works on plain values;
the API layer does the database reads.
"""
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Dict, Any, Optional, Sequence, Tuple

from app.services.calculations import calculate_roi


CHANNELS = ("google", "facebook", "tiktok", "organic", "direct", "other")

META_SOURCE_TOKENS = frozenset({"facebook", "fb", "instagram", "ig", "meta"})
PAID_MEDIUMS = {"cpc", "ppc", "paid", "paidsearch", "paid_social", "paidsocial", "cpm"}


def _rate(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _floored_percent_drop(current: float, previous: float) -> float:
    """Percentage lost between two steps, never negative"""
    if not previous:
        return 0.0
    return max(0.0, (1 - current / previous) * 100)


# ==================== FUNNEL ====================

def reconcile_funnel(
    steps: Sequence[Tuple[str, float]],
    real_purchases: Optional[int],
    real_revenue: float,
) -> Dict[str, Any]:
    """
    Replace the funnel's purchase step with the real order count and
    recompute the derived rates.

    Args:
        steps: Ordered (step name, users) pairs; the last one is the purchase step
        real_purchases: Orders counted in daily cashflow, None when there is no data
        real_revenue: Revenue of those orders

    Returns:
        Dict with steps (including dropoff), conversion_rate, cart_abandonment,
        average_order_value and real_data
    """
    if not steps:
        raise ValueError("Funnel needs at least one step")

    users = [float(u or 0) for _, u in steps]
    ga4_purchases = users[-1]

    if real_purchases is not None:
        users[-1] = float(real_purchases)
        source = "woocommerce"
    else:
        source = "ga4"

    purchases = users[-1]

    reconciled = []
    for index, (name, _) in enumerate(steps):
        dropoff = 0.0 if index == 0 else _floored_percent_drop(users[index], users[index - 1])
        reconciled.append({"step": name, "users": users[index], "dropoff": dropoff})

    cart_users = users[1] if len(users) > 1 else users[0]

    return {
        "steps": reconciled,
        "conversion_rate": max(0.0, _rate(purchases, users[0]) * 100),
        "cart_abandonment": _floored_percent_drop(purchases, cart_users),
        "average_order_value": _rate(real_revenue, purchases),
        "real_data": {
            "source": source,
            "purchases": int(purchases),
            "revenue": real_revenue,
            "ga4_purchases": ga4_purchases,
            "discrepancy": purchases - ga4_purchases,
        },
    }


# ==================== CHANNELS ====================

def classify_channel(source: str, medium: Optional[str] = None) -> str:
    """Map a GA4 source / medium pair to a reporting channel"""
    source = (source or "").strip().lower()
    medium = (medium or "").strip().lower()

    if source in ("(direct)", "direct") or (not source and medium in ("", "(none)")):
        return "direct"
    if "google" in source and medium in PAID_MEDIUMS:
        return "google"
    # match whole tokens, so "metacrawler" stays "other"
    if META_SOURCE_TOKENS.intersection(re.split(r"[^a-z0-9]+", source)):
        return "facebook"
    if "tiktok" in source:
        return "tiktok"
    if medium in ("organic", "referral") or "google" in source:
        return "organic"
    return "other"


@dataclass
class ChannelTotals:
    channel: str
    sessions: int = 0
    conversions: float = 0.0
    revenue: float = 0.0
    spend: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "sessions": self.sessions,
            "conversions": self.conversions,
            "revenue": self.revenue,
            "spend": self.spend,
            "cpa": _rate(self.spend, self.conversions),
            "roas": _rate(self.revenue, self.spend),
        }


def channel_metrics(sources: List[Dict[str, Any]], ad_spend: Dict[str, float]) -> List[Dict[str, Any]]:
    """
    ROAS and CPA per channel.

    Channels with neither sessions nor spend are left out; the rest are
    sorted by revenue, highest first.
    """
    totals = {name: ChannelTotals(channel=name) for name in CHANNELS}

    for row in sources:
        channel = classify_channel(row.get("source"), row.get("medium"))
        bucket = totals[channel]
        bucket.sessions += int(row.get("sessions") or 0)
        bucket.conversions += float(row.get("conversions") or 0)
        bucket.revenue += float(row.get("revenue") or 0)

    for channel in ("google", "facebook", "tiktok"):
        totals[channel].spend = float(ad_spend.get(channel) or 0)

    metrics = [t.as_dict() for t in totals.values() if t.sessions > 0 or t.spend > 0]
    return sorted(metrics, key=lambda m: m["revenue"], reverse=True)


# ==================== STATISTICS ====================

def previous_period(start: date, end: date) -> Tuple[date, date]:
    """The period of equal length ending the day before start"""
    length = (end - start).days + 1
    return start - timedelta(days=length), start - timedelta(days=1)


def _percent_change(current: float, previous: float) -> float:
    return (current - previous) / previous * 100 if previous > 0 else 0.0


@dataclass
class PeriodTotals:
    revenue: float = 0.0
    profit: float = 0.0
    orders: int = 0
    expenses: float = 0.0
    breakdown: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records) -> "PeriodTotals":
        totals = cls(breakdown={
            "google_ads": 0.0,
            "facebook_ads": 0.0,
            "tiktok_ads": 0.0,
            "shipping": 0.0,
            "materials": 0.0,
            "credit_card_fees": 0.0,
            "vat": 0.0,
        })
        for r in records:
            totals.revenue += r.revenue or 0.0
            totals.profit += r.profit or 0.0
            totals.orders += r.orders_count or 0
            totals.expenses += r.total_expenses or 0.0
            totals.breakdown["google_ads"] += r.google_ads_cost or 0.0
            totals.breakdown["facebook_ads"] += r.facebook_ads_cost or 0.0
            totals.breakdown["tiktok_ads"] += r.tiktok_ads_cost or 0.0
            totals.breakdown["shipping"] += r.shipping_cost or 0.0
            totals.breakdown["materials"] += r.materials_cost or 0.0
            totals.breakdown["credit_card_fees"] += r.credit_card_fees or 0.0
            totals.breakdown["vat"] += r.vat or 0.0
        return totals

    @property
    def roi(self) -> float:
        return calculate_roi(self.profit, self.revenue)


def period_statistics(records, previous_records, start: date, end: date) -> Dict[str, Any]:
    """
    Totals, averages, trends and best/worst days for a period.

    Args:
        records: Daily cashflow rows of the period
        previous_records: Rows of the previous period of equal length
    """
    records = sorted(records, key=lambda r: r.date)
    current = PeriodTotals.from_records(records)
    previous = PeriodTotals.from_records(previous_records)
    days_with_data = len(records)

    # The previous period's ROI trend base uses 0, not -100, for a revenue-less loss
    previous_roi = previous.profit * 100 / previous.revenue if previous.revenue > 0 else 0.0

    best_day = worst_day = most_profitable_day = None
    if records:
        by_revenue = sorted(records, key=lambda r: r.revenue or 0.0, reverse=True)
        by_profit = sorted(records, key=lambda r: r.profit or 0.0, reverse=True)
        best_day = {"date": by_revenue[0].date, "revenue": by_revenue[0].revenue or 0.0}
        worst_day = {"date": by_revenue[-1].date, "revenue": by_revenue[-1].revenue or 0.0}
        most_profitable_day = {"date": by_profit[0].date, "profit": by_profit[0].profit or 0.0}

    return {
        "total_revenue": current.revenue,
        "total_profit": current.profit,
        "total_orders": current.orders,
        "total_expenses": current.expenses,
        "average_order_value": _rate(current.revenue, current.orders),
        "average_daily_revenue": _rate(current.revenue, days_with_data),
        "average_daily_profit": _rate(current.profit, days_with_data),
        "average_roi": current.roi,
        "profit_margin": current.profit * 100 / current.revenue if current.revenue > 0 else 0.0,
        "expenses_breakdown": current.breakdown,
        "trends": {
            "revenue": _percent_change(current.revenue, previous.revenue),
            "profit": _percent_change(current.profit, previous.profit),
            "orders": _percent_change(current.orders, previous.orders),
            "roi": _percent_change(current.roi, previous_roi),
        },
        "daily_data": [
            {
                "date": r.date,
                "revenue": r.revenue or 0.0,
                "profit": r.profit or 0.0,
                "orders": r.orders_count or 0,
                "expenses": r.total_expenses or 0.0,
            }
            for r in records
        ],
        "best_day": best_day,
        "worst_day": worst_day,
        "most_profitable_day": most_profitable_day,
        "days_with_data": days_with_data,
        "period_start": start,
        "period_end": end,
    }

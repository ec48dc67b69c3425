"""
Statistics Schemas
"""
from typing import Optional, List
from datetime import date

from app.schemas.base import CamelModel


class ExpensesBreakdown(CamelModel):
    google_ads: float
    facebook_ads: float
    tiktok_ads: float
    shipping: float
    materials: float
    credit_card_fees: float
    vat: float


class Trends(CamelModel):
    """Percent change against the previous period of equal length"""
    revenue: float
    profit: float
    orders: float
    roi: float


class StatisticsDay(CamelModel):
    date: date
    revenue: float
    profit: float
    orders: int
    expenses: float


class DayRevenue(CamelModel):
    date: date
    revenue: float


class DayProfit(CamelModel):
    date: date
    profit: float


class StatisticsResponse(CamelModel):
    total_revenue: float
    total_profit: float
    total_orders: int
    total_expenses: float
    average_order_value: float
    average_daily_revenue: float
    average_daily_profit: float
    average_roi: float
    profit_margin: float
    expenses_breakdown: ExpensesBreakdown
    trends: Trends
    daily_data: List[StatisticsDay]
    best_day: Optional[DayRevenue] = None
    worst_day: Optional[DayRevenue] = None
    most_profitable_day: Optional[DayProfit] = None
    days_with_data: int
    period_start: date
    period_end: date

"""
Daily Cashflow Schemas
"""
from pydantic import Field
from typing import Optional, List, Dict
from uuid import UUID
import datetime as datetime_module
from datetime import date, datetime

from app.schemas.base import CamelModel


class DailyCashflowInput(CamelModel):
    """Manual upsert of a day's figures; omitted fields keep their stored value"""
    business_id: UUID
    date: date
    revenue: Optional[float] = None
    orders_count: Optional[int] = None
    items_count: Optional[int] = None
    google_ads_cost: Optional[float] = None
    facebook_ads_cost: Optional[float] = None
    tiktok_ads_cost: Optional[float] = None
    shipping_cost: Optional[float] = None
    materials_cost: Optional[float] = None
    credit_card_fees: Optional[float] = None
    vat: Optional[float] = None


class DailyCashflowResponse(CamelModel):
    id: UUID
    business_id: UUID
    date: date
    revenue: float
    orders_count: int
    items_count: int
    google_ads_cost: float
    facebook_ads_cost: float
    tiktok_ads_cost: float
    shipping_cost: float
    materials_cost: float
    credit_card_fees: float
    vat: float
    expenses_vat: float
    expenses_no_vat: float
    employee_cost: float
    customer_refunds: float
    total_expenses: float
    profit: float
    roi: float
    created_at: datetime
    updated_at: datetime


class DailyCashflowEnvelope(CamelModel):
    data: DailyCashflowResponse


class DailyCashflowListResponse(CamelModel):
    data: List[DailyCashflowResponse]


class SyncRequest(CamelModel):
    """Sync a single date, or every date from start_date to end_date"""
    business_id: UUID
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    date: Optional[datetime_module.date] = None


class SyncResponse(CamelModel):
    success: bool = True
    days_synced: int
    orders_counted: int
    data: List[DailyCashflowResponse]


class RecalculateRequest(CamelModel):
    business_id: UUID
    start_date: date
    end_date: date


class RecalculateResponse(CamelModel):
    success: bool = True
    updated: int


class DailyBreakdownRow(CamelModel):
    date: date
    has_record: bool
    revenue: float
    orders_count: int
    items_count: int
    google_ads_cost: float
    facebook_ads_cost: float
    tiktok_ads_cost: float
    shipping_cost: float
    materials_cost: float
    credit_card_fees: float
    vat: float
    expenses_vat: float
    expenses_no_vat: float
    employee_cost: float
    customer_refunds: float
    total_expenses: float
    profit: float
    roi: float


class DailyBreakdownResponse(CamelModel):
    data: List[DailyBreakdownRow]


class MonthlyTotals(CamelModel):
    revenue: float
    orders_count: int
    items_count: int
    profit: float
    profit_percent: float
    total_expenses: float


class CostBreakdown(CamelModel):
    google_ads_cost: float
    facebook_ads_cost: float
    tiktok_ads_cost: float
    shipping_cost: float
    materials_cost: float
    credit_card_fees: float
    vat: float
    expenses_vat: float
    expenses_no_vat: float
    employee_cost: float
    customer_refunds: float


class MonthlySummaryResponse(CamelModel):
    month: int = Field(..., ge=1, le=12)
    year: int
    start_date: date
    end_date: date
    summary: MonthlyTotals
    breakdown: CostBreakdown


class DailyCostsResponse(CamelModel):
    """Line-item cost for one date, or grouped by date for a range"""
    total_cost: float
    items_count: Optional[int] = None
    costs_by_date: Optional[Dict[date, float]] = None
    date: Optional[datetime_module.date] = None

"""
Statistics API Endpoints
"""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import check_date_range, get_business
from app.models.business import Business
from app.models.daily_cashflow import DailyCashflow
from app.schemas.statistics import StatisticsResponse
from app.services.analytics_service import period_statistics, previous_period

router = APIRouter(tags=["statistics"])

PERIODS = ("week", "month", "quarter", "year")


def period_bounds(period: str, today: date):
    """Start and end of a named period ending today"""
    if period == "week":
        return today - timedelta(days=7), today
    if period == "quarter":
        return date(today.year, (today.month - 1) // 3 * 3 + 1, 1), today
    if period == "year":
        return date(today.year, 1, 1), today
    return today.replace(day=1), today


def _records(db: Session, business_id, start: date, end: date):
    return db.query(DailyCashflow).filter(
        DailyCashflow.business_id == business_id,
        DailyCashflow.date >= start,
        DailyCashflow.date <= end,
    ).order_by(DailyCashflow.date).all()


@router.get("/statistics", response_model=StatisticsResponse)
async def statistics(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    period: str = Query("month", description="week, month, quarter or year; ignored with explicit dates"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    """
    Period totals, averages and trends against the previous period of
    equal length
    """
    if start_date and end_date:
        start, end = start_date, end_date
    else:
        if period not in PERIODS:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid period: {period}")
        start, end = period_bounds(period, date.today())

    check_date_range(start, end)

    prev_start, prev_end = previous_period(start, end)

    return period_statistics(
        _records(db, business.id, start, end),
        _records(db, business.id, prev_start, prev_end),
        start,
        end,
    )

"""
Daily Cashflow API Endpoints
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import check_date_range, get_business, get_woocommerce_factory, load_business, WooCommerceFactory
from app.models.business import Business
from app.models.daily_cashflow import DailyCashflow
from app.models.order_item_cost import OrderItemCost
from app.schemas.cashflow import (
    DailyCashflowInput,
    DailyCashflowResponse,
    DailyCashflowEnvelope,
    DailyCashflowListResponse,
    SyncRequest,
    SyncResponse,
    RecalculateRequest,
    RecalculateResponse,
    DailyBreakdownRow,
    DailyBreakdownResponse,
    MonthlySummaryResponse,
    DailyCostsResponse,
)
from app.services import cashflow_service
from app.services.calculations import date_range, line_items_cost

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cashflow"])

MAX_SYNC_DAYS = 93


@router.get("/cashflow", response_model=DailyCashflowListResponse)
async def list_cashflow(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    """
    Stored daily records for a date range, newest first
    """
    check_date_range(start_date, end_date)

    records = db.query(DailyCashflow).filter(
        DailyCashflow.business_id == business.id,
        DailyCashflow.date >= start_date,
        DailyCashflow.date <= end_date,
    ).order_by(DailyCashflow.date.desc()).all()

    return DailyCashflowListResponse(data=[DailyCashflowResponse.model_validate(r) for r in records])


@router.post("/cashflow", response_model=DailyCashflowEnvelope)
async def upsert_cashflow(
    payload: DailyCashflowInput,
    db: Session = Depends(get_db),
):
    """
    Create or update a day's figures by hand.

    Only the fields sent are changed. The day's share of expenses, payroll
    and refunds is filled in, then total_expenses, profit and roi are
    recomputed from the stored components.
    """
    business = load_business(db, payload.business_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"business_id", "date"})
    overheads = cashflow_service.day_overheads(db, business.id, payload.date)

    def _apply(record: DailyCashflow) -> None:
        for name, value in changes.items():
            setattr(record, name, value or 0)
        cashflow_service.apply_overheads(record, overheads)
        cashflow_service.refresh_totals(record)

    record = cashflow_service.save_daily_record(db, business.id, payload.date, _apply)
    return DailyCashflowEnvelope(data=DailyCashflowResponse.model_validate(record))


@router.post("/cashflow/sync", response_model=SyncResponse)
async def sync_cashflow(
    payload: SyncRequest,
    db: Session = Depends(get_db),
    woocommerce_factory: WooCommerceFactory = Depends(get_woocommerce_factory),
):
    """
    Pull orders from WooCommerce and rebuild the daily records of one date
    or of every date in a range
    """
    business = load_business(db, payload.business_id)

    if payload.date:
        days = [payload.date]
    elif payload.start_date and payload.end_date:
        check_date_range(payload.start_date, payload.end_date)
        days = date_range(payload.start_date, payload.end_date)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date or startDate and endDate are required",
        )

    if len(days) > MAX_SYNC_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot sync more than {MAX_SYNC_DAYS} days at once",
        )

    client = woocommerce_factory(cashflow_service.get_business_settings(db, business.id))

    records = []
    orders_counted = 0
    for day in days:
        record, counted = await cashflow_service.sync_day(db, business.id, day, client)
        records.append(DailyCashflowResponse.model_validate(record))
        orders_counted += counted

    logger.info("Synced %d day(s) for business %s, %d orders", len(days), business.id, orders_counted)

    return SyncResponse(days_synced=len(days), orders_counted=orders_counted, data=records)


@router.post("/cashflow/recalculate", response_model=RecalculateResponse)
async def recalculate_cashflow(
    payload: RecalculateRequest,
    db: Session = Depends(get_db),
):
    """
    Recompute stored records in a range with the current settings and overheads
    """
    business = load_business(db, payload.business_id)
    check_date_range(payload.start_date, payload.end_date)

    updated = cashflow_service.recalculate_range(db, business.id, payload.start_date, payload.end_date)
    return RecalculateResponse(updated=updated)


@router.get("/cashflow/breakdown", response_model=DailyBreakdownResponse)
async def cashflow_breakdown(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    """
    Profitability of every day in the range, including days without a
    stored record (which still carry expenses, payroll and refunds)
    """
    check_date_range(start_date, end_date)
    rows = cashflow_service.build_breakdown(db, business.id, start_date, end_date)
    return DailyBreakdownResponse(data=[DailyBreakdownRow(**row) for row in rows])


@router.get("/cashflow/monthly-summary", response_model=MonthlySummaryResponse)
async def monthly_summary(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    return cashflow_service.monthly_summary(db, business.id, year, month)


@router.get("/daily-costs", response_model=DailyCostsResponse, response_model_exclude_none=True)
async def daily_costs(
    day: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    """
    Recorded line-item cost for a single date, or grouped by date for a range
    """
    if not day and not start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date or date range is required",
        )

    query = db.query(OrderItemCost).filter(OrderItemCost.business_id == business.id)

    if day:
        items = query.filter(OrderItemCost.order_date == day).all()
        return DailyCostsResponse(
            date=day,
            total_cost=line_items_cost((i.item_cost, i.quantity) for i in items),
            items_count=len(items),
        )

    end_date = end_date or start_date
    check_date_range(start_date, end_date)
    items = query.filter(
        OrderItemCost.order_date >= start_date,
        OrderItemCost.order_date <= end_date,
    ).all()

    costs_by_date = {}
    for item in items:
        costs_by_date[item.order_date] = costs_by_date.get(item.order_date, 0.0) + line_items_cost(
            [(item.item_cost, item.quantity)]
        )

    return DailyCostsResponse(costs_by_date=costs_by_date, total_cost=sum(costs_by_date.values()))

"""
Customer Refund API Endpoints
"""
from collections import defaultdict
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_business, load_business
from app.models.business import Business
from app.models.customer_refund import CustomerRefund
from app.schemas.refund import (
    RefundCreate,
    RefundUpdate,
    RefundResponse,
    RefundListResponse,
    RefundEnvelope,
)
from app.services import cashflow_service

router = APIRouter(tags=["refunds"])


def _get_refund_or_404(db: Session, refund_id: UUID, business_id: UUID) -> CustomerRefund:
    refund = db.query(CustomerRefund).filter(
        CustomerRefund.id == refund_id,
        CustomerRefund.business_id == business_id,
    ).first()
    if not refund:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Refund not found")
    return refund


@router.get("/refunds", response_model=RefundListResponse)
async def list_refunds(
    day: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    query = db.query(CustomerRefund).filter(CustomerRefund.business_id == business.id)
    if day:
        query = query.filter(CustomerRefund.refund_date == day)
    elif start_date and end_date:
        query = query.filter(CustomerRefund.refund_date >= start_date, CustomerRefund.refund_date <= end_date)

    refunds = query.order_by(CustomerRefund.refund_date.desc()).all()

    refunds_by_date = defaultdict(float)
    for r in refunds:
        refunds_by_date[r.refund_date] += r.amount or 0.0

    return RefundListResponse(
        refunds=[RefundResponse.model_validate(r) for r in refunds],
        refunds_by_date=dict(refunds_by_date),
    )


@router.post("/refunds", response_model=RefundEnvelope, response_model_exclude_none=True)
async def create_refund(
    payload: RefundCreate,
    db: Session = Depends(get_db),
):
    """
    Record a customer refund and recompute the daily records of its month
    """
    business = load_business(db, payload.business_id)

    refund = CustomerRefund(
        business_id=business.id,
        refund_date=payload.refund_date,
        amount=payload.amount,
        description=payload.description or "",
        order_id=payload.order_id or None,
        customer_name=payload.customer_name or None,
        reason=payload.reason or None,
    )
    db.add(refund)
    db.commit()
    db.refresh(refund)

    cashflow_service.recalculate_month_of(db, business.id, refund.refund_date)

    return RefundEnvelope(data=RefundResponse.model_validate(refund))


@router.put("/refunds", response_model=RefundEnvelope, response_model_exclude_none=True)
async def update_refund(
    payload: RefundUpdate,
    db: Session = Depends(get_db),
):
    business = load_business(db, payload.business_id)
    refund = _get_refund_or_404(db, payload.id, business.id)
    previous_date = refund.refund_date

    refund.refund_date = payload.refund_date
    refund.amount = payload.amount
    refund.description = payload.description or ""
    refund.customer_name = payload.customer_name or None

    db.commit()
    db.refresh(refund)

    cashflow_service.recalculate_month_of(db, business.id, previous_date)
    if (previous_date.year, previous_date.month) != (refund.refund_date.year, refund.refund_date.month):
        cashflow_service.recalculate_month_of(db, business.id, refund.refund_date)

    return RefundEnvelope(data=RefundResponse.model_validate(refund), updated=True)


@router.delete("/refunds")
async def delete_refund(
    refund_id: UUID = Query(..., alias="id"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    refund = _get_refund_or_404(db, refund_id, business.id)
    refund_date = refund.refund_date

    db.delete(refund)
    db.commit()

    cashflow_service.recalculate_month_of(db, business.id, refund_date)

    return {"success": True}

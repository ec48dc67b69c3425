"""
Expense API Endpoints - VAT and non-VAT expenses
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_business, load_business
from app.models.business import Business
from app.models.expense import ExpenseType, ExpenseVat, EXPENSE_MODELS
from app.schemas.expense import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseListResponse,
    ExpenseEnvelope,
    ExpenseCopyRequest,
    ExpenseCopyResponse,
)
from app.services import cashflow_service
from app.services.calculations import days_in_month, month_bounds

logger = logging.getLogger(__name__)

router = APIRouter(tags=["expenses"])


def _list_expenses(db: Session, model, business_id: UUID, day: Optional[date], start: Optional[date], end: Optional[date]):
    """Expenses of one table; a failing lookup is logged and returns nothing"""
    query = db.query(model).filter(model.business_id == business_id)
    if day:
        query = query.filter(model.expense_date == day)
    elif start and end:
        query = query.filter(model.expense_date >= start, model.expense_date <= end)

    try:
        return query.order_by(model.expense_date.desc()).all()
    except SQLAlchemyError as e:
        logger.error("Error fetching %s: %s", model.__tablename__, e)
        db.rollback()
        return []


def _get_expense_or_404(db: Session, expense_type: ExpenseType, expense_id: UUID, business_id: UUID):
    model = EXPENSE_MODELS[expense_type]
    expense = db.query(model).filter(model.id == expense_id, model.business_id == business_id).first()
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


def _recalculate_months(db: Session, business_id: UUID, *days: date) -> None:
    for year, month in sorted({(d.year, d.month) for d in days}):
        cashflow_service.recalculate_month_of(db, business_id, date(year, month, 1))


@router.get("/expenses", response_model=ExpenseListResponse)
async def list_expenses(
    day: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    """
    VAT and non-VAT expenses with per-date totals
    """
    vat_expenses = _list_expenses(db, ExpenseVat, business.id, day, start_date, end_date)
    no_vat_expenses = _list_expenses(db, EXPENSE_MODELS[ExpenseType.NO_VAT], business.id, day, start_date, end_date)

    vat_by_date = defaultdict(lambda: {"total": 0.0, "vat_total": 0.0})
    for e in vat_expenses:
        vat_by_date[e.expense_date]["total"] += e.amount or 0.0
        vat_by_date[e.expense_date]["vat_total"] += e.vat_amount or 0.0

    no_vat_by_date = defaultdict(float)
    for e in no_vat_expenses:
        no_vat_by_date[e.expense_date] += e.amount or 0.0

    return ExpenseListResponse(
        vat_expenses=[ExpenseResponse.model_validate(e) for e in vat_expenses],
        no_vat_expenses=[ExpenseResponse.model_validate(e) for e in no_vat_expenses],
        vat_by_date=dict(vat_by_date),
        no_vat_by_date=dict(no_vat_by_date),
    )


@router.post("/expenses", response_model=ExpenseEnvelope, response_model_exclude_none=True)
async def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
):
    """
    Add an expense and recompute the daily records of its month
    """
    business = load_business(db, payload.business_id)
    model = EXPENSE_MODELS[payload.type]

    expense = model(
        business_id=business.id,
        expense_date=payload.expense_date,
        description=payload.description,
        amount=payload.amount or 0.0,
        supplier_name=payload.supplier_name or None,
        is_recurring=payload.is_recurring,
        category=payload.category or None,
    )
    if payload.type == ExpenseType.VAT:
        expense.vat_amount = payload.vat_amount or 0.0

    db.add(expense)
    db.commit()
    db.refresh(expense)

    _recalculate_months(db, business.id, expense.expense_date)

    return ExpenseEnvelope(data=ExpenseResponse.model_validate(expense), created=True)


@router.put("/expenses", response_model=ExpenseEnvelope, response_model_exclude_none=True)
async def update_expense(
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),
):
    business = load_business(db, payload.business_id)
    expense = _get_expense_or_404(db, payload.type, payload.id, business.id)
    previous_date = expense.expense_date

    expense.expense_date = payload.expense_date
    expense.description = payload.description
    expense.amount = payload.amount or 0.0
    expense.supplier_name = payload.supplier_name or None
    expense.is_recurring = payload.is_recurring
    expense.category = payload.category or None
    if payload.type == ExpenseType.VAT:
        expense.vat_amount = payload.vat_amount or 0.0

    db.commit()
    db.refresh(expense)

    _recalculate_months(db, business.id, previous_date, expense.expense_date)

    return ExpenseEnvelope(data=ExpenseResponse.model_validate(expense), updated=True)


@router.delete("/expenses")
async def delete_expense(
    expense_id: UUID = Query(..., alias="id"),
    expense_type: ExpenseType = Query(..., alias="type"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    expense = _get_expense_or_404(db, expense_type, expense_id, business.id)
    expense_date = expense.expense_date

    db.delete(expense)
    db.commit()

    _recalculate_months(db, business.id, expense_date)

    return {"success": True}


@router.post("/expenses/copy", response_model=ExpenseCopyResponse)
async def copy_expenses(
    payload: ExpenseCopyRequest,
    db: Session = Depends(get_db),
):
    """
    Copy every expense of one month into another month.
    Days past the end of the target month move to its last day.
    """
    business = load_business(db, payload.business_id)
    start, end = month_bounds(payload.from_year, payload.from_month)
    target_days = days_in_month(payload.to_year, payload.to_month)

    copied_count = 0
    for expense_type, model in EXPENSE_MODELS.items():
        expenses = db.query(model).filter(
            model.business_id == business.id,
            model.expense_date >= start,
            model.expense_date <= end,
        ).all()

        for expense in expenses:
            copy = model(
                business_id=business.id,
                expense_date=date(payload.to_year, payload.to_month, min(expense.expense_date.day, target_days)),
                description=expense.description,
                amount=expense.amount,
                supplier_name=expense.supplier_name,
                is_recurring=expense.is_recurring,
                category=expense.category,
            )
            if expense_type == ExpenseType.VAT:
                copy.vat_amount = expense.vat_amount
            db.add(copy)
            copied_count += 1

    db.commit()
    logger.info("Copied %d expenses for %s into %d-%02d", copied_count, business.id, payload.to_year, payload.to_month)

    if copied_count:
        _recalculate_months(db, business.id, date(payload.to_year, payload.to_month, 1))

    return ExpenseCopyResponse(copied_count=copied_count, message=f"Copied {copied_count} expenses")

"""
Expense Schemas
"""
from pydantic import Field
from typing import Optional, List, Dict
from uuid import UUID
from datetime import date, datetime

from app.models.expense import ExpenseType
from app.schemas.base import CamelModel


class ExpenseBase(CamelModel):
    expense_date: date
    description: str = Field(..., min_length=1)
    amount: float
    vat_amount: Optional[float] = Field(None, description="VAT paid, VAT expenses only")
    supplier_name: Optional[str] = None
    is_recurring: bool = False
    category: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    business_id: UUID
    type: ExpenseType = ExpenseType.NO_VAT


class ExpenseUpdate(ExpenseBase):
    id: UUID
    business_id: UUID
    type: ExpenseType


class ExpenseResponse(ExpenseBase):
    id: UUID
    business_id: UUID
    created_at: datetime


class VatDayTotal(CamelModel):
    total: float = 0.0
    vat_total: float = 0.0


class ExpenseListResponse(CamelModel):
    vat_expenses: List[ExpenseResponse]
    no_vat_expenses: List[ExpenseResponse]
    vat_by_date: Dict[date, VatDayTotal]
    no_vat_by_date: Dict[date, float]


class ExpenseEnvelope(CamelModel):
    data: ExpenseResponse
    created: Optional[bool] = None
    updated: Optional[bool] = None


class ExpenseCopyRequest(CamelModel):
    """Copy every expense of one month into another (months are 1-12)"""
    business_id: UUID
    from_month: int = Field(..., ge=1, le=12)
    from_year: int
    to_month: int = Field(..., ge=1, le=12)
    to_year: int


class ExpenseCopyResponse(CamelModel):
    success: bool = True
    copied_count: int
    message: str

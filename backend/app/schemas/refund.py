"""
Customer Refund Schemas
"""
from pydantic import Field
from typing import Optional, List, Dict
from uuid import UUID
from datetime import date, datetime

from app.schemas.base import CamelModel


class RefundBase(CamelModel):
    refund_date: date
    amount: float = Field(..., gt=0)
    description: str = ""
    customer_name: Optional[str] = None


class RefundCreate(RefundBase):
    business_id: UUID
    order_id: Optional[str] = None
    reason: Optional[str] = None


class RefundUpdate(RefundBase):
    id: UUID
    business_id: UUID


class RefundResponse(RefundBase):
    id: UUID
    business_id: UUID
    order_id: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime


class RefundListResponse(CamelModel):
    refunds: List[RefundResponse]
    refunds_by_date: Dict[date, float]


class RefundEnvelope(CamelModel):
    data: RefundResponse
    updated: Optional[bool] = None

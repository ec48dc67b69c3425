"""
Order Item Cost Schemas
"""
from pydantic import Field, field_validator
from typing import Optional, List, Any
from uuid import UUID
from datetime import date, datetime

from app.schemas.base import CamelModel


class OrderItemCostSave(CamelModel):
    """Upsert of one line item's unit cost, keyed by order and line item"""
    business_id: UUID
    order_id: str
    line_item_id: str
    order_date: date
    item_cost: float = Field(0.0, ge=0)
    quantity: int = Field(1, ge=1)
    product_name: Optional[str] = None

    @field_validator("order_id", "line_item_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class OrderItemCostResponse(CamelModel):
    id: UUID
    business_id: UUID
    order_id: str
    line_item_id: str
    product_name: Optional[str] = None
    order_date: date
    item_cost: float
    quantity: int
    updated_at: datetime


class OrderItemCostListResponse(CamelModel):
    data: List[OrderItemCostResponse]


class OrderItemCostEnvelope(CamelModel):
    data: OrderItemCostResponse
    created: Optional[bool] = None
    updated: Optional[bool] = None

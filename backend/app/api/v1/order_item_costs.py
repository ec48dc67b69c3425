"""
Order Item Cost API Endpoints - recorded materials cost per line item
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_business, load_business
from app.models.business import Business
from app.models.order_item_cost import OrderItemCost
from app.schemas.order_item_cost import (
    OrderItemCostSave,
    OrderItemCostResponse,
    OrderItemCostListResponse,
    OrderItemCostEnvelope,
)
from app.services import cashflow_service

router = APIRouter(tags=["order-item-costs"])


@router.get("/order-item-costs", response_model=OrderItemCostListResponse)
async def list_order_item_costs(
    order_id: str = Query(..., alias="orderId"),
    line_item_id: Optional[str] = Query(None, alias="lineItemId"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    query = db.query(OrderItemCost).filter(
        OrderItemCost.business_id == business.id,
        OrderItemCost.order_id == order_id,
    )
    if line_item_id:
        query = query.filter(OrderItemCost.line_item_id == line_item_id)

    return OrderItemCostListResponse(data=[OrderItemCostResponse.model_validate(c) for c in query.all()])


@router.post("/order-item-costs", response_model=OrderItemCostEnvelope, response_model_exclude_none=True)
async def save_order_item_cost(
    payload: OrderItemCostSave,
    db: Session = Depends(get_db),
):
    """
    Record a line item's unit cost. The order's day is recomputed so its
    materials cost switches from the materials rate to recorded costs.
    """
    business = load_business(db, payload.business_id)

    item = db.query(OrderItemCost).filter(
        OrderItemCost.business_id == business.id,
        OrderItemCost.order_id == payload.order_id,
        OrderItemCost.line_item_id == payload.line_item_id,
    ).first()

    created = item is None
    if created:
        item = OrderItemCost(
            business_id=business.id,
            order_id=payload.order_id,
            line_item_id=payload.line_item_id,
        )
        db.add(item)

    previous_date = None if created else item.order_date
    item.order_date = payload.order_date
    item.item_cost = payload.item_cost
    item.quantity = payload.quantity
    item.product_name = payload.product_name or item.product_name

    db.commit()
    db.refresh(item)

    for day in {previous_date, item.order_date} - {None}:
        cashflow_service.recalculate_range(db, business.id, day, day)

    if created:
        return OrderItemCostEnvelope(data=OrderItemCostResponse.model_validate(item), created=True)
    return OrderItemCostEnvelope(data=OrderItemCostResponse.model_validate(item), updated=True)

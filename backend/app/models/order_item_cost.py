"""
Order Item Cost - recorded purchase cost of a sold line item.
Summed per order date to give the real materials cost for a day.
"""
from sqlalchemy import Column, String, Float, Integer, Date, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class OrderItemCost(Base):
    __tablename__ = "order_item_costs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    order_id = Column(String, nullable=False)
    line_item_id = Column(String, nullable=False)
    product_name = Column(String, nullable=True)
    order_date = Column(Date, nullable=False)
    item_cost = Column(Float, default=0, nullable=False)  # per unit
    quantity = Column(Integer, default=1, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    business = relationship("Business", back_populates="order_item_costs")

    __table_args__ = (
        UniqueConstraint('business_id', 'order_id', 'line_item_id', name='uq_order_item_cost_line'),
        Index('idx_order_item_costs_business_date', 'business_id', 'order_date'),
    )

    def __repr__(self):
        return f"<OrderItemCost {self.order_id}/{self.line_item_id}>"

"""
Customer Refund Model
"""
from sqlalchemy import Column, String, Float, Date, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class CustomerRefund(Base):
    __tablename__ = "customer_refunds"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    refund_date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String, default="", nullable=False)
    order_id = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    business = relationship("Business", back_populates="refunds")

    __table_args__ = (
        Index('idx_customer_refunds_business_date', 'business_id', 'refund_date'),
    )

    def __repr__(self):
        return f"<CustomerRefund {self.refund_date} {self.amount}>"

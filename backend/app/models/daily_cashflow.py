"""
Daily Cashflow - one profitability row per business per day.
Populated by the WooCommerce sync and recomputed when expenses, refunds
or payroll change for its month.
"""
from sqlalchemy import Column, Float, Integer, Date, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class DailyCashflow(Base):
    __tablename__ = "daily_cashflow"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)

    # Sales (all money in the business's base currency)
    revenue = Column(Float, default=0, nullable=False)
    orders_count = Column(Integer, default=0, nullable=False)
    items_count = Column(Integer, default=0, nullable=False)

    # Cost components
    google_ads_cost = Column(Float, default=0, nullable=False)
    facebook_ads_cost = Column(Float, default=0, nullable=False)
    tiktok_ads_cost = Column(Float, default=0, nullable=False)
    shipping_cost = Column(Float, default=0, nullable=False)
    materials_cost = Column(Float, default=0, nullable=False)
    credit_card_fees = Column(Float, default=0, nullable=False)
    vat = Column(Float, default=0, nullable=False)

    # Overheads apportioned to this day
    expenses_vat = Column(Float, default=0, nullable=False)
    expenses_no_vat = Column(Float, default=0, nullable=False)
    employee_cost = Column(Float, default=0, nullable=False)
    customer_refunds = Column(Float, default=0, nullable=False)

    # Derived
    total_expenses = Column(Float, default=0, nullable=False)
    profit = Column(Float, default=0, nullable=False)
    roi = Column(Float, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    business = relationship("Business", back_populates="daily_records")

    __table_args__ = (
        UniqueConstraint('business_id', 'date', name='uq_daily_cashflow_business_date'),
        Index('idx_daily_cashflow_date', 'date'),
    )

    def __repr__(self):
        return f"<DailyCashflow {self.business_id} {self.date}>"

"""
Business Model
"""
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships (deleting a business removes everything it owns)
    settings = relationship("BusinessSettings", back_populates="business", uselist=False, cascade="all, delete-orphan")
    daily_records = relationship("DailyCashflow", back_populates="business", cascade="all, delete-orphan")
    vat_expenses = relationship("ExpenseVat", back_populates="business", cascade="all, delete-orphan")
    no_vat_expenses = relationship("ExpenseNoVat", back_populates="business", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="business", cascade="all, delete-orphan")
    refunds = relationship("CustomerRefund", back_populates="business", cascade="all, delete-orphan")
    order_item_costs = relationship("OrderItemCost", back_populates="business", cascade="all, delete-orphan")
    google_ads_campaigns = relationship("GoogleAdsCampaign", back_populates="business", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Business {self.name}>"

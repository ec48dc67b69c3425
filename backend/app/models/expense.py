"""
Expense Models - VAT-bearing and non-VAT expenses live in separate tables
"""
from sqlalchemy import Column, String, Float, Boolean, Date, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship, declared_attr
from datetime import datetime
import uuid
import enum

from app.database import Base


class ExpenseType(str, enum.Enum):
    VAT = "vat"
    NO_VAT = "no_vat"


class ExpenseMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    expense_date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Float, default=0, nullable=False)
    supplier_name = Column(String, nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    category = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @declared_attr
    def business_id(cls):
        return Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)


class ExpenseVat(ExpenseMixin, Base):
    __tablename__ = "expenses_vat"

    vat_amount = Column(Float, default=0, nullable=False)

    business = relationship("Business", back_populates="vat_expenses")

    __table_args__ = (
        Index('idx_expenses_vat_business_date', 'business_id', 'expense_date'),
    )

    def __repr__(self):
        return f"<ExpenseVat {self.expense_date} {self.amount}>"


class ExpenseNoVat(ExpenseMixin, Base):
    __tablename__ = "expenses_no_vat"

    business = relationship("Business", back_populates="no_vat_expenses")

    __table_args__ = (
        Index('idx_expenses_no_vat_business_date', 'business_id', 'expense_date'),
    )

    def __repr__(self):
        return f"<ExpenseNoVat {self.expense_date} {self.amount}>"


EXPENSE_MODELS = {
    ExpenseType.VAT: ExpenseVat,
    ExpenseType.NO_VAT: ExpenseNoVat,
}

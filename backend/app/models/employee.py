"""
Employee Model - monthly salary entries
"""
from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    salary = Column(Float, default=0, nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    business = relationship("Business", back_populates="employees")

    __table_args__ = (
        UniqueConstraint('business_id', 'name', 'month', 'year', name='uq_employee_business_name_month'),
    )

    def __repr__(self):
        return f"<Employee {self.name} {self.month}/{self.year}>"

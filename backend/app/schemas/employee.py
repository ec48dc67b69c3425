"""
Employee Schemas
"""
from pydantic import Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.schemas.base import CamelModel


class EmployeeBase(CamelModel):
    name: str = Field(..., min_length=1)
    salary: float
    month: int = Field(..., ge=1, le=12)
    year: int


class EmployeeSave(EmployeeBase):
    """Creates an employee, or updates name and salary when id is given"""
    business_id: UUID
    id: Optional[UUID] = None


class EmployeeResponse(EmployeeBase):
    id: UUID
    business_id: UUID
    created_at: datetime
    updated_at: datetime


class EmployeeListResponse(CamelModel):
    employees: List[EmployeeResponse]
    total_salary: float
    days_in_month: int
    daily_cost: float


class EmployeeEnvelope(CamelModel):
    data: EmployeeResponse
    created: Optional[bool] = None
    updated: Optional[bool] = None


class EmployeeCopyRequest(CamelModel):
    business_id: UUID
    target_month: int = Field(..., ge=1, le=12)
    target_year: int


class EmployeeCopyResponse(CamelModel):
    copied: int
    message: str

"""
Employee API Endpoints - monthly payroll
"""
import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_business, load_business
from app.models.business import Business
from app.models.employee import Employee
from app.schemas.employee import (
    EmployeeSave,
    EmployeeResponse,
    EmployeeListResponse,
    EmployeeEnvelope,
    EmployeeCopyRequest,
    EmployeeCopyResponse,
)
from app.services import cashflow_service
from app.services.calculations import days_in_month

logger = logging.getLogger(__name__)

router = APIRouter(tags=["employees"])


def _previous_month(month: int, year: int):
    if month == 1:
        return 12, year - 1
    return month - 1, year


@router.get("/employees", response_model=EmployeeListResponse)
async def list_employees(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    """
    Employees of a month with the total salary and its daily share
    """
    employees = db.query(Employee).filter(
        Employee.business_id == business.id,
        Employee.month == month,
        Employee.year == year,
    ).order_by(Employee.name).all()

    total_salary = sum(e.salary or 0.0 for e in employees)
    days = days_in_month(year, month)

    return EmployeeListResponse(
        employees=[EmployeeResponse.model_validate(e) for e in employees],
        total_salary=total_salary,
        days_in_month=days,
        daily_cost=total_salary / days,
    )


@router.post("/employees", response_model=EmployeeEnvelope, response_model_exclude_none=True)
async def save_employee(
    payload: EmployeeSave,
    db: Session = Depends(get_db),
):
    """
    Add an employee to a month, or update name and salary when id is given
    """
    business = load_business(db, payload.business_id)

    if payload.id:
        employee = db.query(Employee).filter(
            Employee.id == payload.id,
            Employee.business_id == business.id,
        ).first()
        if not employee:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
        employee.name = payload.name
        employee.salary = payload.salary or 0.0
        created = False
    else:
        employee = Employee(
            business_id=business.id,
            name=payload.name,
            salary=payload.salary or 0.0,
            month=payload.month,
            year=payload.year,
        )
        db.add(employee)
        created = True

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An employee with this name already exists for this month",
        )
    db.refresh(employee)

    cashflow_service.recalculate_month_of(db, business.id, date(employee.year, employee.month, 1))

    if created:
        return EmployeeEnvelope(data=EmployeeResponse.model_validate(employee), created=True)
    return EmployeeEnvelope(data=EmployeeResponse.model_validate(employee), updated=True)


@router.delete("/employees")
async def delete_employee(
    employee_id: UUID = Query(..., alias="id"),
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    employee = db.query(Employee).filter(
        Employee.id == employee_id,
        Employee.business_id == business.id,
    ).first()
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")

    month_start = date(employee.year, employee.month, 1)
    db.delete(employee)
    db.commit()

    cashflow_service.recalculate_month_of(db, business.id, month_start)

    return {"success": True}


@router.put("/employees/copy", response_model=EmployeeCopyResponse)
async def copy_employees(
    payload: EmployeeCopyRequest,
    db: Session = Depends(get_db),
):
    """
    Copy the previous month's employees into the target month.
    Names already present in the target month are skipped.
    """
    business = load_business(db, payload.business_id)
    prev_month, prev_year = _previous_month(payload.target_month, payload.target_year)

    previous = db.query(Employee).filter(
        Employee.business_id == business.id,
        Employee.month == prev_month,
        Employee.year == prev_year,
    ).all()

    if not previous:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No employees found in the previous month",
        )

    existing_names = {
        name for (name,) in db.query(Employee.name).filter(
            Employee.business_id == business.id,
            Employee.month == payload.target_month,
            Employee.year == payload.target_year,
        ).all()
    }

    copied = 0
    for employee in previous:
        if employee.name in existing_names:
            continue
        db.add(Employee(
            business_id=business.id,
            name=employee.name,
            salary=employee.salary,
            month=payload.target_month,
            year=payload.target_year,
        ))
        copied += 1

    db.commit()
    logger.info("Copied %d employees for %s into %d-%02d", copied, business.id, payload.target_year, payload.target_month)

    cashflow_service.recalculate_month_of(db, business.id, date(payload.target_year, payload.target_month, 1))

    return EmployeeCopyResponse(copied=copied, message=f"Copied {copied} employees from the previous month")

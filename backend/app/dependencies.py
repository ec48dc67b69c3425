"""
Common Dependencies for FastAPI Routes
"""
from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Callable, Optional
from datetime import date
from uuid import UUID

from app.database import get_db
from app.models.business import Business
from app.models.business_settings import BusinessSettings
from app.services.woocommerce_service import WooCommerceClient, client_from_settings


def check_date_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate must be on or before endDate",
        )


def load_business(db: Session, business_id) -> Business:
    """Resolve a business id (str or UUID), raising 400 / 404 as appropriate"""
    if not business_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="businessId is required")

    if not isinstance(business_id, UUID):
        try:
            business_id = UUID(str(business_id))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid businessId")

    business = db.query(Business).filter(Business.id == business_id).first()
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
    return business


async def get_business(
    business_id: Optional[str] = Query(None, alias="businessId"),
    db: Session = Depends(get_db),
) -> Business:
    """
    Dependency resolving the businessId query parameter
    """
    return load_business(db, business_id)


WooCommerceFactory = Callable[[Optional[BusinessSettings]], WooCommerceClient]


def get_woocommerce_factory() -> WooCommerceFactory:
    """
    Dependency returning the WooCommerce client factory.
    Overridden in tests to inject a mock transport.
    """
    return client_from_settings

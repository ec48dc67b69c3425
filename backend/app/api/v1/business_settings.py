"""
Business Settings API Endpoints
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_business, load_business
from app.models.business import Business
from app.models.business_settings import BusinessSettings
from app.schemas.business_settings import (
    BusinessSettingsUpdate,
    BusinessSettingsResponse,
    BusinessSettingsEnvelope,
)
from app.services.cashflow_service import get_business_settings
from app.utils.encryption import encrypt_secret

logger = logging.getLogger(__name__)

router = APIRouter(tags=["business-settings"])


def _to_response(row: BusinessSettings) -> BusinessSettingsResponse:
    """Settings as returned to clients; the consumer secret itself never leaves the server"""
    response = BusinessSettingsResponse.model_validate(row)
    return response.model_copy(update={"has_consumer_secret": bool(row.consumer_secret_encrypted)})


@router.get("/business-settings", response_model=BusinessSettingsEnvelope)
async def read_business_settings(
    business: Business = Depends(get_business),
    db: Session = Depends(get_db),
):
    row = get_business_settings(db, business.id)
    return BusinessSettingsEnvelope(data=_to_response(row) if row else None)


@router.post("/business-settings", response_model=BusinessSettingsEnvelope)
async def save_business_settings(
    payload: BusinessSettingsUpdate,
    db: Session = Depends(get_db),
):
    """
    Create or update a business's settings.

    Only fields sent are changed. A consumer secret, when sent, is stored
    encrypted. Existing daily records are not recomputed; use
    POST /cashflow/recalculate for that.
    """
    business = load_business(db, payload.business_id)

    row = get_business_settings(db, business.id)
    if row is None:
        row = BusinessSettings(business_id=business.id)
        db.add(row)

    changes = payload.model_dump(exclude_unset=True, exclude={"business_id", "consumer_secret"})
    for name, value in changes.items():
        setattr(row, name, value.value if hasattr(value, "value") else value)

    if "consumer_secret" in payload.model_fields_set:
        row.consumer_secret_encrypted = encrypt_secret(payload.consumer_secret) if payload.consumer_secret else None

    db.commit()
    db.refresh(row)
    logger.info("Saved settings for business %s", business.id)

    return BusinessSettingsEnvelope(data=_to_response(row))

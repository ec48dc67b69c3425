"""
Business Settings Schemas
"""
from pydantic import Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.models.business_settings import SpreadMode, VatMode, CreditFeeMode
from app.schemas.base import CamelModel


class BusinessSettingsBase(CamelModel):
    vat_rate: Optional[float] = Field(None, ge=0, description="Percent, e.g. 18")
    credit_card_rate: Optional[float] = Field(None, ge=0, description="Percent, e.g. 2.5")
    materials_rate: Optional[float] = Field(None, ge=0, description="Percent of revenue")
    credit_fee_mode: CreditFeeMode = CreditFeeMode.PERCENTAGE
    vat_mode: VatMode = VatMode.FLAT
    expenses_spread_mode: SpreadMode = SpreadMode.EXACT
    valid_order_statuses: Optional[List[str]] = None
    shipping_cost: Optional[float] = None
    charge_shipping_on_free_orders: bool = True
    free_shipping_methods: Optional[List[str]] = None
    woo_url: Optional[str] = None
    consumer_key: Optional[str] = None
    google_ads_webhook_secret: Optional[str] = None


class BusinessSettingsUpdate(BusinessSettingsBase):
    """Upsert payload; the consumer secret is write-only"""
    business_id: UUID
    consumer_secret: Optional[str] = None

    @field_validator("woo_url", "consumer_key", "consumer_secret")
    @classmethod
    def strip_credentials(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class BusinessSettingsResponse(BusinessSettingsBase):
    id: UUID
    business_id: UUID
    has_consumer_secret: bool = False
    updated_at: datetime


class BusinessSettingsEnvelope(CamelModel):
    data: Optional[BusinessSettingsResponse] = None

"""
Webhook Schemas
"""
from pydantic import Field, field_validator
from typing import Optional, List, Any
import datetime as datetime_module
from datetime import date

from app.schemas.base import CamelModel


class GoogleAdsCampaignData(CamelModel):
    id: str
    name: Optional[str] = None
    cost: float = 0.0
    clicks: int = 0
    impressions: int = 0
    conversions: float = 0.0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class GoogleAdsDayData(CamelModel):
    cost: Optional[float] = None
    campaigns: List[GoogleAdsCampaignData] = Field(default_factory=list)
    date: Optional[datetime_module.date] = None


class GoogleAdsWebhookPayload(CamelModel):
    """Fields are optional so missing ones can be reported as a 400"""
    business_id: Optional[str] = None
    secret_key: Optional[str] = None
    data: Optional[GoogleAdsDayData] = None


class WebhookResponse(CamelModel):
    success: bool = True
    message: str

"""
Analytics Schemas - funnel reconciliation and channel metrics
"""
from pydantic import Field
from typing import Optional, List
from uuid import UUID
from datetime import date

from app.schemas.base import CamelModel


class FunnelStepInput(CamelModel):
    step: str
    users: float = Field(..., ge=0)


class FunnelRequest(CamelModel):
    """GA4 funnel steps in order; the last step is the purchase step"""
    business_id: UUID
    start_date: date
    end_date: date
    steps: List[FunnelStepInput] = Field(..., min_length=1)


class FunnelStep(CamelModel):
    step: str
    users: float
    dropoff: float


class RealOrderData(CamelModel):
    source: str
    purchases: int
    revenue: float
    ga4_purchases: float
    discrepancy: float


class FunnelResponse(CamelModel):
    steps: List[FunnelStep]
    conversion_rate: float
    cart_abandonment: float
    average_order_value: float
    real_data: RealOrderData


class TrafficSourceInput(CamelModel):
    source: str
    medium: Optional[str] = None
    sessions: int = 0
    conversions: float = 0.0
    revenue: float = 0.0


class ChannelRequest(CamelModel):
    business_id: UUID
    start_date: date
    end_date: date
    sources: List[TrafficSourceInput] = Field(default_factory=list)


class ChannelMetric(CamelModel):
    channel: str
    sessions: int
    conversions: float
    revenue: float
    spend: float
    cpa: float
    roas: float


class AdSpend(CamelModel):
    google: float = 0.0
    facebook: float = 0.0
    tiktok: float = 0.0


class ChannelResponse(CamelModel):
    channels: List[ChannelMetric]
    ad_spend: AdSpend

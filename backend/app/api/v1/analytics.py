"""
Analytics API Endpoints - GA4 funnel and channel reconciliation
"""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import check_date_range, load_business
from app.models.daily_cashflow import DailyCashflow
from app.schemas.analytics import FunnelRequest, FunnelResponse, ChannelRequest, ChannelResponse
from app.services.analytics_service import reconcile_funnel, channel_metrics

router = APIRouter(tags=["analytics"])


@router.post("/analytics/funnel", response_model=FunnelResponse)
async def funnel(
    payload: FunnelRequest,
    db: Session = Depends(get_db),
):
    """
    Replace the funnel's purchase step with the real order count from
    daily cashflow and recompute dropoff, conversion, abandonment and AOV
    """
    business = load_business(db, payload.business_id)
    check_date_range(payload.start_date, payload.end_date)

    days, orders, revenue = db.query(
        func.count(DailyCashflow.id),
        func.coalesce(func.sum(DailyCashflow.orders_count), 0),
        func.coalesce(func.sum(DailyCashflow.revenue), 0.0),
    ).filter(
        DailyCashflow.business_id == business.id,
        DailyCashflow.date >= payload.start_date,
        DailyCashflow.date <= payload.end_date,
    ).one()

    return reconcile_funnel(
        [(s.step, s.users) for s in payload.steps],
        real_purchases=int(orders) if days else None,
        real_revenue=float(revenue or 0.0),
    )


@router.post("/analytics/channels", response_model=ChannelResponse)
async def channels(
    payload: ChannelRequest,
    db: Session = Depends(get_db),
):
    """
    ROAS and CPA per channel, combining GA4 traffic sources with the ad
    spend recorded in daily cashflow
    """
    business = load_business(db, payload.business_id)
    check_date_range(payload.start_date, payload.end_date)

    google, facebook, tiktok = db.query(
        func.coalesce(func.sum(DailyCashflow.google_ads_cost), 0.0),
        func.coalesce(func.sum(DailyCashflow.facebook_ads_cost), 0.0),
        func.coalesce(func.sum(DailyCashflow.tiktok_ads_cost), 0.0),
    ).filter(
        DailyCashflow.business_id == business.id,
        DailyCashflow.date >= payload.start_date,
        DailyCashflow.date <= payload.end_date,
    ).one()

    ad_spend = {"google": float(google), "facebook": float(facebook), "tiktok": float(tiktok)}

    return {
        "channels": channel_metrics([s.model_dump() for s in payload.sources], ad_spend),
        "ad_spend": ad_spend,
    }

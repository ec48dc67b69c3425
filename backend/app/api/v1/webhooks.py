"""
Webhook Endpoints - Google Ads daily spend and WooCommerce order events
"""
import json
import logging
import secrets
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_woocommerce_factory, load_business, WooCommerceFactory
from app.models.google_ads_campaign import GoogleAdsCampaign
from app.schemas.webhook import GoogleAdsWebhookPayload, WebhookResponse
from app.services import cashflow_service
from app.services.woocommerce_service import WooCommerceNotConfigured, order_date, to_float

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


def _upsert_campaigns(db: Session, business_id, day: date, campaigns) -> None:
    for campaign in campaigns:
        row = db.query(GoogleAdsCampaign).filter(
            GoogleAdsCampaign.business_id == business_id,
            GoogleAdsCampaign.campaign_id == campaign.id,
            GoogleAdsCampaign.date == day,
        ).first()
        if row is None:
            row = GoogleAdsCampaign(business_id=business_id, campaign_id=campaign.id, date=day)
            db.add(row)
        row.campaign_name = campaign.name
        row.cost = campaign.cost or 0.0
        row.clicks = campaign.clicks or 0
        row.impressions = campaign.impressions or 0
        row.conversions = campaign.conversions or 0.0
    db.commit()


@router.get("/webhook/google-ads")
async def describe_google_ads_webhook():
    """Describe the payload the Google Ads script should send"""
    return {
        "name": "Google Ads Webhook",
        "description": "Receives daily spend data from Google Ads Scripts",
        "expectedPayload": {
            "businessId": "string (UUID)",
            "secretKey": "string",
            "data": {
                "date": "YYYY-MM-DD",
                "cost": "number (total daily spend)",
                "campaigns": [
                    {
                        "id": "campaign ID",
                        "name": "campaign name",
                        "cost": "number",
                        "clicks": "number",
                        "impressions": "number",
                        "conversions": "number",
                    }
                ],
            },
        },
    }


@router.post("/webhook/google-ads", response_model=WebhookResponse)
async def receive_google_ads(
    payload: GoogleAdsWebhookPayload,
    db: Session = Depends(get_db),
):
    """
    Store a day's Google Ads spend and recompute that day's totals
    """
    if not payload.business_id or not payload.secret_key or payload.data is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: businessId, secretKey, data",
        )

    business = load_business(db, payload.business_id)
    business_settings = cashflow_service.get_business_settings(db, business.id)
    if business_settings is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    stored_secret = business_settings.google_ads_webhook_secret or ""
    if not stored_secret or not secrets.compare_digest(stored_secret.encode(), payload.secret_key.encode()):
        logger.warning("Rejected Google Ads webhook for business %s: invalid secret", business.id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid secret key")

    data = payload.data
    if data.date is None or data.cost is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing date or cost in data")

    def _set_cost(record) -> None:
        record.google_ads_cost = data.cost

    cashflow_service.recompute_day(db, business.id, data.date, _set_cost)

    if data.campaigns:
        _upsert_campaigns(db, business.id, data.date, data.campaigns)

    logger.info("Google Ads cost for %s on %s: %.2f (%d campaigns)", business.id, data.date, data.cost, len(data.campaigns))

    return WebhookResponse(message=f"Updated Google Ads cost for {data.date}: {data.cost}")


@router.post("/webhook/woocommerce")
async def receive_woocommerce(
    request: Request,
    business_id: Optional[str] = Query(None, alias="businessId"),
    db: Session = Depends(get_db),
    woocommerce_factory: WooCommerceFactory = Depends(get_woocommerce_factory),
):
    """
    Handle WooCommerce order webhooks.

    order.created adds the order to its day when its status counts;
    order.updated and order.deleted re-sync the whole day from WooCommerce.
    Pings and non-order topics are acknowledged.
    """
    content_type = request.headers.get("content-type", "")
    topic = request.headers.get("x-wc-webhook-topic", "")

    if "application/json" not in content_type:
        logger.info("WooCommerce webhook ping received")
        return {"status": "ok", "message": "Webhook verified"}

    raw = await request.body()
    if not raw.strip():
        return {"status": "ok", "message": "Ping received"}

    try:
        order = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")

    if not order:
        return {"status": "ok", "message": "Ping received"}

    if not isinstance(order, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expected an order object")

    if "order" not in topic:
        return {"message": "Not an order event"}

    business = load_business(db, business_id)

    order_id = order.get("id")
    order_status = order.get("status")
    try:
        day = order_date(order)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date_created: {order.get('date_created')}",
        )
    logger.info("WooCommerce %s for business %s: order %s (%s) on %s", topic, business.id, order_id, order_status, day)

    if topic == "order.created":
        record = cashflow_service.add_order(db, business.id, order)
        if record is None:
            logger.info("Order %s skipped, status %s is not counted", order_id, order_status)
            return {"message": "Order status not counted", "orderId": order_id, "status": order_status}

    elif topic in ("order.updated", "order.deleted"):
        try:
            client = woocommerce_factory(cashflow_service.get_business_settings(db, business.id))
        except WooCommerceNotConfigured:
            logger.warning("WooCommerce not configured for %s, skipping re-sync of %s", business.id, day)
        else:
            await cashflow_service.sync_day(db, business.id, day, client)

    return {
        "success": True,
        "orderId": order_id,
        "topic": topic,
        "date": day.isoformat(),
        "total": to_float(order.get("total")),
    }

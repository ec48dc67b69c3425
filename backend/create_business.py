"""
Create a business with default settings directly in the database

Usage:
    python create_business.py "My Shop" [google-ads-webhook-secret]
"""
import secrets
import sys

from app.config import settings
from app.database import SessionLocal
from app.models import Business, BusinessSettings


def create_business(name: str, webhook_secret: str = None):
    db = SessionLocal()

    try:
        business = db.query(Business).filter(Business.name == name).first()

        if business:
            print(f"ℹ️  Business already exists: {business.name} (ID: {business.id})")
            return

        business = Business(name=name)
        db.add(business)
        db.flush()

        db.add(BusinessSettings(
            business_id=business.id,
            vat_rate=settings.DEFAULT_VAT_RATE,
            credit_card_rate=settings.DEFAULT_CREDIT_CARD_RATE,
            materials_rate=settings.DEFAULT_MATERIALS_RATE,
            valid_order_statuses=list(settings.DEFAULT_VALID_ORDER_STATUSES),
            free_shipping_methods=list(settings.DEFAULT_FREE_SHIPPING_METHODS),
            google_ads_webhook_secret=webhook_secret or secrets.token_urlsafe(24),
        ))
        db.commit()

        print("✅ Business created successfully!")
        print(f"   Name: {business.name}")
        print(f"   ID: {business.id}")
        print(f"   Google Ads webhook secret: {business.settings.google_ads_webhook_secret}")

    except Exception as e:
        db.rollback()
        print(f"❌ Error creating business: {str(e)}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    create_business(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)

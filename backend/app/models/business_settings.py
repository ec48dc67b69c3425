"""
Business Settings Model - per-business rates and integration settings
"""
from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
import enum

from app.database import Base


class SpreadMode(str, enum.Enum):
    """How monthly expenses and refunds are apportioned to days"""
    EXACT = "exact"
    SPREAD = "spread"


class VatMode(str, enum.Enum):
    """How the daily VAT cost is computed"""
    FLAT = "flat"  # revenue * rate
    NET = "net"  # revenue VAT minus deductible input VAT


class CreditFeeMode(str, enum.Enum):
    PERCENTAGE = "percentage"
    MANUAL = "manual"


class BusinessSettings(Base):
    __tablename__ = "business_settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Rates are stored as percentages (18 means 18%)
    vat_rate = Column(Float, nullable=True)
    credit_card_rate = Column(Float, nullable=True)
    materials_rate = Column(Float, nullable=True)
    credit_fee_mode = Column(String, default=CreditFeeMode.PERCENTAGE.value, nullable=False)
    vat_mode = Column(String, default=VatMode.FLAT.value, nullable=False)
    expenses_spread_mode = Column(String, default=SpreadMode.EXACT.value, nullable=False)

    # Orders
    valid_order_statuses = Column(JSON, nullable=True)  # ["completed", "processing"]
    shipping_cost = Column(Float, nullable=True)  # fixed cost per shipped order
    charge_shipping_on_free_orders = Column(Boolean, default=True, nullable=False)
    free_shipping_methods = Column(JSON, nullable=True)  # ["local_pickup"]

    # WooCommerce
    woo_url = Column(String, nullable=True)
    consumer_key = Column(String, nullable=True)
    consumer_secret_encrypted = Column(String, nullable=True)

    # Google Ads webhook
    google_ads_webhook_secret = Column(String, nullable=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    business = relationship("Business", back_populates="settings")

    def __repr__(self):
        return f"<BusinessSettings {self.business_id}>"

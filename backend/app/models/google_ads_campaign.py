"""
Google Ads Campaign - daily per-campaign spend pushed by the ads webhook
"""
from sqlalchemy import Column, String, Float, Integer, Date, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class GoogleAdsCampaign(Base):
    __tablename__ = "google_ads_campaigns"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    campaign_id = Column(String, nullable=False)
    campaign_name = Column(String, nullable=True)
    date = Column(Date, nullable=False)
    cost = Column(Float, default=0, nullable=False)
    clicks = Column(Integer, default=0, nullable=False)
    impressions = Column(Integer, default=0, nullable=False)
    conversions = Column(Float, default=0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    business = relationship("Business", back_populates="google_ads_campaigns")

    __table_args__ = (
        UniqueConstraint('business_id', 'campaign_id', 'date', name='uq_google_ads_campaign_day'),
    )

    def __repr__(self):
        return f"<GoogleAdsCampaign {self.campaign_id} {self.date}>"

"""
Models package - Import all models to ensure SQLAlchemy relationships work
"""
# Import Base first
from app.database import Base

from app.models.business import Business
from app.models.business_settings import BusinessSettings, SpreadMode, VatMode, CreditFeeMode
from app.models.daily_cashflow import DailyCashflow
from app.models.expense import ExpenseVat, ExpenseNoVat, ExpenseType, EXPENSE_MODELS
from app.models.employee import Employee
from app.models.customer_refund import CustomerRefund
from app.models.order_item_cost import OrderItemCost
from app.models.google_ads_campaign import GoogleAdsCampaign

__all__ = [
    "Base",
    "Business",
    "BusinessSettings",
    "SpreadMode",
    "VatMode",
    "CreditFeeMode",
    "DailyCashflow",
    "ExpenseVat",
    "ExpenseNoVat",
    "ExpenseType",
    "EXPENSE_MODELS",
    "Employee",
    "CustomerRefund",
    "OrderItemCost",
    "GoogleAdsCampaign",
]

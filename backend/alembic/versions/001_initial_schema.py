"""Initial schema: businesses, settings, daily cashflow, expenses, payroll, refunds

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _business_fk():
    return sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ondelete='CASCADE')


def upgrade() -> None:
    op.create_table(
        'businesses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'business_settings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Uuid(), nullable=False),
        sa.Column('vat_rate', sa.Float(), nullable=True),
        sa.Column('credit_card_rate', sa.Float(), nullable=True),
        sa.Column('materials_rate', sa.Float(), nullable=True),
        sa.Column('credit_fee_mode', sa.String(), nullable=False, server_default='percentage'),
        sa.Column('vat_mode', sa.String(), nullable=False, server_default='flat'),
        sa.Column('expenses_spread_mode', sa.String(), nullable=False, server_default='exact'),
        sa.Column('valid_order_statuses', sa.JSON(), nullable=True),
        sa.Column('shipping_cost', sa.Float(), nullable=True),
        sa.Column('charge_shipping_on_free_orders', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('free_shipping_methods', sa.JSON(), nullable=True),
        sa.Column('woo_url', sa.String(), nullable=True),
        sa.Column('consumer_key', sa.String(), nullable=True),
        sa.Column('consumer_secret_encrypted', sa.String(), nullable=True),
        sa.Column('google_ads_webhook_secret', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        _business_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id')
    )

    op.create_table(
        'daily_cashflow',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('revenue', sa.Float(), nullable=False, server_default='0'),
        sa.Column('orders_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('items_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('google_ads_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('facebook_ads_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('tiktok_ads_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('shipping_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('materials_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('credit_card_fees', sa.Float(), nullable=False, server_default='0'),
        sa.Column('vat', sa.Float(), nullable=False, server_default='0'),
        sa.Column('expenses_vat', sa.Float(), nullable=False, server_default='0'),
        sa.Column('expenses_no_vat', sa.Float(), nullable=False, server_default='0'),
        sa.Column('employee_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('customer_refunds', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_expenses', sa.Float(), nullable=False, server_default='0'),
        sa.Column('profit', sa.Float(), nullable=False, server_default='0'),
        sa.Column('roi', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        _business_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'date', name='uq_daily_cashflow_business_date')
    )
    op.create_index('idx_daily_cashflow_date', 'daily_cashflow', ['date'])

    for table, extra in (
        ('expenses_vat', [sa.Column('vat_amount', sa.Float(), nullable=False, server_default='0')]),
        ('expenses_no_vat', []),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('business_id', sa.Uuid(), nullable=False),
            sa.Column('expense_date', sa.Date(), nullable=False),
            sa.Column('description', sa.String(), nullable=False),
            sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
            *extra,
            sa.Column('supplier_name', sa.String(), nullable=True),
            sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default='false'),
            sa.Column('category', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            _business_fk(),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(f'idx_{table}_business_date', table, ['business_id', 'expense_date'])

    op.create_table(
        'employees',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('salary', sa.Float(), nullable=False, server_default='0'),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        _business_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'name', 'month', 'year', name='uq_employee_business_name_month')
    )

    op.create_table(
        'customer_refunds',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Uuid(), nullable=False),
        sa.Column('refund_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('order_id', sa.String(), nullable=True),
        sa.Column('customer_name', sa.String(), nullable=True),
        sa.Column('reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        _business_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_customer_refunds_business_date', 'customer_refunds', ['business_id', 'refund_date'])

    op.create_table(
        'order_item_costs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('line_item_id', sa.String(), nullable=False),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('item_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        _business_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'order_id', 'line_item_id', name='uq_order_item_cost_line')
    )
    op.create_index('idx_order_item_costs_business_date', 'order_item_costs', ['business_id', 'order_date'])

    op.create_table(
        'google_ads_campaigns',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Uuid(), nullable=False),
        sa.Column('campaign_id', sa.String(), nullable=False),
        sa.Column('campaign_name', sa.String(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('clicks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('impressions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('conversions', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        _business_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'campaign_id', 'date', name='uq_google_ads_campaign_day')
    )


def downgrade() -> None:
    op.drop_table('google_ads_campaigns')
    op.drop_index('idx_order_item_costs_business_date', table_name='order_item_costs')
    op.drop_table('order_item_costs')
    op.drop_index('idx_customer_refunds_business_date', table_name='customer_refunds')
    op.drop_table('customer_refunds')
    op.drop_table('employees')
    op.drop_index('idx_expenses_no_vat_business_date', table_name='expenses_no_vat')
    op.drop_table('expenses_no_vat')
    op.drop_index('idx_expenses_vat_business_date', table_name='expenses_vat')
    op.drop_table('expenses_vat')
    op.drop_index('idx_daily_cashflow_date', table_name='daily_cashflow')
    op.drop_table('daily_cashflow')
    op.drop_table('business_settings')
    op.drop_table('businesses')

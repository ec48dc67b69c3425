"""
Daily cashflow service.

Loads the inputs of the daily calculation (settings, expenses, payroll,
refunds, line-item costs), applies the formulas from calculations.py and
persists one row per business per day. Called from the cashflow API, the
webhooks and after expense/payroll/refund changes.
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.business_settings import BusinessSettings, SpreadMode, VatMode, CreditFeeMode
from app.models.customer_refund import CustomerRefund
from app.models.daily_cashflow import DailyCashflow
from app.models.employee import Employee
from app.models.expense import ExpenseVat, ExpenseNoVat
from app.models.order_item_cost import OrderItemCost
from app.services import calculations as calc
from app.services.woocommerce_service import (
    WooCommerceClient,
    calculate_daily_stats,
    filter_valid_orders,
    order_date,
)

logger = logging.getLogger(__name__)

COST_FIELDS = (
    "google_ads_cost",
    "facebook_ads_cost",
    "tiktok_ads_cost",
    "shipping_cost",
    "materials_cost",
    "credit_card_fees",
    "vat",
    "expenses_vat",
    "expenses_no_vat",
    "employee_cost",
    "customer_refunds",
)


def get_business_settings(db: Session, business_id: UUID) -> Optional[BusinessSettings]:
    return db.query(BusinessSettings).filter(BusinessSettings.business_id == business_id).first()


def rate_settings_for(business_settings: Optional[BusinessSettings]) -> calc.RateSettings:
    """Effective rates for a business, falling back to configured defaults"""
    if business_settings is None:
        return calc.RateSettings(
            vat_rate=settings.DEFAULT_VAT_RATE,
            credit_card_rate=settings.DEFAULT_CREDIT_CARD_RATE,
            materials_rate=settings.DEFAULT_MATERIALS_RATE,
        )

    def _rate(value, default):
        return default if value is None else value

    return calc.RateSettings(
        vat_rate=_rate(business_settings.vat_rate, settings.DEFAULT_VAT_RATE),
        credit_card_rate=_rate(business_settings.credit_card_rate, settings.DEFAULT_CREDIT_CARD_RATE),
        materials_rate=_rate(business_settings.materials_rate, settings.DEFAULT_MATERIALS_RATE),
        vat_mode=business_settings.vat_mode or VatMode.FLAT.value,
        credit_fee_mode=business_settings.credit_fee_mode or CreditFeeMode.PERCENTAGE.value,
        spread_mode=business_settings.expenses_spread_mode or SpreadMode.EXACT.value,
    )


def valid_statuses_for(business_settings: Optional[BusinessSettings]) -> List[str]:
    if business_settings is not None and business_settings.valid_order_statuses:
        return list(business_settings.valid_order_statuses)
    return list(settings.DEFAULT_VALID_ORDER_STATUSES)


def load_month_overheads(db: Session, business_id: UUID, year: int, month: int) -> calc.MonthlyOverheads:
    """
    Collect a month's expenses, refunds and salaries.
    A failing lookup is logged, rolled back and treated as empty, so call
    this before staging any changes on the session.
    """
    start, end = calc.month_bounds(year, month)
    overheads = calc.MonthlyOverheads(year=year, month=month)

    try:
        vat_rows = db.query(ExpenseVat).filter(
            ExpenseVat.business_id == business_id,
            ExpenseVat.expense_date >= start,
            ExpenseVat.expense_date <= end,
        ).all()
        no_vat_rows = db.query(ExpenseNoVat).filter(
            ExpenseNoVat.business_id == business_id,
            ExpenseNoVat.expense_date >= start,
            ExpenseNoVat.expense_date <= end,
        ).all()
        refund_rows = db.query(CustomerRefund).filter(
            CustomerRefund.business_id == business_id,
            CustomerRefund.refund_date >= start,
            CustomerRefund.refund_date <= end,
        ).all()
        total_salaries = db.query(func.coalesce(func.sum(Employee.salary), 0.0)).filter(
            Employee.business_id == business_id,
            Employee.month == month,
            Employee.year == year,
        ).scalar()
    except SQLAlchemyError as e:
        logger.warning("Overheads lookup failed for %s %d-%02d: %s", business_id, year, month, e)
        db.rollback()
        return overheads

    vat_by_date: Dict[date, float] = defaultdict(float)
    vat_amount_by_date: Dict[date, float] = defaultdict(float)
    for row in vat_rows:
        vat_by_date[row.expense_date] += row.amount or 0.0
        vat_amount_by_date[row.expense_date] += row.vat_amount or 0.0

    no_vat_by_date: Dict[date, float] = defaultdict(float)
    for row in no_vat_rows:
        no_vat_by_date[row.expense_date] += row.amount or 0.0

    refunds_by_date: Dict[date, float] = defaultdict(float)
    for row in refund_rows:
        refunds_by_date[row.refund_date] += row.amount or 0.0

    overheads.vat_expenses_by_date = dict(vat_by_date)
    overheads.vat_amounts_by_date = dict(vat_amount_by_date)
    overheads.no_vat_expenses_by_date = dict(no_vat_by_date)
    overheads.refunds_by_date = dict(refunds_by_date)
    overheads.total_salaries = float(total_salaries or 0.0)
    return overheads


def recorded_materials_by_date(db: Session, business_id: UUID, start: date, end: date) -> Dict[date, float]:
    """Line-item materials cost per order date; dates without recorded items are absent"""
    try:
        rows = db.query(OrderItemCost.order_date, OrderItemCost.item_cost, OrderItemCost.quantity).filter(
            OrderItemCost.business_id == business_id,
            OrderItemCost.order_date >= start,
            OrderItemCost.order_date <= end,
        ).all()
    except SQLAlchemyError as e:
        logger.warning("Order item cost lookup failed for %s: %s", business_id, e)
        db.rollback()
        return {}

    items_by_date: Dict[date, list] = defaultdict(list)
    for row in rows:
        items_by_date[row.order_date].append((row.item_cost, row.quantity))
    return {day: calc.line_items_cost(items) for day, items in items_by_date.items()}


def _new_daily_record(business_id: UUID, day: date) -> DailyCashflow:
    record = DailyCashflow(business_id=business_id, date=day, revenue=0.0, orders_count=0, items_count=0)
    for name in COST_FIELDS:
        setattr(record, name, 0.0)
    record.total_expenses = 0.0
    record.profit = 0.0
    record.roi = 0.0
    return record


def lock_daily_record(db: Session, business_id: UUID, day: date) -> DailyCashflow:
    """Fetch the day's row for update, or stage a new one"""
    record = db.query(DailyCashflow).filter(
        DailyCashflow.business_id == business_id,
        DailyCashflow.date == day,
    ).with_for_update().first()

    if record is None:
        record = _new_daily_record(business_id, day)
        db.add(record)
    return record


def save_daily_record(
    db: Session,
    business_id: UUID,
    day: date,
    mutate: Callable[[DailyCashflow], None],
) -> DailyCashflow:
    """
    Read-modify-write a daily record in one transaction.

    A concurrent insert of the same (business_id, date) surfaces as an
    IntegrityError; the write is then retried once against the winner's row.
    """
    for attempt in range(2):
        record = lock_daily_record(db, business_id, day)
        mutate(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt:
                raise
            logger.info("Daily record %s %s created concurrently, retrying", business_id, day)
            continue
        db.refresh(record)
        return record
    raise RuntimeError("unreachable")


def refresh_totals(record: DailyCashflow) -> DailyCashflow:
    """Recompute total_expenses, profit and roi from the stored components"""
    costs = calc.DailyCosts(**{name: getattr(record, name) or 0.0 for name in COST_FIELDS})
    totals = calc.calculate_totals(record.revenue or 0.0, costs)
    record.total_expenses = totals.total_expenses
    record.profit = totals.profit
    record.roi = totals.roi
    return record


def recompute_record(
    record: DailyCashflow,
    rates: calc.RateSettings,
    overheads: calc.DayOverheads,
    recorded_materials_cost: Optional[float],
) -> DailyCashflow:
    """Re-derive every computed component of a record from its revenue, shipping and ad spend"""
    costs, totals = calc.calculate_day(
        record.revenue or 0.0,
        rates,
        shipping_cost=record.shipping_cost or 0.0,
        google_ads_cost=record.google_ads_cost or 0.0,
        facebook_ads_cost=record.facebook_ads_cost or 0.0,
        tiktok_ads_cost=record.tiktok_ads_cost or 0.0,
        recorded_materials_cost=recorded_materials_cost,
        manual_credit_card_fees=record.credit_card_fees or 0.0,
        overheads=overheads,
    )
    for name in COST_FIELDS:
        setattr(record, name, getattr(costs, name))
    record.total_expenses = totals.total_expenses
    record.profit = totals.profit
    record.roi = totals.roi
    return record


def day_overheads(db: Session, business_id: UUID, day: date) -> calc.DayOverheads:
    """Expenses, payroll and refunds charged to one day under the business's spread mode"""
    rates = rate_settings_for(get_business_settings(db, business_id))
    return load_month_overheads(db, business_id, day.year, day.month).for_day(day, rates.spread_mode)


def apply_overheads(record: DailyCashflow, overheads: calc.DayOverheads) -> DailyCashflow:
    record.expenses_vat = overheads.expenses_vat
    record.expenses_no_vat = overheads.expenses_no_vat
    record.employee_cost = overheads.employee_cost
    record.customer_refunds = overheads.customer_refunds
    return record


def recompute_day(
    db: Session,
    business_id: UUID,
    day: date,
    mutate: Optional[Callable[[DailyCashflow], None]] = None,
) -> DailyCashflow:
    """
    Apply an optional change to a day's record, then recompute it with the
    business's current settings, overheads and line-item costs.
    """
    rates = rate_settings_for(get_business_settings(db, business_id))
    overheads = load_month_overheads(db, business_id, day.year, day.month).for_day(day, rates.spread_mode)
    recorded_cost = recorded_materials_by_date(db, business_id, day, day).get(day)

    def _apply(record: DailyCashflow) -> None:
        if mutate is not None:
            mutate(record)
        recompute_record(record, rates, overheads, recorded_cost)

    return save_daily_record(db, business_id, day, _apply)


async def sync_day(
    db: Session,
    business_id: UUID,
    day: date,
    client: WooCommerceClient,
) -> Tuple[DailyCashflow, int]:
    """
    Pull a day's orders from WooCommerce and rebuild its record.
    Ad spend already stored on the row is kept.

    Returns:
        Tuple of (record, number of orders counted as revenue)
    """
    business_settings = get_business_settings(db, business_id)
    statuses = valid_statuses_for(business_settings)

    orders = await client.fetch_orders_by_date(day, statuses)
    valid_orders = filter_valid_orders(orders, statuses)
    logger.info("Syncing %s for %s: %d orders, %d valid", day, business_id, len(orders), len(valid_orders))

    stats = calculate_daily_stats(
        valid_orders,
        fixed_shipping_cost=(business_settings.shipping_cost or 0.0) if business_settings else 0.0,
        charge_shipping_on_free_orders=business_settings.charge_shipping_on_free_orders if business_settings else True,
        free_shipping_methods=(business_settings.free_shipping_methods if business_settings else None),
    )

    def _apply_stats(record: DailyCashflow) -> None:
        record.revenue = stats.revenue
        record.orders_count = stats.orders_count
        record.items_count = stats.items_count
        record.shipping_cost = stats.shipping_cost

    record = recompute_day(db, business_id, day, _apply_stats)
    logger.info("Saved %s for %s: revenue=%.2f profit=%.2f", day, business_id, record.revenue, record.profit)
    return record, stats.orders_count


def add_order(db: Session, business_id: UUID, order: Dict) -> Optional[DailyCashflow]:
    """
    Add a single new order to its day without re-fetching the whole day.
    Orders whose status is not counted are ignored and None is returned.
    """
    business_settings = get_business_settings(db, business_id)
    if not filter_valid_orders([order], valid_statuses_for(business_settings)):
        return None

    stats = calculate_daily_stats(
        [order],
        fixed_shipping_cost=(business_settings.shipping_cost or 0.0) if business_settings else 0.0,
        charge_shipping_on_free_orders=business_settings.charge_shipping_on_free_orders if business_settings else True,
        free_shipping_methods=(business_settings.free_shipping_methods if business_settings else None),
    )

    def _add(record: DailyCashflow) -> None:
        record.revenue = (record.revenue or 0.0) + stats.revenue
        record.orders_count = (record.orders_count or 0) + stats.orders_count
        record.items_count = (record.items_count or 0) + stats.items_count
        record.shipping_cost = (record.shipping_cost or 0.0) + stats.shipping_cost

    return recompute_day(db, business_id, order_date(order), _add)


def recalculate_range(db: Session, business_id: UUID, start: date, end: date) -> int:
    """
    Recompute every stored record between start and end. Returns the number updated.

    All inputs are read before the rows are locked, since a failed lookup
    rolls the session back.
    """
    business_settings = get_business_settings(db, business_id)
    rates = rate_settings_for(business_settings)
    recorded = recorded_materials_by_date(db, business_id, start, end)
    months = {key: load_month_overheads(db, business_id, *key) for key in calc.months_in_range(start, end)}

    records = db.query(DailyCashflow).filter(
        DailyCashflow.business_id == business_id,
        DailyCashflow.date >= start,
        DailyCashflow.date <= end,
    ).order_by(DailyCashflow.date).with_for_update().all()

    for record in records:
        day_overheads = months[(record.date.year, record.date.month)].for_day(record.date, rates.spread_mode)
        recompute_record(record, rates, day_overheads, recorded.get(record.date))

    db.commit()
    return len(records)


def recalculate_month_of(db: Session, business_id: UUID, day: date) -> int:
    """Spread mode ties every day of a month together, so recompute the whole month"""
    start, end = calc.month_bounds(day.year, day.month)
    count = recalculate_range(db, business_id, start, end)
    logger.info("Recalculated %d daily records for %s %d-%02d", count, business_id, day.year, day.month)
    return count


def build_breakdown(db: Session, business_id: UUID, start: date, end: date) -> List[Dict]:
    """
    One profitability row for every day from start to end.

    Days with a stored record use it as-is; days without one still carry
    their share of expenses, payroll and refunds plus any line-item cost.
    """
    business_settings = get_business_settings(db, business_id)
    rates = rate_settings_for(business_settings)
    recorded = recorded_materials_by_date(db, business_id, start, end)

    records = {
        r.date: r
        for r in db.query(DailyCashflow).filter(
            DailyCashflow.business_id == business_id,
            DailyCashflow.date >= start,
            DailyCashflow.date <= end,
        ).all()
    }

    months = {key: load_month_overheads(db, business_id, *key) for key in calc.months_in_range(start, end)}

    rows = []
    for day in calc.date_range(start, end):
        record = records.get(day)
        if record is not None:
            row = {
                "date": day,
                "has_record": True,
                "revenue": record.revenue or 0.0,
                "orders_count": record.orders_count or 0,
                "items_count": record.items_count or 0,
                "total_expenses": record.total_expenses or 0.0,
                "profit": record.profit or 0.0,
                "roi": record.roi or 0.0,
            }
            row.update({name: getattr(record, name) or 0.0 for name in COST_FIELDS})
        else:
            day_overheads = months[(day.year, day.month)].for_day(day, rates.spread_mode)
            costs = calc.DailyCosts(
                materials_cost=recorded.get(day, 0.0),
                expenses_vat=day_overheads.expenses_vat,
                expenses_no_vat=day_overheads.expenses_no_vat,
                employee_cost=day_overheads.employee_cost,
                customer_refunds=day_overheads.customer_refunds,
            )
            totals = calc.calculate_totals(0.0, costs)
            row = {
                "date": day,
                "has_record": False,
                "revenue": 0.0,
                "orders_count": 0,
                "items_count": 0,
                "total_expenses": totals.total_expenses,
                "profit": totals.profit,
                "roi": totals.roi,
            }
            row.update({name: getattr(costs, name) for name in COST_FIELDS})
        rows.append(row)
    return rows


def monthly_summary(db: Session, business_id: UUID, year: int, month: int) -> Dict:
    """Month totals and a per-category breakdown, rounded to cents"""
    start, end = calc.month_bounds(year, month)
    rows = build_breakdown(db, business_id, start, end)

    sums = defaultdict(float)
    for row in rows:
        for key in ("revenue", "orders_count", "items_count", "total_expenses", "profit") + COST_FIELDS:
            sums[key] += row[key]

    items_count = int(sums["items_count"])
    if items_count == 0:
        items_count = int(db.query(func.coalesce(func.sum(OrderItemCost.quantity), 0)).filter(
            OrderItemCost.business_id == business_id,
            OrderItemCost.order_date >= start,
            OrderItemCost.order_date <= end,
        ).scalar() or 0)

    revenue = sums["revenue"]
    profit_percent = sums["profit"] * 100 / revenue if revenue > 0 else 0.0

    return {
        "month": month,
        "year": year,
        "start_date": start,
        "end_date": end,
        "summary": {
            "revenue": calc.round_money(revenue),
            "orders_count": int(sums["orders_count"]),
            "items_count": items_count,
            "profit": calc.round_money(sums["profit"]),
            "profit_percent": round(profit_percent, 1),
            "total_expenses": calc.round_money(sums["total_expenses"]),
        },
        "breakdown": {name: calc.round_money(sums[name]) for name in COST_FIELDS},
    }

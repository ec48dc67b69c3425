"""
Daily profitability calculations.

Pure functions only: nothing here touches the database or the network, so
the sync, webhook, breakdown and summary paths all share one formula sheet.
Rates are percentages (18 means 18%).
"""
from calendar import monthrange
from dataclasses import dataclass, field, fields
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from app.models.business_settings import SpreadMode, VatMode, CreditFeeMode


@dataclass
class DailyCosts:
    """Every cost that counts toward a day's total_expenses"""
    google_ads_cost: float = 0.0
    facebook_ads_cost: float = 0.0
    tiktok_ads_cost: float = 0.0
    shipping_cost: float = 0.0
    materials_cost: float = 0.0
    credit_card_fees: float = 0.0
    vat: float = 0.0
    # Overheads apportioned to the day (0 unless expenses/payroll/refunds exist)
    expenses_vat: float = 0.0
    expenses_no_vat: float = 0.0
    employee_cost: float = 0.0
    customer_refunds: float = 0.0

    def total(self) -> float:
        return sum(getattr(self, f.name) or 0.0 for f in fields(self))


@dataclass
class DailyTotals:
    total_expenses: float
    profit: float
    roi: float


@dataclass
class RateSettings:
    vat_rate: float
    credit_card_rate: float
    materials_rate: float
    vat_mode: str = VatMode.FLAT.value
    credit_fee_mode: str = CreditFeeMode.PERCENTAGE.value
    spread_mode: str = SpreadMode.EXACT.value


@dataclass
class DayOverheads:
    expenses_vat: float = 0.0
    expenses_vat_amount: float = 0.0  # input VAT paid on VAT expenses
    expenses_no_vat: float = 0.0
    employee_cost: float = 0.0
    customer_refunds: float = 0.0


@dataclass
class MonthlyOverheads:
    """Expense, refund and payroll entries of one calendar month"""
    year: int
    month: int
    vat_expenses_by_date: Dict[date, float] = field(default_factory=dict)
    vat_amounts_by_date: Dict[date, float] = field(default_factory=dict)
    no_vat_expenses_by_date: Dict[date, float] = field(default_factory=dict)
    refunds_by_date: Dict[date, float] = field(default_factory=dict)
    total_salaries: float = 0.0

    @property
    def days(self) -> int:
        return days_in_month(self.year, self.month)

    def for_day(self, day: date, spread_mode: str) -> DayOverheads:
        """
        Overheads charged to a single day.

        In spread mode each category's monthly total is divided evenly over
        the calendar days of the month; in exact mode only the entries dated
        on that day count. Salaries are always spread.
        """
        if spread_mode == SpreadMode.SPREAD.value:
            return DayOverheads(
                expenses_vat=spread_daily(sum(self.vat_expenses_by_date.values()), self.year, self.month),
                expenses_vat_amount=spread_daily(sum(self.vat_amounts_by_date.values()), self.year, self.month),
                expenses_no_vat=spread_daily(sum(self.no_vat_expenses_by_date.values()), self.year, self.month),
                employee_cost=spread_daily(self.total_salaries, self.year, self.month),
                customer_refunds=spread_daily(sum(self.refunds_by_date.values()), self.year, self.month),
            )

        return DayOverheads(
            expenses_vat=self.vat_expenses_by_date.get(day, 0.0),
            expenses_vat_amount=self.vat_amounts_by_date.get(day, 0.0),
            expenses_no_vat=self.no_vat_expenses_by_date.get(day, 0.0),
            employee_cost=spread_daily(self.total_salaries, self.year, self.month),
            customer_refunds=self.refunds_by_date.get(day, 0.0),
        )


def calculate_profit(revenue: float, total_expenses: float) -> float:
    return (revenue or 0.0) - (total_expenses or 0.0)


def calculate_roi(profit: float, revenue: float) -> float:
    """
    Profit as a percentage of revenue.

    With no revenue a loss reports exactly -100 and anything else 0.
    """
    if revenue and revenue > 0:
        return profit * 100 / revenue
    if profit < 0:
        return -100.0
    return 0.0


def calculate_totals(revenue: float, costs: DailyCosts) -> DailyTotals:
    """Compute total_expenses, profit and roi for one day"""
    total_expenses = costs.total()
    profit = calculate_profit(revenue, total_expenses)
    return DailyTotals(
        total_expenses=total_expenses,
        profit=profit,
        roi=calculate_roi(profit, revenue or 0.0),
    )


def flat_vat(revenue: float, vat_rate: float) -> float:
    return (revenue or 0.0) * (vat_rate or 0.0) / 100


def embedded_vat(amount: float, vat_rate: float) -> float:
    """VAT contained in a gross amount: amount * rate / (100 + rate)"""
    rate = vat_rate or 0.0
    return (amount or 0.0) * rate / (100 + rate)


def deductible_vat(
    vat_rate: float,
    shipping_cost: float = 0.0,
    materials_cost: float = 0.0,
    expenses_vat_amount: float = 0.0,
) -> float:
    return (
        embedded_vat(shipping_cost, vat_rate)
        + embedded_vat(materials_cost, vat_rate)
        + (expenses_vat_amount or 0.0)
    )


def net_vat(
    revenue: float,
    vat_rate: float,
    shipping_cost: float = 0.0,
    materials_cost: float = 0.0,
    expenses_vat_amount: float = 0.0,
) -> float:
    """Output VAT on revenue minus deductible input VAT, never below zero"""
    deductible = deductible_vat(vat_rate, shipping_cost, materials_cost, expenses_vat_amount)
    return max(0.0, flat_vat(revenue, vat_rate) - deductible)


def credit_card_fees(revenue: float, credit_card_rate: float) -> float:
    return (revenue or 0.0) * (credit_card_rate or 0.0) / 100


def line_items_cost(items: Iterable[Tuple[Optional[float], Optional[int]]]) -> float:
    """Sum item_cost * quantity; a missing quantity counts as one unit"""
    total = 0.0
    for item_cost, quantity in items:
        total += (item_cost or 0.0) * (quantity if quantity is not None else 1)
    return total


def materials_cost(revenue: float, materials_rate: float, recorded_cost: Optional[float] = None) -> float:
    """
    Materials cost for a day.

    Uses the recorded line-item cost when there is one, otherwise
    revenue * materials_rate.
    """
    if recorded_cost is not None:
        return recorded_cost
    return (revenue or 0.0) * (materials_rate or 0.0) / 100


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def spread_daily(monthly_total: float, year: int, month: int) -> float:
    return (monthly_total or 0.0) / days_in_month(year, month)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def date_range(start: date, end: date) -> List[date]:
    """Inclusive list of days from start to end"""
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def months_in_range(start: date, end: date) -> List[Tuple[int, int]]:
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return months


def calculate_day(
    revenue: float,
    rates: RateSettings,
    *,
    shipping_cost: float = 0.0,
    google_ads_cost: float = 0.0,
    facebook_ads_cost: float = 0.0,
    tiktok_ads_cost: float = 0.0,
    recorded_materials_cost: Optional[float] = None,
    manual_credit_card_fees: float = 0.0,
    overheads: Optional[DayOverheads] = None,
) -> Tuple[DailyCosts, DailyTotals]:
    """
    Derive every cost component of a day from its revenue and settings,
    then its totals.

    Args:
        revenue: Revenue from valid orders
        rates: Effective business rates and modes
        shipping_cost: Shipping cost carried by the business
        recorded_materials_cost: Line-item materials cost, None when nothing is recorded
        manual_credit_card_fees: Fee kept as-is when the credit fee mode is manual
        overheads: Expenses, payroll and refunds apportioned to the day

    Returns:
        Tuple of (costs, totals)
    """
    revenue = revenue or 0.0
    overheads = overheads or DayOverheads()

    materials = materials_cost(revenue, rates.materials_rate, recorded_materials_cost)

    if rates.credit_fee_mode == CreditFeeMode.MANUAL.value:
        fees = manual_credit_card_fees or 0.0
    else:
        fees = credit_card_fees(revenue, rates.credit_card_rate)

    if rates.vat_mode == VatMode.NET.value:
        vat = net_vat(revenue, rates.vat_rate, shipping_cost, materials, overheads.expenses_vat_amount)
    else:
        vat = flat_vat(revenue, rates.vat_rate)

    costs = DailyCosts(
        google_ads_cost=google_ads_cost or 0.0,
        facebook_ads_cost=facebook_ads_cost or 0.0,
        tiktok_ads_cost=tiktok_ads_cost or 0.0,
        shipping_cost=shipping_cost or 0.0,
        materials_cost=materials,
        credit_card_fees=fees,
        vat=vat,
        expenses_vat=overheads.expenses_vat,
        expenses_no_vat=overheads.expenses_no_vat,
        employee_cost=overheads.employee_cost,
        customer_refunds=overheads.customer_refunds,
    )
    return costs, calculate_totals(revenue, costs)


def round_money(value: float) -> float:
    return round(value or 0.0, 2)

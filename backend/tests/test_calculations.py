"""
Tests for the daily profitability formulas.
"""
from datetime import date

import pytest

from app.services import calculations as calc
from app.services.calculations import DailyCosts, DayOverheads, MonthlyOverheads, RateSettings


RATES = RateSettings(vat_rate=18.0, credit_card_rate=2.5, materials_rate=30.0)


class TestTotals:

    def test_worked_example(self):
        costs = DailyCosts(
            google_ads_cost=100,
            facebook_ads_cost=50,
            shipping_cost=20,
            materials_cost=300,
            credit_card_fees=25,
            vat=170,
        )
        totals = calc.calculate_totals(1000, costs)
        assert totals.total_expenses == 665
        assert totals.profit == 335
        assert totals.roi == 33.5

    def test_loss_without_revenue_is_minus_100(self):
        totals = calc.calculate_totals(0, DailyCosts(google_ads_cost=50))
        assert totals.total_expenses == 50
        assert totals.profit == -50
        assert totals.roi == -100

    def test_nothing_at_all_is_zero_roi(self):
        totals = calc.calculate_totals(0, DailyCosts())
        assert totals.total_expenses == 0
        assert totals.profit == 0
        assert totals.roi == 0

    def test_total_is_exact_sum_of_components(self):
        costs = DailyCosts(
            google_ads_cost=1.5,
            facebook_ads_cost=2.25,
            tiktok_ads_cost=3,
            shipping_cost=4,
            materials_cost=5,
            credit_card_fees=6,
            vat=7,
            expenses_vat=8,
            expenses_no_vat=9,
            employee_cost=10,
            customer_refunds=11,
        )
        assert costs.total() == pytest.approx(66.75)

    def test_negative_profit_with_revenue(self):
        totals = calc.calculate_totals(200, DailyCosts(google_ads_cost=250))
        assert totals.profit == -50
        assert totals.roi == pytest.approx(-25)


class TestRoi:

    @pytest.mark.parametrize("profit,revenue,expected", [
        (335, 1000, 33.5),
        (-50, 0, -100),
        (0, 0, 0),
        (10, 0, 0),
        (-50, 200, -25),
    ])
    def test_roi(self, profit, revenue, expected):
        assert calc.calculate_roi(profit, revenue) == pytest.approx(expected)


class TestVat:

    def test_flat_vat(self):
        assert calc.flat_vat(1000, 18) == pytest.approx(180)

    def test_embedded_vat(self):
        assert calc.embedded_vat(118, 18) == pytest.approx(18)

    def test_net_vat_deducts_input_vat(self):
        # 212.4 output VAT - 18 embedded in shipping - 5 paid on expenses
        assert calc.net_vat(1180, 18, shipping_cost=118, expenses_vat_amount=5) == pytest.approx(189.4)

    def test_net_vat_never_negative(self):
        assert calc.net_vat(0, 18, shipping_cost=118, materials_cost=236) == 0


class TestMaterials:

    def test_falls_back_to_rate(self):
        assert calc.materials_cost(1000, 30) == pytest.approx(300)

    def test_recorded_cost_wins(self):
        assert calc.materials_cost(1000, 30, recorded_cost=120) == 120

    def test_recorded_zero_is_still_recorded(self):
        assert calc.materials_cost(1000, 30, recorded_cost=0.0) == 0.0

    def test_line_items_cost(self):
        assert calc.line_items_cost([(10, 2), (5, None), (None, 3)]) == 25


class TestSpreading:

    def test_spread_reconstructs_monthly_total(self):
        days = calc.days_in_month(2024, 2)
        assert days == 29
        assert sum(calc.spread_daily(1000, 2024, 2) for _ in range(days)) == pytest.approx(1000)

    def test_spread_mode_divides_every_category(self):
        overheads = MonthlyOverheads(
            year=2024,
            month=2,
            vat_expenses_by_date={date(2024, 2, 10): 290},
            vat_amounts_by_date={date(2024, 2, 10): 58},
            no_vat_expenses_by_date={date(2024, 2, 1): 145},
            refunds_by_date={date(2024, 2, 20): 29},
            total_salaries=2900,
        )
        day = overheads.for_day(date(2024, 2, 3), "spread")
        assert day.expenses_vat == pytest.approx(10)
        assert day.expenses_vat_amount == pytest.approx(2)
        assert day.expenses_no_vat == pytest.approx(5)
        assert day.customer_refunds == pytest.approx(1)
        assert day.employee_cost == pytest.approx(100)

    def test_exact_mode_uses_literal_entries(self):
        overheads = MonthlyOverheads(
            year=2024,
            month=2,
            vat_expenses_by_date={date(2024, 2, 10): 290},
            refunds_by_date={date(2024, 2, 20): 29},
            total_salaries=2900,
        )
        other_day = overheads.for_day(date(2024, 2, 3), "exact")
        assert other_day.expenses_vat == 0
        assert other_day.customer_refunds == 0

        expense_day = overheads.for_day(date(2024, 2, 10), "exact")
        assert expense_day.expenses_vat == 290

    def test_salaries_always_spread(self):
        overheads = MonthlyOverheads(year=2024, month=2, total_salaries=2900)
        assert overheads.for_day(date(2024, 2, 3), "exact").employee_cost == pytest.approx(100)
        assert overheads.for_day(date(2024, 2, 3), "spread").employee_cost == pytest.approx(100)


class TestCalculateDay:

    def test_flat_mode(self):
        costs, totals = calc.calculate_day(1000, RATES, shipping_cost=20, google_ads_cost=100)
        assert costs.materials_cost == pytest.approx(300)
        assert costs.credit_card_fees == pytest.approx(25)
        assert costs.vat == pytest.approx(180)
        assert totals.total_expenses == pytest.approx(625)
        assert totals.profit == pytest.approx(375)
        assert totals.roi == pytest.approx(37.5)

    def test_manual_credit_fee_mode_keeps_fee(self):
        rates = RateSettings(vat_rate=18, credit_card_rate=2.5, materials_rate=30, credit_fee_mode="manual")
        costs, _ = calc.calculate_day(1000, rates, manual_credit_card_fees=12)
        assert costs.credit_card_fees == 12

    def test_net_vat_mode(self):
        rates = RateSettings(vat_rate=18, credit_card_rate=0, materials_rate=0, vat_mode="net")
        costs, _ = calc.calculate_day(
            1180,
            rates,
            shipping_cost=118,
            overheads=DayOverheads(expenses_vat_amount=5),
        )
        assert costs.vat == pytest.approx(189.4)

    def test_recorded_materials_used(self):
        costs, _ = calc.calculate_day(1000, RATES, recorded_materials_cost=120)
        assert costs.materials_cost == 120

    def test_overheads_count_towards_expenses(self):
        overheads = DayOverheads(expenses_vat=10, expenses_no_vat=5, employee_cost=100, customer_refunds=15)
        costs, totals = calc.calculate_day(0, RATES, overheads=overheads)
        assert totals.total_expenses == pytest.approx(130)
        assert totals.roi == -100


class TestDates:

    def test_date_range_inclusive(self):
        days = calc.date_range(date(2024, 2, 28), date(2024, 3, 1))
        assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

    def test_months_in_range_crosses_year(self):
        assert calc.months_in_range(date(2023, 12, 15), date(2024, 2, 1)) == [(2023, 12), (2024, 1), (2024, 2)]

    def test_month_bounds(self):
        assert calc.month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))

"""
Service tests for daily record writes under conflict and failing lookups
"""
from datetime import date

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.models import DailyCashflow
from app.services import cashflow_service

DAY = date(2024, 3, 10)


def _duplicate_key():
    return IntegrityError("INSERT INTO daily_cashflow", {}, Exception("UNIQUE constraint failed"))


def _add_revenue(amount):
    def _mutate(record):
        record.revenue = (record.revenue or 0.0) + amount
    return _mutate


class TestSaveDailyRecord:

    def test_retries_against_concurrent_insert(self, db, business, monkeypatch):
        real_commit = db.commit
        calls = []

        def commit_losing_first_race():
            calls.append(1)
            if len(calls) == 1:
                # another writer creates the day first
                db.rollback()
                db.add(DailyCashflow(business_id=business.id, date=DAY, revenue=50.0))
                real_commit()
                raise _duplicate_key()
            real_commit()

        monkeypatch.setattr(db, "commit", commit_losing_first_race)

        record = cashflow_service.save_daily_record(db, business.id, DAY, _add_revenue(10))

        assert len(calls) == 2
        assert record.revenue == 60
        rows = db.query(DailyCashflow).filter(DailyCashflow.business_id == business.id).all()
        assert len(rows) == 1

    def test_second_conflict_propagates(self, db, business, monkeypatch):
        def always_conflicts():
            raise _duplicate_key()

        monkeypatch.setattr(db, "commit", always_conflicts)

        with pytest.raises(IntegrityError):
            cashflow_service.save_daily_record(db, business.id, DAY, _add_revenue(10))

        assert db.query(DailyCashflow).count() == 0


class TestMonthOverheads:

    def test_failed_lookup_is_empty(self, db, business):
        db.execute(text("DROP TABLE customer_refunds"))
        db.commit()

        overheads = cashflow_service.load_month_overheads(db, business.id, 2024, 3)

        assert overheads.total_salaries == 0
        assert overheads.refunds_by_date == {}
        assert overheads.vat_expenses_by_date == {}

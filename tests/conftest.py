"""Shared fixtures for expense tests."""

import os
import sys
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from expenses.models import Category, Expense

CREATED_AT = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def build_expense(expense_id, amount, category, date, description='Expense'):
    """Build an expense with fixed timestamps."""
    return Expense(
        id=expense_id,
        amount=Decimal(str(amount)),
        category=Category(category),
        description=description,
        date=date,
        created_at=CREATED_AT,
        updated_at=CREATED_AT
    )


@pytest.fixture
def make_expense():
    """Factory for expenses with fixed timestamps."""
    return build_expense


@pytest.fixture
def sample_expenses():
    """January and February expenses across two categories."""
    return [
        build_expense('exp1', 50, 'Food', '2024-01-05', 'Weekly groceries'),
        build_expense('exp2', 30, 'Food', '2024-02-10', 'Lunch with "Sam"'),
        build_expense('exp3', 20, 'Bills', '2024-02-15', 'Electricity bill')
    ]


@pytest.fixture
def far_east_clock(monkeypatch):
    """Run with the local clock at UTC+14 and return the local date it shows."""
    if not hasattr(time, 'tzset'):
        pytest.skip('time.tzset is not available')
    monkeypatch.setenv('TZ', 'LINT-14')
    time.tzset()
    yield (datetime.now(timezone.utc) + timedelta(hours=14)).date()
    monkeypatch.undo()
    time.tzset()

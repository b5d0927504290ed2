"""Aggregations over the full expense collection."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from shared.categories import CATEGORY_ORDER, Category
from shared.formatting import is_date_in_current_month, local_today
from expenses.models import (
    CategoryShare,
    Expense,
    ExpenseSummary,
    MonthlyTotal
)

ZERO = Decimal('0')


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def current_month_total(expenses: Iterable[Expense], today: Optional[date] = None) -> Decimal:
    """
    Sum of expenses dated within the current calendar month.

    Args:
        expenses: Expenses to sum
        today: Reference day (defaults to the local date)

    Returns:
        Total for the month containing today
    """
    today = today or local_today()
    return total_amount(
        expense for expense in expenses
        if is_date_in_current_month(expense.date, today)
    )


def category_totals(expenses: Iterable[Expense]) -> Dict[Category, Decimal]:
    """Sum amounts per category. Categories without expenses are absent."""
    totals: Dict[Category, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def top_categories(expenses: Iterable[Expense], n: int = 5) -> List[CategoryShare]:
    """
    Largest categories by spending with their share of the total.

    Equal amounts are ordered by Category declaration order. The percentage
    is 0 when the total is 0.

    Args:
        expenses: Expenses to aggregate
        n: Maximum number of categories to return

    Returns:
        Category shares sorted by amount, largest first
    """
    expenses = list(expenses)
    total = total_amount(expenses)
    ranked = sorted(
        category_totals(expenses).items(),
        key=lambda item: (-item[1], CATEGORY_ORDER[item[0]])
    )

    return [
        CategoryShare(
            category=category,
            amount=amount,
            percentage=float(amount / total * 100) if total > 0 else 0.0
        )
        for category, amount in ranked[:max(n, 0)]
    ]


def monthly_totals(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Sum amounts per month, keyed "YYYY-MM" in chronological order."""
    by_month: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        by_month[expense.date.strftime('%Y-%m')] += expense.amount
    return dict(sorted(by_month.items()))


def monthly_trend(
    expenses: Iterable[Expense],
    months: int = 6,
    today: Optional[date] = None
) -> List[MonthlyTotal]:
    """
    Spending for each of the last `months` calendar months, oldest first.

    Months without expenses are included with a zero amount.
    """
    today = today or local_today()
    amounts: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[str, int] = defaultdict(int)
    for expense in expenses:
        key = expense.date.strftime('%Y-%m')
        amounts[key] += expense.amount
        counts[key] += 1

    trend = []
    for offset in range(months - 1, -1, -1):
        year, month = divmod(today.year * 12 + today.month - 1 - offset, 12)
        first_day = date(year, month + 1, 1)
        key = first_day.strftime('%Y-%m')
        trend.append(MonthlyTotal(
            month=key,
            label=first_day.strftime('%b %Y'),
            amount=amounts[key],
            count=counts[key]
        ))
    return trend


def get_summary(expenses: Iterable[Expense], today: Optional[date] = None) -> ExpenseSummary:
    """Dashboard summary: totals, this month's spending and the top five categories."""
    expenses = list(expenses)
    return ExpenseSummary(
        total_expenses=total_amount(expenses),
        monthly_expenses=current_month_total(expenses, today),
        category_totals=category_totals(expenses),
        top_categories=top_categories(expenses)
    )

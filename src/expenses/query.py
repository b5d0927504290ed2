"""Filtering and ordering of expense lists."""

from typing import Any, Iterable, List, Optional

from shared.formatting import is_date_in_range
from expenses.models import Expense, ExpenseFilters


def filter_expenses(
    expenses: Iterable[Expense],
    filters: Optional[ExpenseFilters] = None,
    **criteria: Any
) -> List[Expense]:
    """
    Return the expenses matching every active criterion, in their original order.

    Args:
        expenses: Expenses to filter
        filters: Criteria as an ExpenseFilters model
        **criteria: Criteria as keywords (category, categories, search,
            date_from, date_to), used when filters is not given

    Returns:
        Matching expenses

    Examples:
        filter_expenses(expenses, category='Bills')
        filter_expenses(expenses, categories=['Food', 'Bills'])
        filter_expenses(expenses, search='coffee', date_from='2024-01-01')
    """
    if filters is None:
        filters = ExpenseFilters(**criteria)

    return [expense for expense in expenses if matches(expense, filters)]


def matches(expense: Expense, filters: ExpenseFilters) -> bool:
    if filters.category and filters.category != 'all' and expense.category != filters.category:
        return False

    if filters.categories is not None and expense.category not in filters.categories:
        return False

    if filters.search and filters.search.lower() not in expense.description.lower():
        return False

    return is_date_in_range(expense.date, filters.date_from, filters.date_to)


def sort_expenses(expenses: Iterable[Expense], descending: bool = True) -> List[Expense]:
    """Order expenses by transaction date, newest first by default. Ties keep their order."""
    return sorted(expenses, key=lambda expense: expense.date, reverse=descending)

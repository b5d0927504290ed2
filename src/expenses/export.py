"""Export expenses to CSV, JSON and plain-text reports."""

import csv
import logging
from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from typing import Iterable, Optional

from shared.formatting import format_amount_plain, format_date, local_today, today_utc
from shared.serialization import dumps
from expenses.models import DateRange, Expense, ExportSummary, utc_now
from expenses.summary import category_totals, total_amount

logger = logging.getLogger(__name__)

CSV_HEADERS = ['Date', 'Description', 'Category', 'Amount']


def to_csv(expenses: Iterable[Expense]) -> str:
    """
    Export expenses to CSV format.

    Text fields are quoted and amounts are bare plain decimals ("12.5").
    Dates use the short display format ("Jan 05, 2024").

    Args:
        expenses: Expenses in the order they should appear

    Returns:
        CSV content as string, without a trailing newline
    """
    output = StringIO()
    csv.writer(output, lineterminator='\n').writerow(CSV_HEADERS)

    writer = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    count = 0
    for expense in expenses:
        writer.writerow([
            format_date(expense.date),
            expense.description,
            expense.category.value,
            Decimal(format_amount_plain(expense.amount))
        ])
        count += 1

    logger.info(f"Exported {count} expenses to CSV")
    return output.getvalue()[:-1]


def export_summary(expenses: Iterable[Expense]) -> ExportSummary:
    expenses = list(expenses)
    dates = [expense.date for expense in expenses]
    return ExportSummary(
        record_count=len(expenses),
        total_amount=total_amount(expenses),
        category_breakdown=category_totals(expenses),
        date_range=DateRange(
            start=min(dates) if dates else None,
            end=max(dates) if dates else None
        )
    )


def to_json(expenses: Iterable[Expense], now: Optional[datetime] = None) -> str:
    """
    Export expenses with summary statistics as an indented JSON document.

    Args:
        expenses: Expenses to export
        now: Export timestamp (defaults to the current UTC time)

    Returns:
        JSON content as string
    """
    expenses = list(expenses)
    document = {
        'exportDate': now or utc_now(),
        'summary': export_summary(expenses).model_dump(by_alias=True),
        'expenses': [expense.model_dump(by_alias=True) for expense in expenses]
    }

    logger.info(f"Exported {len(expenses)} expenses to JSON")
    return dumps(document, indent=2)


def to_text_report(expenses: Iterable[Expense], today: Optional[date] = None) -> str:
    """
    Render a printable plain-text expense report.

    Args:
        expenses: Expenses to list, in order
        today: Generation date shown in the header (defaults to the local date)

    Returns:
        Report text with a summary block and one line per expense
    """
    expenses = list(expenses)
    summary = export_summary(expenses)
    lines = [
        'EXPENSE REPORT',
        f"Generated on: {format_date(today or local_today())}",
        '',
        'SUMMARY',
        f"Total Records: {summary.record_count}",
        f"Total Amount: ${summary.total_amount:.2f}",
        '',
        'EXPENSES'
    ]
    lines.extend(
        f"{format_date(expense.date)} | {expense.category.value} | "
        f"{expense.description} | ${expense.amount:.2f}"
        for expense in expenses
    )

    logger.info(f"Exported {len(expenses)} expenses to a text report")
    return '\n'.join(lines)


def export_filename(today: Optional[date] = None) -> str:
    """Default export file name without extension, e.g. "expenses_2024-02-20"."""
    return f"expenses_{(today or today_utc()).isoformat()}"

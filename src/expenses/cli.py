"""Command line interface for recording and reviewing expenses."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import ExpenseTrackerException
from shared.formatting import format_currency, format_date
from expenses.export import export_filename, to_csv, to_json, to_text_report
from expenses.models import Category, ExpenseDraft, ExpenseFilters
from expenses.query import filter_expenses, sort_expenses
from expenses.repository import ExpenseRepository
from expenses.storage import storage_from_env
from expenses.summary import get_summary, monthly_trend, total_amount

logger = logging.getLogger(__name__)

CATEGORY_CHOICES = [category.value for category in Category]


def _add_filter_arguments(
    parser: argparse.ArgumentParser,
    multiple_categories: bool = False
) -> None:
    if multiple_categories:
        parser.add_argument('--category', dest='categories', action='append', choices=CATEGORY_CHOICES,
                            help='Include this category; repeat to select several (default: all)')
    else:
        parser.add_argument('--category', choices=CATEGORY_CHOICES + ['all'], help='Only this category')
    parser.add_argument('--search', help='Case-insensitive text to find in descriptions')
    parser.add_argument('--from', dest='date_from', help='Earliest date (YYYY-MM-DD), inclusive')
    parser.add_argument('--to', dest='date_to', help='Latest date (YYYY-MM-DD), inclusive')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='expenses', description='Track personal expenses.')
    commands = parser.add_subparsers(dest='command', required=True)

    add = commands.add_parser('add', help='Record a new expense')
    add.add_argument('--amount', required=True, help='Amount, e.g. 12.50')
    add.add_argument('--category', required=True, choices=CATEGORY_CHOICES)
    add.add_argument('--description', required=True)
    add.add_argument('--date', help='Transaction date (YYYY-MM-DD), defaults to today')

    list_cmd = commands.add_parser('list', help='Show expenses, newest first')
    _add_filter_arguments(list_cmd)

    update = commands.add_parser('update', help='Change fields of an expense')
    update.add_argument('expense_id')
    update.add_argument('--amount')
    update.add_argument('--category', choices=CATEGORY_CHOICES)
    update.add_argument('--description')
    update.add_argument('--date')

    delete = commands.add_parser('delete', help='Remove an expense')
    delete.add_argument('expense_id')

    summary = commands.add_parser('summary', help='Show spending totals')
    summary.add_argument('--months', type=int, default=6, help='Months of trend to show')

    export = commands.add_parser('export', help='Write expenses to a file')
    export.add_argument('--format', choices=['csv', 'json', 'txt'], default='csv')
    export.add_argument('--output', help='Output path, defaults to expenses_<today>.<format>')
    _add_filter_arguments(export, multiple_categories=True)

    clear = commands.add_parser('clear', help='Delete every expense')
    clear.add_argument('--yes', action='store_true', help='Confirm deleting everything')

    return parser


def _filters_from_args(args: argparse.Namespace) -> ExpenseFilters:
    return ExpenseFilters(
        category=getattr(args, 'category', None),
        categories=getattr(args, 'categories', None),
        search=args.search,
        date_from=args.date_from,
        date_to=args.date_to
    )


def handle_add(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    expense = ExpenseDraft.from_form({
        'amount': args.amount,
        'category': args.category,
        'description': args.description,
        'date': args.date
    }).to_expense()
    repository.add(expense)
    print(expense.id)
    return 0


def handle_list(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    expenses = sort_expenses(filter_expenses(repository.expenses, _filters_from_args(args)))
    for expense in expenses:
        print(
            f"{format_date(expense.date)}  {expense.category.value:<14} "
            f"{format_currency(expense.amount):>12}  {expense.description}  [{expense.id}]"
        )
    print(f"{len(expenses)} expenses, total {format_currency(total_amount(expenses))}")
    return 0


def handle_update(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    patch = {
        field: getattr(args, field)
        for field in ('amount', 'category', 'description', 'date')
        if getattr(args, field) is not None
    }
    if repository.update(args.expense_id, patch) is None:
        print(f"Expense {args.expense_id} not found", file=sys.stderr)
        return 1
    return 0


def handle_delete(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    if not repository.delete(args.expense_id):
        print(f"Expense {args.expense_id} not found", file=sys.stderr)
        return 1
    return 0


def handle_summary(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    summary = get_summary(repository.expenses)
    print(f"Total expenses: {format_currency(summary.total_expenses)}")
    print(f"This month:     {format_currency(summary.monthly_expenses)}")
    print("Top categories:")
    for share in summary.top_categories:
        print(f"  {share.category.value:<14} {format_currency(share.amount):>12} {share.percentage:5.1f}%")
    print("Monthly trend:")
    for month in monthly_trend(repository.expenses, months=args.months):
        print(f"  {month.label:<9} {format_currency(month.amount):>12} ({month.count})")
    return 0


EXPORTERS = {
    'csv': to_csv,
    'json': to_json,
    'txt': to_text_report,
}


def handle_export(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    expenses = sort_expenses(filter_expenses(repository.expenses, _filters_from_args(args)))
    if not expenses:
        print("No expenses to export", file=sys.stderr)
        return 1

    content = EXPORTERS[args.format](expenses)
    output = Path(args.output or f"{export_filename()}.{args.format}")
    output.write_text(content, encoding='utf-8')
    print(output)
    return 0


def handle_clear(repository: ExpenseRepository, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to delete every expense without --yes", file=sys.stderr)
        return 1
    repository.clear()
    return 0


HANDLERS = {
    'add': handle_add,
    'list': handle_list,
    'update': handle_update,
    'delete': handle_delete,
    'summary': handle_summary,
    'export': handle_export,
    'clear': handle_clear,
}


def main(argv: Optional[List[str]] = None, repository: Optional[ExpenseRepository] = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if repository is None:
            repository = ExpenseRepository(storage_from_env())
            repository.initialize()
        return HANDLERS[args.command](repository, args)
    except ExpenseTrackerException as e:
        logger.error(f"Application error: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except PydanticValidationError as e:
        print(f"Error: invalid input\n{e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())

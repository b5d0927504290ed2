#!/usr/bin/env python3
"""
Seed data script for trying out the expense tracker.
Fills the configured storage (see EXPENSES_STORAGE) with sample expenses.
"""

import argparse
import os
import sys
import random
from datetime import timedelta

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from expenses.models import Category, ExpenseDraft
from expenses.repository import ExpenseRepository
from expenses.storage import storage_from_env
from expenses.summary import total_amount
from shared.formatting import format_currency, local_today

DESCRIPTIONS = {
    Category.FOOD: ['Starbucks', 'Grocery run', 'Pizza night', 'Farmers market', 'Lunch out'],
    Category.TRANSPORTATION: ['Uber', 'Gas station', 'Parking', 'Metro card', 'Bike repair'],
    Category.ENTERTAINMENT: ['Netflix', 'Movie tickets', 'Concert', 'Board game', 'Museum'],
    Category.SHOPPING: ['Amazon order', 'Running shoes', 'Winter jacket', 'Headphones'],
    Category.BILLS: ['Electricity bill', 'Water bill', 'Internet', 'Phone plan', 'Rent'],
    Category.OTHER: ['Gift', 'Donation', 'Haircut', 'Miscellaneous']
}


def seed_expenses(repository, num_expenses=50, days=60):
    """Add random expenses dated within the last `days` days."""
    print(f"Creating {num_expenses} sample expenses...")

    today = local_today()
    expenses = []
    for _ in range(num_expenses):
        category = random.choice(list(Category))
        draft = ExpenseDraft(
            amount=f"{random.uniform(5.0, 200.0):.2f}",
            category=category,
            description=random.choice(DESCRIPTIONS[category]),
            date=today - timedelta(days=random.randint(0, days))
        )
        expense = draft.to_expense()
        repository.add(expense)
        expenses.append(expense)

    print(f"Created {len(expenses)} expenses totalling {format_currency(total_amount(expenses))}")
    return expenses


def main():
    """Main function."""
    parser = argparse.ArgumentParser(description='Seed the expense store with sample data.')
    parser.add_argument('--count', type=int, default=50, help='Number of expenses to create')
    parser.add_argument('--days', type=int, default=60, help='Spread dates over this many past days')
    args = parser.parse_args()

    print("=" * 50)
    print("Expense Tracker - Seed Data Script")
    print("=" * 50)

    repository = ExpenseRepository(storage_from_env())
    existing = repository.initialize()
    print(f"\nStore currently holds {len(existing)} expenses")

    seed_expenses(repository, args.count, args.days)

    if repository.last_result and not repository.last_result.ok:
        print(f"Error: expenses could not be saved: {repository.last_result.error}")
        sys.exit(1)

    print("\nData seeding complete!")


if __name__ == '__main__':
    main()

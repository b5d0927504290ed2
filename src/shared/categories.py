"""Expense categories."""

from enum import Enum


class Category(str, Enum):
    """Expense categories, in display order."""

    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    OTHER = "Other"


CATEGORY_ORDER = {category: index for index, category in enumerate(Category)}

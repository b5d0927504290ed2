"""Validation utilities for the expense tracker application."""

from typing import Any, Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from .categories import Category
from .exceptions import ValidationError


VALID_CATEGORIES = [category.value for category in Category]

MAX_AMOUNT = Decimal('999999.99')
MAX_DESCRIPTION_LENGTH = 500


def validate_amount(amount: Any) -> Decimal:
    """
    Validate monetary amount.

    Args:
        amount: Amount to validate

    Returns:
        Validated amount as Decimal

    Raises:
        ValidationError: If amount is invalid
    """
    if amount is None or amount == '':
        raise ValidationError("Amount is required")

    if isinstance(amount, bool):
        raise ValidationError("Invalid amount format")

    try:
        decimal_amount = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount format")

    if not decimal_amount.is_finite():
        raise ValidationError("Invalid amount format")

    if decimal_amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    if decimal_amount > MAX_AMOUNT:
        raise ValidationError("Amount is too large")

    # Ensure at most 2 decimal places
    if decimal_amount.as_tuple().exponent < -2:
        raise ValidationError("Amount can have at most 2 decimal places")

    return decimal_amount


def validate_date(value: Any) -> date:
    """
    Validate a transaction date (ISO 8601: YYYY-MM-DD).

    Args:
        value: Date string or date to validate

    Returns:
        Validated date

    Raises:
        ValidationError: If date is invalid
    """
    if not value:
        raise ValidationError("Date is required")

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")


def validate_category(category: Any) -> Category:
    """
    Validate expense category.

    Args:
        category: Category to validate

    Returns:
        Matching Category member

    Raises:
        ValidationError: If category is invalid
    """
    if not category:
        raise ValidationError("Category is required")

    try:
        return Category(category)
    except ValueError:
        raise ValidationError(
            f"Invalid category. Must be one of: {', '.join(VALID_CATEGORIES)}"
        )


def validate_description(description: Any) -> str:
    """
    Validate expense description.

    Args:
        description: Description to validate

    Returns:
        Stripped description

    Raises:
        ValidationError: If description is missing or blank
    """
    if description is None:
        raise ValidationError("Description is required")

    description = sanitize_string(description, max_length=MAX_DESCRIPTION_LENGTH)

    if not description:
        raise ValidationError("Description is required")

    return description


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> None:
    """
    Validate that required fields are present in data.

    Args:
        data: Data dictionary to validate
        required_fields: List of required field names

    Raises:
        ValidationError: If any required field is missing
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None]

    if missing_fields:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing_fields)}"
        )


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize string input.

    Args:
        value: String to sanitize
        max_length: Optional maximum length

    Returns:
        Sanitized string

    Raises:
        ValidationError: If string is invalid
    """
    if not isinstance(value, str):
        raise ValidationError("Value must be a string")

    # Remove leading/trailing whitespace
    value = value.strip()

    if max_length and len(value) > max_length:
        raise ValidationError(f"Value exceeds maximum length of {max_length}")

    return value

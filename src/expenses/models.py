"""Expense data models."""

import uuid
import datetime as dt
from decimal import Decimal
from typing import Optional, List, Dict, Any, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from shared.categories import Category
from shared.formatting import local_today, parse_currency
from shared.validators import (
    validate_amount,
    validate_category,
    validate_date,
    validate_description,
    validate_required_fields
)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class CamelModel(BaseModel):
    """Base model whose serialized field names are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Expense(CamelModel):
    """A single recorded expense. Instances are immutable; updates produce copies."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    amount: Decimal
    category: Category
    description: str
    date: dt.date
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_validator('created_at', 'updated_at')
    @classmethod
    def assume_utc(cls, value: dt.datetime) -> dt.datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.timezone.utc)
        return value

    @model_validator(mode='after')
    def check_timestamps(self) -> 'Expense':
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not be earlier than createdAt")
        return self


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, str):
        value = parse_currency(value)
    return validate_amount(value)


class ExpenseDraft(BaseModel):
    """
    Validated entry data for a new expense.

    This is the form boundary: amounts must be positive with at most two
    decimal places and descriptions must not be blank. Validation failures
    raise shared.exceptions.ValidationError.
    """

    amount: Decimal
    category: Category
    description: str
    date: dt.date = Field(default_factory=local_today)

    check_amount = field_validator('amount', mode='before')(_parse_amount)
    check_category = field_validator('category', mode='before')(validate_category)
    check_description = field_validator('description', mode='before')(validate_description)
    check_date = field_validator('date', mode='before')(validate_date)

    @classmethod
    def from_form(cls, data: Dict[str, Any]) -> 'ExpenseDraft':
        """
        Build a draft from raw form fields.

        Args:
            data: Mapping with amount, category, description and optional date

        Returns:
            Validated draft

        Raises:
            ValidationError: If a field is missing or invalid
        """
        validate_required_fields(data, ['amount', 'category', 'description'])
        fields = {key: data[key] for key in ('amount', 'category', 'description', 'date')
                  if data.get(key) is not None}
        return cls(**fields)

    def to_expense(self, now: Optional[dt.datetime] = None) -> Expense:
        """Assign a fresh id and creation timestamps."""
        timestamp = now or utc_now()
        return Expense(
            id=str(uuid.uuid4()),
            amount=self.amount,
            category=self.category,
            description=self.description,
            date=self.date,
            created_at=timestamp,
            updated_at=timestamp
        )


class ExpenseUpdate(BaseModel):
    """Expense update request model. Only the fields that were set are applied."""

    model_config = ConfigDict(extra='forbid')

    amount: Optional[Decimal] = Field(None, description="Expense amount")
    category: Optional[Category] = Field(None, description="Expense category")
    description: Optional[str] = Field(None, description="Expense description")
    date: Optional[dt.date] = Field(None, description="Expense date (YYYY-MM-DD)")

    check_amount = field_validator('amount', mode='before')(_parse_amount)
    check_category = field_validator('category', mode='before')(validate_category)
    check_description = field_validator('description', mode='before')(validate_description)
    check_date = field_validator('date', mode='before')(validate_date)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ExpenseFilters(BaseModel):
    """
    Criteria for narrowing the expense list. Unset criteria don't restrict.

    categories, when given, keeps only the listed categories; an empty list
    matches nothing.
    """

    category: Optional[Union[Category, Literal['all']]] = None
    categories: Optional[List[Category]] = None
    search: Optional[str] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    @field_validator('category', 'search', 'date_from', 'date_to', mode='before')
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CategoryShare(CamelModel):
    """A category's total and its share of all spending."""

    category: Category
    amount: Decimal
    percentage: float


class MonthlyTotal(CamelModel):
    """Spending for one calendar month."""

    month: str
    label: str
    amount: Decimal
    count: int


class ExpenseSummary(CamelModel):
    """Expense summary model."""

    total_expenses: Decimal
    monthly_expenses: Decimal
    category_totals: Dict[Category, Decimal]
    top_categories: List[CategoryShare]


class DateRange(CamelModel):
    """Earliest and latest expense dates, serialized as {"from", "to"}."""

    start: Optional[dt.date] = Field(None, alias='from')
    end: Optional[dt.date] = Field(None, alias='to')


class ExportSummary(CamelModel):
    """Statistics describing a set of exported expenses."""

    record_count: int
    total_amount: Decimal
    category_breakdown: Dict[Category, Decimal]
    date_range: DateRange = Field(default_factory=DateRange)

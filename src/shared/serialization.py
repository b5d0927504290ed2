"""JSON helpers for Decimal, date and enum values."""

import json
from enum import Enum
from typing import Any
from datetime import datetime, date
from decimal import Decimal


def to_jsonable(obj: Any) -> Any:
    """
    Convert a structure of models' dumped values into plain JSON types.

    Decimals become JSON numbers (integers when they have no fractional
    part), dates and datetimes become ISO 8601 strings and enums their
    values. Mapping keys are converted too.
    """
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        if obj == obj.to_integral_value():
            return int(obj)
        return float(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {to_jsonable(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    return obj


def dumps(obj: Any, **kwargs: Any) -> str:
    return json.dumps(to_jsonable(obj), **kwargs)


def loads(payload: str) -> Any:
    """Parse JSON, reading non-integer numbers as Decimal so amounts stay exact."""
    return json.loads(payload, parse_float=Decimal)

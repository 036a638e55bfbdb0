"""Request payload validation helpers.

Each helper reads one field from a JSON payload, coerces it and raises
ValidationError (400) with a client-facing message when it does not fit.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from flask import request

from utils.errors import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

_MISSING = object()

# Signed 32-bit INTEGER columns
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

# Numeric(12, 2) columns
NUMBER_LIMIT = Decimal('9999999999.99')


def get_json_payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _raw(data: dict, name: str, required: bool, default: Any):
    value = data.get(name, _MISSING)
    if value is _MISSING or value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f'{name} is required')
        return default
    return value


def text(data: dict, name: str, *, required: bool = True, max_length: Optional[int] = None,
         default: Optional[str] = None) -> Optional[str]:
    value = _raw(data, name, required, _MISSING)
    if value is _MISSING:
        return default
    if not isinstance(value, str):
        raise ValidationError(f'{name} must be a string')
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f'{name} must be at most {max_length} characters')
    return value


def number(data: dict, name: str, *, required: bool = True, minimum: Optional[float] = None,
           positive: bool = False, default: Any = None) -> Optional[Decimal]:
    value = _raw(data, name, required, _MISSING)
    if value is _MISSING:
        return None if default is None else Decimal(str(default))
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be a number')
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f'{name} must be a number')
    if not result.is_finite():
        raise ValidationError(f'{name} must be a number')
    if abs(result) > NUMBER_LIMIT:
        raise ValidationError(f'{name} is out of range')
    if positive and result <= 0:
        raise ValidationError(f'{name} must be a positive number')
    if minimum is not None and result < Decimal(str(minimum)):
        raise ValidationError(f'{name} must be at least {minimum}')
    return result


def integer(data: dict, name: str, *, required: bool = True, minimum: Optional[int] = None,
            positive: bool = False, nonzero: bool = False, default: Optional[int] = None) -> Optional[int]:
    value = _raw(data, name, required, _MISSING)
    if value is _MISSING:
        return default
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be an integer')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f'{name} must be an integer')
        value = int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not re.fullmatch(r'-?\d+', stripped):
            raise ValidationError(f'{name} must be an integer')
        value = int(stripped)
    if not isinstance(value, int):
        raise ValidationError(f'{name} must be an integer')
    if not INT_MIN <= value <= INT_MAX:
        raise ValidationError(f'{name} is out of range')
    if positive and value <= 0:
        raise ValidationError(f'{name} must be a positive integer')
    if nonzero and value == 0:
        raise ValidationError(f'{name} must be a non-zero integer')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{name} must be at least {minimum}')
    return value


def choice(data: dict, name: str, choices: Iterable[str], *, required: bool = True,
           default: Optional[str] = None) -> Optional[str]:
    allowed = tuple(choices)
    value = text(data, name, required=required, default=default)
    if value is None:
        return None
    value = value.lower()
    if value not in allowed:
        raise ValidationError(f'Invalid {name}; expected one of: {", ".join(allowed)}')
    return value


def email(data: dict, name: str = 'email', *, required: bool = True) -> Optional[str]:
    value = text(data, name, required=required, max_length=120)
    if value is None:
        return None
    if not _EMAIL_RE.match(value):
        raise ValidationError('Valid email address is required')
    return value


def iso_date(data: dict, name: str, *, required: bool = False,
             default: Optional[date] = None) -> Optional[date]:
    value = text(data, name, required=required)
    if value is None:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    # Full ISO datetimes (from date pickers) are accepted for their date part
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise ValidationError(f'{name} must be a date (YYYY-MM-DD)')


def month(data: dict, name: str = 'month', *, required: bool = True) -> Optional[str]:
    value = text(data, name, required=required)
    if value is None:
        return None
    if not _MONTH_RE.match(value):
        raise ValidationError(f'{name} must be in YYYY-MM format')
    return value


def record_id(value: Any, name: str = 'id') -> int:
    """Target row id from a query parameter or body field."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f'Missing record {name}')
    return integer({name: value}, name, positive=True)

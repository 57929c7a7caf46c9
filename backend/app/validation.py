"""Field validation helpers.

Each ``check_*`` appends ``{field, message}`` dicts to an error list so a
service can report every bad field at once before touching the database.
"""
from typing import Optional

import pytz
from email_validator import EmailNotValidError, validate_email

from app.errors import ValidationError

SEND_DATE_RANGE = (1, 28)
GRACE_PERIOD_RANGE = (1, 14)
MONTH_RANGE = (1, 12)
YEAR_RANGE = (2000, 9999)


def check_range(errors: list, field: str, value: Optional[int], bounds: tuple[int, int]) -> None:
    low, high = bounds
    if value is None or isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        errors.append({"field": field, "message": f"{field} must be between {low} and {high}"})


def check_text(errors: list, field: str, value: Optional[str], min_length: int = 1, max_length: Optional[int] = None) -> None:
    text = (value or "").strip()
    if not text:
        errors.append({"field": field, "message": f"{field} cannot be empty"})
    elif len(text) < min_length:
        errors.append({"field": field, "message": f"{field} must be at least {min_length} characters"})
    elif max_length is not None and len(text) > max_length:
        errors.append({"field": field, "message": f"{field} must be at most {max_length} characters"})


def check_timezone(errors: list, field: str, value: str) -> None:
    if value not in pytz.all_timezones_set:
        errors.append({"field": field, "message": f"Unknown timezone: {value}"})


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def check_email(errors: list, field: str, value: str) -> None:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        errors.append({"field": field, "message": "Invalid email address"})


def check_enum(errors: list, field: str, value: str, enum_cls) -> None:
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        errors.append({"field": field, "message": f"{field} must be one of: {', '.join(allowed)}"})


def raise_if_errors(errors: list) -> None:
    if errors:
        raise ValidationError(errors)


def validate_period(month: int, year: int) -> None:
    errors: list = []
    check_range(errors, "month", month, MONTH_RANGE)
    check_range(errors, "year", year, YEAR_RANGE)
    raise_if_errors(errors)

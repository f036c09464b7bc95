"""Checks applied to a permit payload before it is dispatched.

Every check runs; the caller gets the full list of defects in one pass.
A required field counts as missing when it is absent, ``None`` or otherwise falsy
(empty string, zero).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .schemas import ValidationResult

REQUIRED_FIELDS = [
    ("id", "Permit ID is required"),
    ("application_number", "Application number is required"),
    ("permit_type", "Permit type is required"),
    ("status", "Status is required"),
    ("filed_date", "Filed date is required"),
    ("description", "Description is required"),
]

LOCATION_FIELDS = [
    ("address", "Location address is required"),
    ("block", "Location block is required"),
    ("lot", "Location lot is required"),
    ("zipcode", "Location zipcode is required"),
]

DATE_FIELDS = ["filed_date", "issued_date", "completed_date"]

COST_FIELDS = [
    ("estimated_cost", "Estimated cost must be a positive number"),
    ("revised_cost", "Revised cost must be a positive number"),
]

# accepted after ISO 8601
CALENDAR_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def _parse(token: str) -> datetime | None:
    try:
        return datetime.fromisoformat(token)
    except ValueError:
        pass
    for fmt in CALENDAR_FORMATS:
        try:
            return datetime.strptime(token, fmt)
        except ValueError:
            pass
    return None


def parse_date(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp or a common calendar date; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    dt = _parse(value.strip())
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_valid_cost(value: Any) -> bool:
    # bool is an int subclass but never a cost
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    # zero passes: only strictly negative amounts are rejected
    return value >= 0


def validate_permit_data(data: Any) -> ValidationResult:
    if data is None:
        return ValidationResult(valid=False, errors=["Permit data is required"])
    if not isinstance(data, Mapping):
        return ValidationResult(valid=False, errors=["Permit data must be an object"])

    errors: list[str] = []

    for key, message in REQUIRED_FIELDS:
        if not data.get(key):
            errors.append(message)

    location = data.get("location")
    if not location:
        errors.append("Location is required")
    else:
        loc = location if isinstance(location, Mapping) else {}
        for key, message in LOCATION_FIELDS:
            if not loc.get(key):
                errors.append(message)

    for key in DATE_FIELDS:
        value = data.get(key)
        if value and parse_date(value) is None:
            errors.append(f"{key} must be a valid date")

    # a null cost is present and invalid; only a missing key is skipped
    for key, message in COST_FIELDS:
        if key in data and not is_valid_cost(data[key]):
            errors.append(message)

    return ValidationResult(valid=not errors, errors=errors)

"""Derived shapes built from one source permit record.

All three functions accept any dict with the source key names, valid or not,
and never read the clock. Ingestion and event output omit absent fields;
analytics output keeps every key and uses ``None`` for "no value".
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from .errors import PermitTransformError
from .schemas import PermitData
from .validation import parse_date

SECONDS_PER_DAY = 24 * 60 * 60


def _present(**fields: Any) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


def _group(**fields: Any) -> dict[str, Any] | None:
    group = _present(**fields)
    return group or None


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def to_ingestion(permit: PermitData) -> dict[str, Any]:
    return _present(
        permit_id=permit.get("id"),
        application_number=permit.get("application_number"),
        permit_type=permit.get("permit_type"),
        status=permit.get("status"),
        dates=_present(
            filed=permit.get("filed_date"),
            issued=permit.get("issued_date"),
            completed=permit.get("completed_date"),
        ),
        description=permit.get("description"),
        costs=_group(
            estimated=permit.get("estimated_cost"),
            revised=permit.get("revised_cost"),
        ),
        usage=_group(
            existing=permit.get("existing_use"),
            proposed=permit.get("proposed_use"),
        ),
        plansets=permit.get("plansets"),
        location=permit.get("location"),
        contact=permit.get("contact_info"),
    )


def to_events(permit: PermitData) -> list[dict[str, Any]]:
    """Lifecycle events in fixed order: filed, issued, completed.

    Each event carries the permit's current overall status.
    """
    events = []

    if permit.get("filed_date"):
        events.append(
            {
                "permit_id": permit.get("id"),
                "event_type": "filed",
                "event_date": permit["filed_date"],
                "status": permit.get("status"),
                "details": _present(
                    application_number=permit.get("application_number"),
                    permit_type=permit.get("permit_type"),
                ),
            }
        )

    if permit.get("issued_date"):
        events.append(
            {
                "permit_id": permit.get("id"),
                "event_type": "issued",
                "event_date": permit["issued_date"],
                "status": permit.get("status"),
                "details": {
                    "costs": _present(
                        estimated=permit.get("estimated_cost"),
                        revised=permit.get("revised_cost"),
                    ),
                },
            }
        )

    if permit.get("completed_date"):
        events.append(
            {
                "permit_id": permit.get("id"),
                "event_type": "completed",
                "event_date": permit["completed_date"],
                "status": permit.get("status"),
                "details": {},
            }
        )

    return events


def processing_days(filed: Any, issued: Any) -> int | None:
    """Whole days from filing to issue, rounded up.

    Raises PermitTransformError when both dates are given but one cannot be parsed.
    """
    if not filed or not issued:
        return None

    filed_dt = parse_date(filed)
    issued_dt = parse_date(issued)
    if filed_dt is None or issued_dt is None:
        raise PermitTransformError(f"Cannot compute processing days from {filed!r} to {issued!r}")

    return math.ceil((issued_dt - filed_dt).total_seconds() / SECONDS_PER_DAY)


def _number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def cost_variance(estimated: Any, revised: Any) -> float | None:
    if not (_number(estimated) and _number(revised)):
        return None
    return revised - estimated


def to_analytics(permit: PermitData) -> dict[str, Any]:
    location = _mapping(permit.get("location"))
    inspection = permit.get("inspector_info")

    return {
        "permit_id": permit.get("id"),
        "permit_type": permit.get("permit_type"),
        "location_data": {
            "block": location.get("block"),
            "lot": location.get("lot"),
            "zipcode": location.get("zipcode"),
        },
        "timeline_data": {
            "filed_date": permit.get("filed_date"),
            "issued_date": permit.get("issued_date"),
            "completed_date": permit.get("completed_date"),
            "processing_days": processing_days(permit.get("filed_date"), permit.get("issued_date")),
        },
        "cost_data": {
            "estimated": permit.get("estimated_cost"),
            "revised": permit.get("revised_cost"),
            "cost_variance": cost_variance(permit.get("estimated_cost"), permit.get("revised_cost")),
        },
        "inspection_data": dict(inspection) if isinstance(inspection, Mapping) else None,
    }

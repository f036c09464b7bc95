from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import FallbackStoreError
from ..models import PermitFallback
from ..schemas import PermitData


def _sub(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def flatten_permit(permit: PermitData) -> dict[str, Any]:
    """Column values for one permit; nested groups become flat columns, absent fields None."""
    location = _sub(permit.get("location"))
    contact = _sub(permit.get("contact_info"))
    inspection = _sub(permit.get("inspector_info"))

    return {
        "id": permit.get("id"),
        "application_number": permit.get("application_number"),
        "permit_type": permit.get("permit_type"),
        "status": permit.get("status"),
        "filed_date": permit.get("filed_date"),
        "issued_date": permit.get("issued_date"),
        "completed_date": permit.get("completed_date"),
        "description": permit.get("description"),
        "estimated_cost": permit.get("estimated_cost"),
        "revised_cost": permit.get("revised_cost"),
        "existing_use": permit.get("existing_use"),
        "proposed_use": permit.get("proposed_use"),
        "plansets": permit.get("plansets"),
        "address": location.get("address"),
        "block": location.get("block"),
        "lot": location.get("lot"),
        "zipcode": location.get("zipcode"),
        "applicant_name": contact.get("applicant_name"),
        "applicant_address": contact.get("applicant_address"),
        "inspector_name": inspection.get("inspector_name"),
        "inspection_date": inspection.get("inspection_date"),
        "inspection_status": inspection.get("inspection_status"),
    }


def upsert_permit(db: Session, *, record: dict) -> PermitFallback:
    existing = db.get(PermitFallback, record["id"])

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if existing:
        for k, v in record.items():
            setattr(existing, k, v)
        existing.updated_at = now
        return existing

    p = PermitFallback(**record, created_at=now, updated_at=now)
    db.add(p)
    return p


class FallbackStore:
    """Base interface for the durable store used when pipelines reject a record."""

    async def upsert(self, permit: PermitData) -> None:
        raise NotImplementedError


class SqlFallbackStore(FallbackStore):
    """Writes source permits to the ``permit_fallback`` table, keyed by permit id."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def upsert(self, permit: PermitData) -> None:
        await asyncio.to_thread(self._upsert, flatten_permit(permit))

    def _upsert(self, record: dict) -> None:
        db: Session = self.session_factory()
        try:
            try:
                upsert_permit(db, record=record)
                db.commit()
            except IntegrityError:
                # a concurrent upsert may have inserted the same id first
                db.rollback()
                if db.get(PermitFallback, record["id"]) is None:
                    raise
                upsert_permit(db, record=record)
                db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise FallbackStoreError(f"{type(e).__name__}: {e}") from e
        finally:
            db.close()

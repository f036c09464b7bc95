from sqlalchemy import String, DateTime, Integer, Float, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from .db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PermitFallback(Base):
    """Flattened copy of a source permit record, kept when a pipeline send fails."""

    __tablename__ = "permit_fallback"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # permit id; upsert key

    application_number: Mapped[str] = mapped_column(String, index=True)
    permit_type: Mapped[str] = mapped_column(String, index=True)
    status: Mapped[str] = mapped_column(String, index=True)

    # dates stay as the ISO strings the caller sent
    filed_date: Mapped[str] = mapped_column(String, index=True)
    issued_date: Mapped[str | None] = mapped_column(String, nullable=True)
    completed_date: Mapped[str | None] = mapped_column(String, nullable=True)

    description: Mapped[str] = mapped_column(Text)

    estimated_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    revised_cost: Mapped[float | None] = mapped_column(Float, nullable=True)

    existing_use: Mapped[str | None] = mapped_column(String, nullable=True)
    proposed_use: Mapped[str | None] = mapped_column(String, nullable=True)
    plansets: Mapped[int | None] = mapped_column(Integer, nullable=True)

    address: Mapped[str] = mapped_column(String)
    block: Mapped[str] = mapped_column(String)
    lot: Mapped[str] = mapped_column(String)
    zipcode: Mapped[str] = mapped_column(String, index=True)

    applicant_name: Mapped[str | None] = mapped_column(String, nullable=True)
    applicant_address: Mapped[str | None] = mapped_column(String, nullable=True)

    inspector_name: Mapped[str | None] = mapped_column(String, nullable=True)
    inspection_date: Mapped[str | None] = mapped_column(String, nullable=True)
    inspection_status: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

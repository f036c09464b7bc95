from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict

from pydantic import BaseModel

CHANNEL_NAMES = ("ingestion", "events", "analytics")


# ---- source record (as posted by callers) ----

class Location(TypedDict):
    address: str
    block: str
    lot: str
    zipcode: str


class ContactInfo(TypedDict, total=False):
    applicant_name: str
    applicant_address: str


class InspectorInfo(TypedDict, total=False):
    inspector_name: str
    inspection_date: str
    inspection_status: str


class PermitData(TypedDict, total=False):
    id: str
    application_number: str
    permit_type: str
    status: str
    filed_date: str
    issued_date: str
    completed_date: str
    description: str
    estimated_cost: float
    revised_cost: float
    existing_use: str
    proposed_use: str
    plansets: int
    location: Location
    contact_info: ContactInfo
    inspector_info: InspectorInfo


# ---- pipeline envelope ----

class PipelineMetadata(BaseModel):
    timestamp: str
    source: str
    version: str
    pipeline_target: str


class PipelinePayload(BaseModel):
    data: Any
    metadata: PipelineMetadata


# ---- results ----

@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncResult:
    success: bool
    errors: list[str] = field(default_factory=list)
    fallback_used: bool = False

    @property
    def degraded(self) -> bool:
        # at least one pipeline failed but the record reached the fallback table
        return self.success and self.fallback_used


# ---- HTTP bodies ----

class SyncAccepted(BaseModel):
    success: bool = True
    message: str
    permit_id: Any = None


class SyncRejected(BaseModel):
    success: bool = False
    errors: list[str]


class ErrorOut(BaseModel):
    success: bool = False
    error: str


class HealthOut(BaseModel):
    ok: bool
    app: str
    environment: str

"""Shared fixtures for the permit sync tests."""

import copy
import io
import logging

import pytest

from permit_sync.adapters.pipeline_channels import PipelineChannel
from permit_sync.errors import ChannelSendError, FallbackStoreError
from permit_sync.log import LogConfig
from permit_sync.services.fallback import FallbackStore

FULL_PERMIT = {
    "id": "PERM-123456",
    "application_number": "APP-2023-001",
    "permit_type": "Building",
    "status": "Issued",
    "filed_date": "2023-01-15T00:00:00Z",
    "issued_date": "2023-02-01T00:00:00Z",
    "completed_date": "2023-03-15T00:00:00Z",
    "description": "Residential renovation project",
    "estimated_cost": 50000,
    "revised_cost": 55000,
    "existing_use": "Single Family Dwelling",
    "proposed_use": "Single Family Dwelling with Addition",
    "plansets": 3,
    "location": {
        "address": "123 Main St, San Francisco, CA",
        "block": "1234",
        "lot": "056",
        "zipcode": "94102",
    },
    "contact_info": {
        "applicant_name": "John Doe",
        "applicant_address": "123 Main St, San Francisco, CA 94102",
    },
    "inspector_info": {
        "inspector_name": "Jane Smith",
        "inspection_date": "2023-02-15T00:00:00Z",
        "inspection_status": "Approved",
    },
}

MINIMAL_PERMIT = {
    "id": "PERM-123456",
    "application_number": "APP-2023-001",
    "permit_type": "Building",
    "status": "Filed",
    "filed_date": "2023-01-15T00:00:00Z",
    "description": "Basic permit",
    "location": {
        "address": "123 Main St",
        "block": "1234",
        "lot": "056",
        "zipcode": "94102",
    },
}


@pytest.fixture
def full_permit():
    return copy.deepcopy(FULL_PERMIT)


@pytest.fixture
def minimal_permit():
    return copy.deepcopy(MINIMAL_PERMIT)


class RecordingChannel(PipelineChannel):
    """In-memory channel; fails every send when ``fail`` is set."""

    def __init__(self, name, fail=False):
        self.name = name
        self.fail = fail
        self.sent = []

    async def send(self, payload):
        self.sent.append(payload)
        if self.fail:
            raise ChannelSendError(self.name, f"{self.name} pipeline unavailable")


class RecordingStore(FallbackStore):
    def __init__(self, fail=False):
        self.fail = fail
        self.upserts = []

    async def upsert(self, permit):
        self.upserts.append(permit)
        if self.fail:
            raise FallbackStoreError("database is locked")


@pytest.fixture
def make_channels():
    def _make(*failing):
        return {
            name: RecordingChannel(name, fail=name in failing)
            for name in ("ingestion", "events", "analytics")
        }

    return _make


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def test_logger(log_stream):
    logger = LogConfig("debug").build_logger("permit_sync.test", stream=log_stream)
    yield logger
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)

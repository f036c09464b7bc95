"""
Tests for the derived ingestion, event and analytics shapes.
"""

import json

import pytest

from permit_sync.errors import PermitTransformError
from permit_sync.transform import cost_variance, processing_days, to_analytics, to_events, to_ingestion


class TestToIngestion:
    def test_full_record(self, full_permit):
        assert to_ingestion(full_permit) == {
            "permit_id": "PERM-123456",
            "application_number": "APP-2023-001",
            "permit_type": "Building",
            "status": "Issued",
            "dates": {
                "filed": "2023-01-15T00:00:00Z",
                "issued": "2023-02-01T00:00:00Z",
                "completed": "2023-03-15T00:00:00Z",
            },
            "description": "Residential renovation project",
            "costs": {"estimated": 50000, "revised": 55000},
            "usage": {
                "existing": "Single Family Dwelling",
                "proposed": "Single Family Dwelling with Addition",
            },
            "plansets": 3,
            "location": {
                "address": "123 Main St, San Francisco, CA",
                "block": "1234",
                "lot": "056",
                "zipcode": "94102",
            },
            "contact": {
                "applicant_name": "John Doe",
                "applicant_address": "123 Main St, San Francisco, CA 94102",
            },
        }

    def test_minimal_record_omits_optional_groups(self, minimal_permit):
        result = to_ingestion(minimal_permit)

        assert result["permit_id"] == "PERM-123456"
        assert result["dates"] == {"filed": "2023-01-15T00:00:00Z"}
        assert "issued" not in result["dates"]
        assert "completed" not in result["dates"]
        for key in ("costs", "usage", "contact", "plansets"):
            assert key not in result

    def test_partial_group_keeps_only_present_fields(self, minimal_permit):
        minimal_permit["revised_cost"] = 1200

        result = to_ingestion(minimal_permit)

        assert result["costs"] == {"revised": 1200}

    def test_zero_cost_is_present(self, minimal_permit):
        minimal_permit["estimated_cost"] = 0

        assert to_ingestion(minimal_permit)["costs"] == {"estimated": 0}


class TestToEvents:
    def test_all_dates_give_three_events_in_order(self, full_permit):
        events = to_events(full_permit)

        assert events == [
            {
                "permit_id": "PERM-123456",
                "event_type": "filed",
                "event_date": "2023-01-15T00:00:00Z",
                "status": "Issued",
                "details": {"application_number": "APP-2023-001", "permit_type": "Building"},
            },
            {
                "permit_id": "PERM-123456",
                "event_type": "issued",
                "event_date": "2023-02-01T00:00:00Z",
                "status": "Issued",
                "details": {"costs": {"estimated": 50000, "revised": 55000}},
            },
            {
                "permit_id": "PERM-123456",
                "event_type": "completed",
                "event_date": "2023-03-15T00:00:00Z",
                "status": "Issued",
                "details": {},
            },
        ]

    def test_only_filed_date(self, minimal_permit):
        events = to_events(minimal_permit)

        assert [e["event_type"] for e in events] == ["filed"]

    def test_order_fixed_for_any_subset(self, full_permit):
        del full_permit["issued_date"]

        assert [e["event_type"] for e in to_events(full_permit)] == ["filed", "completed"]

    def test_events_carry_overall_status(self, full_permit):
        full_permit["status"] = "Complete"

        assert {e["status"] for e in to_events(full_permit)} == {"Complete"}

    def test_no_dates_no_events(self):
        assert to_events({"id": "PERM-1"}) == []


class TestToAnalytics:
    def test_full_record(self, full_permit):
        assert to_analytics(full_permit) == {
            "permit_id": "PERM-123456",
            "permit_type": "Building",
            "location_data": {"block": "1234", "lot": "056", "zipcode": "94102"},
            "timeline_data": {
                "filed_date": "2023-01-15T00:00:00Z",
                "issued_date": "2023-02-01T00:00:00Z",
                "completed_date": "2023-03-15T00:00:00Z",
                "processing_days": 17,
            },
            "cost_data": {"estimated": 50000, "revised": 55000, "cost_variance": 5000},
            "inspection_data": {
                "inspector_name": "Jane Smith",
                "inspection_date": "2023-02-15T00:00:00Z",
                "inspection_status": "Approved",
            },
        }

    def test_missing_costs_timeline_and_inspection(self, full_permit):
        for key in ("estimated_cost", "revised_cost", "issued_date", "inspector_info"):
            del full_permit[key]

        result = to_analytics(full_permit)

        assert "processing_days" in result["timeline_data"]
        assert result["timeline_data"]["processing_days"] is None
        assert result["cost_data"]["cost_variance"] is None
        assert result["inspection_data"] is None

    def test_address_dropped_from_location(self, full_permit):
        assert "address" not in to_analytics(full_permit)["location_data"]

    def test_emitted_for_sparse_record(self):
        result = to_analytics({"id": "PERM-1"})

        assert result["permit_id"] == "PERM-1"
        assert result["location_data"] == {"block": None, "lot": None, "zipcode": None}
        assert result["timeline_data"]["processing_days"] is None

    def test_unparseable_date_is_surfaced(self, full_permit):
        full_permit["issued_date"] = "not-a-date"

        with pytest.raises(PermitTransformError):
            to_analytics(full_permit)


class TestComputedFields:
    @pytest.mark.parametrize(
        "filed,issued,expected",
        [
            ("2023-01-01T00:00:00Z", "2023-01-31T00:00:00Z", 30),
            ("2023-01-15T00:00:00Z", "2023-02-01T00:00:00Z", 17),
            # partial days round up
            ("2023-01-01T00:00:00Z", "2023-01-02T06:00:00Z", 2),
            ("2023-01-01", "2023-01-01", 0),
            ("01/15/2023", "February 1, 2023", 17),
        ],
    )
    def test_processing_days(self, filed, issued, expected):
        assert processing_days(filed, issued) == expected

    def test_processing_days_needs_both_dates(self):
        assert processing_days("2023-01-01", None) is None
        assert processing_days(None, "2023-01-01") is None

    def test_cost_variance(self):
        assert cost_variance(50000, 55000) == 5000
        assert cost_variance(55000, 50000) == -5000

    def test_cost_variance_absent_not_zero(self):
        assert cost_variance(None, 55000) is None
        assert cost_variance(50000, None) is None

    def test_cost_variance_with_zero_estimate(self):
        assert cost_variance(0, 1000) == 1000


def test_transforms_are_deterministic(full_permit):
    for transform in (to_ingestion, to_events, to_analytics):
        first = json.dumps(transform(full_permit), sort_keys=True)
        second = json.dumps(transform(full_permit), sort_keys=True)
        assert first == second


def test_transforms_do_not_mutate_input(full_permit):
    snapshot = json.dumps(full_permit, sort_keys=True)

    to_ingestion(full_permit)
    to_events(full_permit)
    to_analytics(full_permit)

    assert json.dumps(full_permit, sort_keys=True) == snapshot

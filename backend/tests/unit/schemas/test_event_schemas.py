"""
Unit tests for event, distance and validation request schemas.
"""

import pytest
from datetime import time
from decimal import Decimal

from pydantic import ValidationError

from backend.src.schemas.city_distance import CityDistanceCreate
from backend.src.schemas.conflict import ConflictReason, ConflictVerdict, ValidateAssignmentRequest
from backend.src.schemas.event import EventCreate, EventUpdate


BASE = {
    "title": "Derby",
    "event_date": "2024-01-10",
    "event_type": "Match",
    "city": "Riyadh",
}


class TestEventCreate:

    def test_legacy_single_values_folded(self):
        event = EventCreate(**BASE, observer="OB01", sng="SNG-1", generator=None)

        assert event.observers == ["OB01"]
        assert event.sngs == ["SNG-1"]
        assert event.generators == []

    def test_explicit_list_wins(self):
        event = EventCreate(**BASE, sng="SNG-9", sngs=["SNG-1", "SNG-2"])

        assert event.sngs == ["SNG-1", "SNG-2"]

    def test_codes_trimmed_and_deduplicated(self):
        event = EventCreate(**BASE, sngs=[" SNG-1 ", "SNG-1", "", "SNG-2"])

        assert event.sngs == ["SNG-1", "SNG-2"]

    def test_blank_venue_is_none(self):
        assert EventCreate(**BASE, venue="  ").venue is None

    def test_time_optional(self):
        assert EventCreate(**BASE).event_time is None
        assert EventCreate(**BASE, event_time="13:00").event_time == time(13, 0)

    def test_whitespace_city_rejected(self):
        with pytest.raises(ValidationError):
            EventCreate(**{**BASE, "city": "   "})

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            EventCreate(**BASE, status="archived")


class TestEventUpdate:

    def test_only_sent_fields_are_set(self):
        update = EventUpdate(title="New")

        assert update.model_fields_set == {"title"}

    def test_legacy_id_folded(self):
        update = EventUpdate(sng_id=3, observer_id=None)

        assert update.sng_ids == [3]
        assert update.observer_ids == []
        assert "observer_ids" in update.model_fields_set

    def test_non_positive_ids_rejected(self):
        with pytest.raises(ValidationError):
            EventUpdate(sng_ids=[0])


class TestCityDistanceCreate:

    def test_self_pair_rejected(self):
        with pytest.raises(ValidationError):
            CityDistanceCreate(from_city_id=1, to_city_id=1, travel_time_hours=1)

    def test_hours_bounds(self):
        with pytest.raises(ValidationError):
            CityDistanceCreate(from_city_id=1, to_city_id=2, travel_time_hours=-1)
        with pytest.raises(ValidationError):
            CityDistanceCreate(from_city_id=1, to_city_id=2, travel_time_hours=1000)

        edge = CityDistanceCreate(from_city_id=1, to_city_id=2, travel_time_hours="999.99")
        assert edge.travel_time_hours == Decimal("999.99")


class TestConflictSchemas:

    def test_generator_cannot_be_validated(self):
        with pytest.raises(ValidationError):
            ValidateAssignmentRequest(
                resource_kind="generator", resource_id=1, event_date="2024-01-10"
            )

    def test_reject_sets_error_type(self):
        verdict = ConflictVerdict.reject(ConflictReason.EXACT_TIME_CONFLICT, "Busy")

        assert verdict.valid is False
        assert verdict.details == {"error_type": "exact_time_conflict"}

    def test_accept(self):
        verdict = ConflictVerdict.accept(existing_events_count=0)

        assert verdict.valid is True
        assert verdict.reason_code == ConflictReason.NONE

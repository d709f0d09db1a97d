"""
Unit tests for ResolutionService (find-or-create by natural key).
"""

import pytest

from backend.src.models import City, EventType, Sng, Venue
from backend.src.services.exceptions import ValidationError
from backend.src.services.resolution_service import ResolutionService


class TestResolutionService:

    def test_city_resolved_once(self, test_db_session):
        service = ResolutionService(test_db_session)

        first = service.find_or_create_city("Riyadh")
        second = service.find_or_create_city("  Riyadh ")
        test_db_session.commit()

        assert first.id == second.id
        assert test_db_session.query(City).count() == 1
        assert first.is_active is True

    def test_existing_city_reused(self, test_db_session, sample_city):
        riyadh = sample_city('Riyadh')

        assert ResolutionService(test_db_session).find_or_create_city("Riyadh").id == riyadh.id

    def test_venue_scoped_to_city(self, test_db_session, sample_city):
        riyadh = sample_city('Riyadh')
        jeddah = sample_city('Jeddah')
        service = ResolutionService(test_db_session)

        a = service.find_or_create_venue("Main Stadium", riyadh.id)
        b = service.find_or_create_venue("Main Stadium", jeddah.id)
        c = service.find_or_create_venue("Main Stadium", riyadh.id)
        test_db_session.commit()

        assert a.id == c.id
        assert a.id != b.id
        assert test_db_session.query(Venue).count() == 2

    def test_venue_requires_city(self, test_db_session):
        with pytest.raises(ValidationError):
            ResolutionService(test_db_session).find_or_create_venue("Main Stadium", None)

    def test_event_type_code_and_color_derived(self, test_db_session):
        event_type = ResolutionService(test_db_session).find_or_create_event_type("Match")

        assert event_type.code == "MAT"
        assert event_type.color.startswith("#")
        assert len(event_type.color) == 7
        assert event_type.color == EventType.derive_color("Match")

    def test_resource_by_code(self, test_db_session):
        service = ResolutionService(test_db_session)

        sng = service.find_or_create_resource("sng", "SNG-1")
        again = service.find_or_create_resource("sng", "SNG-1")
        test_db_session.commit()

        assert sng.id == again.id
        assert test_db_session.query(Sng).count() == 1

    def test_unknown_resource_kind(self, test_db_session):
        with pytest.raises(ValueError):
            ResolutionService(test_db_session).find_or_create_resource("camera", "C1")

    def test_empty_name_rejected(self, test_db_session):
        with pytest.raises(ValidationError):
            ResolutionService(test_db_session).find_or_create_city("   ")

    def test_nothing_committed(self, test_db_session):
        ResolutionService(test_db_session).find_or_create_city("Riyadh")
        test_db_session.rollback()

        assert test_db_session.query(City).count() == 0

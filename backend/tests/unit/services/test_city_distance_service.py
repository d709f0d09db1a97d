"""
Unit tests for CityDistanceService.

Tests edge uniqueness in either direction, batch upserts, the distance
matrix and filling missing pairs.
"""

import pytest
from decimal import Decimal

from backend.src.models import CityDistance
from backend.src.services.city_distance_service import CityDistanceService
from backend.src.services.city_service import CityService
from backend.src.services.exceptions import ConflictError, NotFoundError, ValidationError


class TestCityDistanceService:

    def test_create_stored_canonically(self, test_db_session, sample_city):
        riyadh = sample_city('Riyadh')
        jeddah = sample_city('Jeddah')

        edge = CityDistanceService(test_db_session).create(
            from_city_id=jeddah.id, to_city_id=riyadh.id, travel_time_hours=Decimal("5")
        )

        assert edge.from_city_id == min(riyadh.id, jeddah.id)
        assert edge.to_city_id == max(riyadh.id, jeddah.id)
        assert edge.connects(riyadh.id, jeddah.id)
        assert edge.connects(jeddah.id, riyadh.id)
        assert not edge.connects(riyadh.id, riyadh.id)

    def test_reverse_duplicate_rejected(self, test_db_session, riyadh_jeddah):
        riyadh, jeddah = riyadh_jeddah
        service = CityDistanceService(test_db_session)

        with pytest.raises(ConflictError):
            service.create(from_city_id=jeddah.id, to_city_id=riyadh.id, travel_time_hours=Decimal("6"))
        with pytest.raises(ConflictError):
            service.create(from_city_id=riyadh.id, to_city_id=jeddah.id, travel_time_hours=Decimal("6"))

    def test_self_pair_rejected(self, test_db_session, sample_city):
        riyadh = sample_city('Riyadh')

        with pytest.raises(ValidationError):
            CityDistanceService(test_db_session).create(
                from_city_id=riyadh.id, to_city_id=riyadh.id, travel_time_hours=Decimal("1")
            )

    def test_unknown_city(self, test_db_session, sample_city):
        riyadh = sample_city('Riyadh')

        with pytest.raises(NotFoundError):
            CityDistanceService(test_db_session).create(
                from_city_id=riyadh.id, to_city_id=999, travel_time_hours=Decimal("1")
            )

    def test_delete_then_recreate(self, test_db_session, riyadh_jeddah):
        riyadh, jeddah = riyadh_jeddah
        service = CityDistanceService(test_db_session)
        edge = service.find(jeddah.id, riyadh.id)

        service.delete(edge.id)
        recreated = service.create(
            from_city_id=jeddah.id, to_city_id=riyadh.id, travel_time_hours=Decimal("4.5")
        )

        assert recreated.travel_time_hours == Decimal("4.50")

    def test_update_hours_and_notes(self, test_db_session, riyadh_jeddah):
        riyadh, jeddah = riyadh_jeddah
        service = CityDistanceService(test_db_session)
        edge = service.find(riyadh.id, jeddah.id)

        updated = service.update(edge.id, travel_time_hours=Decimal("6.25"), notes="Via Taif")

        assert updated.travel_time_hours == Decimal("6.25")
        assert updated.notes == "Via Taif"

    def test_update_negative_hours(self, test_db_session, riyadh_jeddah):
        riyadh, jeddah = riyadh_jeddah
        service = CityDistanceService(test_db_session)
        edge = service.find(riyadh.id, jeddah.id)

        with pytest.raises(ValidationError):
            service.update(edge.id, travel_time_hours=Decimal("-1"))

    def test_list_matches_either_end(self, test_db_session, riyadh_jeddah, sample_city, sample_distance):
        riyadh, jeddah = riyadh_jeddah
        dammam = sample_city('Dammam')
        sample_distance(dammam, riyadh, 4)
        service = CityDistanceService(test_db_session)

        assert len(service.list(from_city_id=riyadh.id)) == 2
        assert len(service.list(to_city_id=jeddah.id)) == 1
        assert len(service.list(from_city_id=dammam.id, to_city_id=jeddah.id)) == 0

    def test_batch_upsert_counts(self, test_db_session, riyadh_jeddah, sample_city):
        riyadh, jeddah = riyadh_jeddah
        dammam = sample_city('Dammam')

        counts = CityDistanceService(test_db_session).batch_upsert([
            (jeddah.id, riyadh.id, Decimal("5.5")),
            (dammam.id, riyadh.id, Decimal("4")),
            (riyadh.id, dammam.id, Decimal("4.25")),
        ])

        assert counts == {"created": 1, "updated": 2}
        assert test_db_session.query(CityDistance).count() == 2
        edge = CityDistanceService(test_db_session).find(riyadh.id, dammam.id)
        assert edge.travel_time_hours == Decimal("4.25")

    def test_batch_rejected_as_a_whole(self, test_db_session, riyadh_jeddah, sample_city):
        riyadh, _ = riyadh_jeddah
        dammam = sample_city('Dammam')

        with pytest.raises(ValidationError) as exc_info:
            CityDistanceService(test_db_session).batch_upsert([
                (dammam.id, riyadh.id, Decimal("4")),
                (dammam.id, dammam.id, Decimal("1")),
            ])

        assert exc_info.value.field == "distances.1.to_city_id"
        assert test_db_session.query(CityDistance).count() == 1

    def test_batch_unknown_city(self, test_db_session, riyadh_jeddah):
        riyadh, _ = riyadh_jeddah

        with pytest.raises(NotFoundError):
            CityDistanceService(test_db_session).batch_upsert([(riyadh.id, 999, Decimal("1"))])

    def test_matrix(self, test_db_session, riyadh_jeddah, sample_city):
        sample_city('Abha', is_active=False)
        sample_city('Dammam')

        cities, matrix = CityDistanceService(test_db_session).matrix()

        assert [c.name for c in cities] == ['Dammam', 'Jeddah', 'Riyadh']
        assert matrix == [
            [0.0, None, None],
            [None, 0.0, 5.0],
            [None, 5.0, 0.0],
        ]

    def test_fill_missing(self, test_db_session, riyadh_jeddah, sample_city):
        riyadh, jeddah = riyadh_jeddah
        dammam = sample_city('Dammam')

        created = CityDistanceService(test_db_session).fill_missing(
            [(dammam.id, riyadh.id), (riyadh.id, jeddah.id), (jeddah.id, dammam.id)],
            travel_time_hours=Decimal("5"),
            notes="generated",
        )

        assert len(created) == 2
        assert test_db_session.query(CityDistance).count() == 3
        assert CityService(test_db_session).missing_distances() == []

"""
Unit tests for ResourceTimeline.
"""

import pytest
from datetime import date, time

from backend.src.services.resource_timeline import ResourceTimeline


DAY = date(2024, 1, 10)


class TestResourceTimeline:

    def test_entries_ordered_by_time(self, test_db_session, sample_city, sample_resource, sample_event):
        riyadh = sample_city('Riyadh')
        sng = sample_resource('sng', 'SNG-1')
        sample_event('Evening', riyadh, DAY, time(20, 0), sngs=[sng])
        sample_event('Morning', riyadh, DAY, time(9, 0), sngs=[sng])

        entries = ResourceTimeline(test_db_session).for_day('sng', sng.id, DAY)

        assert [e.title for e in entries] == ['Morning', 'Evening']
        assert entries[0].city_name == 'Riyadh'
        assert entries[0].city_id == riyadh.id

    def test_other_days_and_resources_ignored(self, test_db_session, sample_city, sample_resource, sample_event):
        riyadh = sample_city('Riyadh')
        sng = sample_resource('sng', 'SNG-1')
        other = sample_resource('sng', 'SNG-2')
        sample_event('Tomorrow', riyadh, date(2024, 1, 11), sngs=[sng])
        sample_event('Other Truck', riyadh, DAY, sngs=[other])

        assert ResourceTimeline(test_db_session).for_day('sng', sng.id, DAY) == []

    def test_kinds_are_separate(self, test_db_session, sample_city, sample_resource, sample_event):
        riyadh = sample_city('Riyadh')
        observer = sample_resource('observer', 'OB01')
        sng = sample_resource('sng', 'SNG-1')
        # Same primary key in different tables
        assert observer.id == sng.id
        sample_event('Match', riyadh, DAY, observers=[observer])

        timeline = ResourceTimeline(test_db_session)
        assert len(timeline.for_day('observer', observer.id, DAY)) == 1
        assert timeline.for_day('sng', sng.id, DAY) == []

    def test_exclude_event(self, test_db_session, sample_city, sample_resource, sample_event):
        riyadh = sample_city('Riyadh')
        sng = sample_resource('sng', 'SNG-1')
        editing = sample_event('Editing', riyadh, DAY, time(9, 0), sngs=[sng])
        sample_event('Other', riyadh, DAY, time(12, 0), sngs=[sng])

        entries = ResourceTimeline(test_db_session).for_day(
            'sng', sng.id, DAY, exclude_event_id=editing.id
        )

        assert [e.title for e in entries] == ['Other']

    def test_cancelled_events_still_occupy(self, test_db_session, sample_city, sample_resource, sample_event):
        riyadh = sample_city('Riyadh')
        sng = sample_resource('sng', 'SNG-1')
        sample_event('Cancelled', riyadh, DAY, sngs=[sng], status='cancelled')

        assert len(ResourceTimeline(test_db_session).for_day('sng', sng.id, DAY)) == 1

    def test_event_without_city(self, test_db_session, sample_resource, sample_event):
        sng = sample_resource('sng', 'SNG-1')
        sample_event('Studio', None, DAY, sngs=[sng])

        entries = ResourceTimeline(test_db_session).for_day('sng', sng.id, DAY)

        assert entries[0].city_id is None
        assert entries[0].city_name is None

    def test_unknown_kind(self, test_db_session):
        with pytest.raises(ValueError):
            ResourceTimeline(test_db_session).for_day('camera', 1, DAY)

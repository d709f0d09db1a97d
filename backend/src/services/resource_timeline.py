"""
Per-resource daily timelines.

A timeline is the ordered list of events a single observer or SNG is
assigned to on one calendar day. It is the input of the conflict validator:
the daily-limit rule looks at its length, the exact-time and travel rules at
each entry.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy.orm import Session

from backend.src.models import City, Event, RESOURCE_ASSOCIATIONS


@dataclass(frozen=True)
class TimelineEntry:
    """One assignment on a resource timeline."""

    event_id: int
    title: str
    city_id: Optional[int]
    city_name: Optional[str]
    event_date: date
    event_time: Optional[time]

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.event_date, self.event_time or time(0, 0))


class ResourceTimeline:
    """
    Reads resource timelines from the database.

    Cancelled and postponed events still occupy the resource: status does
    not release an assignment.

    Usage:
        >>> timeline = ResourceTimeline(db)
        >>> entries = timeline.for_day("sng", sng.id, date(2024, 1, 10))
    """

    def __init__(self, db: Session):
        self.db = db

    def for_day(
        self,
        kind: str,
        resource_id: int,
        on_date: date,
        exclude_event_id: Optional[int] = None,
    ) -> List[TimelineEntry]:
        """
        Events the resource is assigned to on a date, ordered by time.

        Args:
            kind: Resource kind (observer, sng, generator)
            resource_id: Resource primary key
            on_date: Calendar date
            exclude_event_id: Event to leave out (the event being updated)

        Raises:
            ValueError: If kind is unknown
        """
        kind = getattr(kind, "value", kind)
        if kind not in RESOURCE_ASSOCIATIONS:
            raise ValueError(f"Unknown resource kind: {kind}")
        table, column = RESOURCE_ASSOCIATIONS[kind]

        query = (
            self.db.query(
                Event.id,
                Event.title,
                Event.city_id,
                City.name,
                Event.event_date,
                Event.event_time,
            )
            .join(table, table.c.event_id == Event.id)
            .outerjoin(City, City.id == Event.city_id)
            .filter(
                table.c[column] == resource_id,
                Event.event_date == on_date,
            )
        )
        if exclude_event_id is not None:
            query = query.filter(Event.id != exclude_event_id)

        rows = query.order_by(Event.event_time, Event.id).all()
        return [
            TimelineEntry(
                event_id=row[0],
                title=row[1],
                city_id=row[2],
                city_name=row[3],
                event_date=row[4],
                event_time=row[5],
            )
            for row in rows
        ]

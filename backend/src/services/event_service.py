"""
Event service: the only writer of events and their resource assignments.

Provides business logic for listing, retrieving, creating, updating, and
deleting scheduled events, with conflict validation of every observer and
SNG assignment.

Design:
- Create resolves the event type, city, venue and resources by name/code
  (creating what is missing), then validates every observer and SNG
- Update only re-validates when the city, date, time or the observer/SNG
  sets change, ignoring the event's own current state
- The first rejecting verdict aborts the mutation and the transaction is
  rolled back, including entities auto-created during resolution
- Timeline read, validation and write happen while holding the
  (kind, resource, date) locks plus row locks on the resources
- Notification happens after commit and never fails the mutation
"""

from contextlib import contextmanager, nullcontext
from datetime import date, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import (
    City, Event, EventStatus, EventType, Venue, Observer, Sng, Generator, RESOURCE_MODELS
)
from backend.src.schemas.conflict import ConflictVerdict, ResourceKind
from backend.src.schemas.event import EventCreate, EventResponse, EventUpdate
from backend.src.services.conflict_validator import ConflictValidator
from backend.src.services.distance_graph import CityDistanceGraph
from backend.src.services.exceptions import (
    NotFoundError,
    ResourceConflictError,
    ServiceError,
    ValidationError,
)
from backend.src.services.notification_service import EventChangeNotifier, get_event_notifier
from backend.src.services.resolution_service import ResolutionService
from backend.src.services.resource_lock import ResourceLockArena, get_resource_lock_arena
from backend.src.services.resource_timeline import ResourceTimeline
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")

# Assignment kinds in the order they are validated
VALIDATED_KINDS = (ResourceKind.OBSERVER, ResourceKind.SNG)

# Update request list field -> resource kind
_ID_FIELDS = {
    "observer_ids": ResourceKind.OBSERVER,
    "sng_ids": ResourceKind.SNG,
    "generator_ids": ResourceKind.GENERATOR,
}

# Fields whose change re-triggers conflict validation on update
_SCHEDULE_FIELDS = ("event_date", "event_time", "observer_ids", "sng_ids")

Assignments = Dict[ResourceKind, List[Any]]


class EventService:
    """
    Service for scheduling events.

    Usage:
        >>> service = EventService(db_session)
        >>> event = service.create(EventCreate(
        ...     title="Derby", event_date="2024-01-10", event_time="13:00",
        ...     event_type="Match", city="Jeddah", sngs=["SNG-1"],
        ... ))
    """

    def __init__(
        self,
        db: Session,
        notifier: Optional[EventChangeNotifier] = None,
        lock_arena: Optional[ResourceLockArena] = None,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
            notifier: Change notifier (process singleton by default)
            lock_arena: Scheduling lock arena (process singleton by default)
            settings: Application settings (cached settings by default)
        """
        self.db = db
        self.notifier = notifier if notifier is not None else get_event_notifier()
        # An idle arena is empty, so it must not be tested for truthiness
        self.lock_arena = lock_arena if lock_arena is not None else get_resource_lock_arena()
        self.settings = settings if settings is not None else get_settings()
        self.resolution = ResolutionService(db)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, event_id: int) -> Event:
        """
        Get an event by id.

        Raises:
            NotFoundError: If the event does not exist
        """
        event = (
            self._query()
            .filter(Event.id == event_id)
            .first()
        )
        if not event:
            raise NotFoundError("Event", event_id)
        return event

    def list(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        city_id: Optional[int] = None,
        event_type_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[Event], int]:
        """
        List events with optional filtering, newest first.

        Args:
            start_date: Start of date range (inclusive)
            end_date: End of date range (inclusive)
            status: Filter by status
            city_id: Filter by city
            event_type_id: Filter by event type
            search: Substring match on title, city, venue or resource code
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            Tuple of (list of Event instances, total count)
        """
        query = self.db.query(Event)

        if start_date:
            query = query.filter(Event.event_date >= start_date)
        if end_date:
            query = query.filter(Event.event_date <= end_date)
        if status:
            query = query.filter(Event.status == status)
        if city_id:
            query = query.filter(Event.city_id == city_id)
        if event_type_id:
            query = query.filter(Event.event_type_id == event_type_id)

        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    Event.title.ilike(term),
                    Event.city.has(City.name.ilike(term)),
                    Event.venue.has(Venue.name.ilike(term)),
                    Event.observers.any(Observer.code.ilike(term)),
                    Event.sngs.any(Sng.code.ilike(term)),
                    Event.generators.any(Generator.code.ilike(term)),
                )
            )

        total = query.count()

        event_ids = [
            row[0]
            for row in query.with_entities(Event.id)
            .order_by(Event.event_date.desc(), Event.event_time.desc(), Event.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        ]
        if not event_ids:
            return [], total

        by_id = {
            event.id: event
            for event in self._query().filter(Event.id.in_(event_ids)).all()
        }
        return [by_id[event_id] for event_id in event_ids], total

    def calendar(self, year: int, month: int) -> Dict[str, List[Event]]:
        """
        Events of one month grouped by ISO date, each day ordered by time.

        Raises:
            ValidationError: If month is not 1-12
        """
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12", field="month")

        first_day = date(year, month, 1)
        if month == 12:
            next_month = date(year + 1, 1, 1)
        else:
            next_month = date(year, month + 1, 1)
        last_day = next_month - timedelta(days=1)

        events = (
            self._query()
            .filter(Event.event_date >= first_day, Event.event_date <= last_day)
            .order_by(Event.event_date.asc(), Event.event_time.asc(), Event.id.asc())
            .all()
        )

        days: Dict[str, List[Event]] = {}
        for event in events:
            days.setdefault(event.event_date.isoformat(), []).append(event)
        return days

    def validate_assignment(
        self,
        kind: ResourceKind,
        resource_id: int,
        city_id: Optional[int],
        event_date: date,
        event_time: Optional[time] = None,
        exclude_event_id: Optional[int] = None,
    ) -> ConflictVerdict:
        """
        Dry-run the conflict validator for one proposed assignment.

        Nothing is written; the verdict is returned whether valid or not.

        Raises:
            NotFoundError: If the resource or city does not exist
        """
        kind = ResourceKind(kind)
        resource = self._load_resources(kind, [resource_id])[0]
        city = self._get_city(city_id) if city_id is not None else None

        entries = ResourceTimeline(self.db).for_day(
            kind.value, resource.id, event_date, exclude_event_id
        )
        validator = ConflictValidator(CityDistanceGraph.load(self.db))
        return validator.validate(
            kind,
            city.id if city else None,
            city.name if city else None,
            event_date,
            event_time or self.settings.default_event_time,
            entries,
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, request: EventCreate) -> Event:
        """
        Create an event and its resource assignments.

        Raises:
            ValidationError: If referenced names are invalid
            ResourceConflictError: If any observer or SNG assignment is rejected
            ResourceLockTimeoutError: If the scheduling locks are busy
        """
        event_time = request.event_time or self.settings.default_event_time

        try:
            event_type = self.resolution.find_or_create_event_type(request.event_type)
            city = self.resolution.find_or_create_city(request.city)
            venue = None
            if request.venue:
                venue = self.resolution.find_or_create_venue(request.venue, city.id)

            assignments: Assignments = {
                ResourceKind.OBSERVER: self._resolve_codes(ResourceKind.OBSERVER, request.observers),
                ResourceKind.SNG: self._resolve_codes(ResourceKind.SNG, request.sngs),
                ResourceKind.GENERATOR: self._resolve_codes(ResourceKind.GENERATOR, request.generators),
            }

            with self._scheduling_lock(assignments, request.event_date):
                self._validate_assignments(
                    assignments, city, request.event_date, event_time, exclude_event_id=None
                )

                event = Event(
                    title=request.title,
                    description=request.description,
                    event_date=request.event_date,
                    event_time=event_time,
                    status=request.status.value,
                    event_type_id=event_type.id,
                    city_id=city.id,
                    venue_id=venue.id if venue else None,
                    teams=request.teams,
                    event_metadata=request.metadata,
                )
                event.observers = assignments[ResourceKind.OBSERVER]
                event.sngs = assignments[ResourceKind.SNG]
                event.generators = assignments[ResourceKind.GENERATOR]
                self.db.add(event)
                self.db.commit()

        except ServiceError:
            self.db.rollback()
            raise

        event = self.get(event.id)
        logger.info(
            f"Created event: {event.title} (id={event.id}) on {event.event_date} {event.event_time}",
            extra={"event_id": event.id, "city_id": event.city_id},
        )
        self._notify("created", event)
        return event

    def update(self, event_id: int, request: EventUpdate) -> Event:
        """
        Update an event. Only fields present in the request are applied.

        Raises:
            NotFoundError: If the event or a referenced entity does not exist
            ResourceConflictError: If any observer or SNG assignment is rejected
            ResourceLockTimeoutError: If the scheduling locks are busy
        """
        event = self.get(event_id)
        fields = request.model_fields_set

        try:
            if "event_type_id" in fields and request.event_type_id is not None:
                self._get_event_type(request.event_type_id)
            city = event.city
            if "city_id" in fields:
                city = self._get_city(request.city_id) if request.city_id is not None else None
            venue = event.venue
            if "venue_id" in fields:
                venue = self._get_venue(request.venue_id) if request.venue_id is not None else None
            if venue is not None and venue.city_id != (city.id if city else None):
                if "venue_id" in fields:
                    raise ValidationError(
                        f"Venue '{venue.name}' is not in the event's city",
                        field="venue_id",
                    )
                # The event moved away from its venue
                venue = None

            assignments: Assignments = {
                ResourceKind.OBSERVER: list(event.observers),
                ResourceKind.SNG: list(event.sngs),
                ResourceKind.GENERATOR: list(event.generators),
            }
            for field_name, kind in _ID_FIELDS.items():
                if field_name in fields:
                    assignments[kind] = self._load_resources(kind, getattr(request, field_name) or [])

            new_date = event.event_date
            if "event_date" in fields and request.event_date is not None:
                new_date = request.event_date
            new_time = event.event_time
            if "event_time" in fields:
                new_time = request.event_time or self.settings.default_event_time

            city_changed = "city_id" in fields and request.city_id != event.city_id
            needs_validation = city_changed or any(f in fields for f in _SCHEDULE_FIELDS)

            lock = (
                self._scheduling_lock(assignments, new_date)
                if needs_validation else nullcontext()
            )
            with lock:
                if needs_validation:
                    self._validate_assignments(
                        assignments, city, new_date, new_time, exclude_event_id=event.id
                    )

                if "title" in fields and request.title is not None:
                    event.title = request.title
                if "description" in fields:
                    event.description = request.description
                event.event_date = new_date
                event.event_time = new_time
                if "event_type_id" in fields:
                    event.event_type_id = request.event_type_id
                if "city_id" in fields:
                    event.city_id = request.city_id
                event.venue_id = venue.id if venue else None
                if "status" in fields and request.status is not None:
                    event.status = request.status.value
                if "teams" in fields:
                    event.teams = request.teams
                if "metadata" in fields:
                    event.event_metadata = request.metadata

                event.observers = assignments[ResourceKind.OBSERVER]
                event.sngs = assignments[ResourceKind.SNG]
                event.generators = assignments[ResourceKind.GENERATOR]
                self.db.commit()

        except ServiceError:
            self.db.rollback()
            raise

        self.db.expire(event)
        event = self.get(event_id)
        logger.info(
            f"Updated event: {event.title} (id={event.id})",
            extra={
                "event_id": event.id,
                "fields": sorted(fields),
                "revalidated": needs_validation,
            },
        )
        self._notify("updated", event)
        return event

    def update_status(self, event_id: int, status: str) -> Event:
        """
        Change an event's status. Any status may move to any other.

        Raises:
            NotFoundError: If the event does not exist
            ValidationError: If the status is unknown
        """
        status = getattr(status, "value", status)
        if status not in {s.value for s in EventStatus}:
            raise ValidationError(f"Invalid status: {status}", field="status")
        event = self.get(event_id)
        previous = event.status

        event.status = status
        self.db.commit()
        self.db.refresh(event)

        logger.info(
            f"Event {event.id} status changed: {previous} -> {status}",
            extra={"event_id": event.id, "old_status": previous, "new_status": status},
        )
        self._notify("updated", event)
        return event

    def delete(self, event_id: int) -> Dict[str, Any]:
        """
        Delete an event.

        Returns:
            Serialized snapshot of the event taken before deletion

        Raises:
            NotFoundError: If the event does not exist
        """
        event = self.get(event_id)
        # Associations are gone after the delete; capture them first
        snapshot = self.serialize(event)

        self.db.delete(event)
        self.db.commit()

        logger.info(
            f"Deleted event: {snapshot['title']} (id={event_id})",
            extra={"event_id": event_id},
        )
        self._notify_payload("deleted", snapshot)
        return snapshot

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def serialize(event: Event) -> Dict[str, Any]:
        """JSON-ready representation of an event."""
        return EventResponse.model_validate(event).model_dump(mode="json")

    def _query(self):
        return self.db.query(Event).options(
            joinedload(Event.event_type),
            joinedload(Event.city),
            joinedload(Event.venue),
            selectinload(Event.observers),
            selectinload(Event.sngs),
            selectinload(Event.generators),
        )

    def _resolve_codes(self, kind: ResourceKind, codes: List[str]) -> List[Any]:
        return [self.resolution.find_or_create_resource(kind.value, code) for code in codes]

    def _load_resources(self, kind: ResourceKind, resource_ids: List[int]) -> List[Any]:
        model = RESOURCE_MODELS[kind.value]
        if not resource_ids:
            return []
        found = {
            resource.id: resource
            for resource in self.db.query(model).filter(model.id.in_(resource_ids)).all()
        }
        for resource_id in resource_ids:
            if resource_id not in found:
                raise NotFoundError(model.__name__, resource_id)
        return [found[resource_id] for resource_id in resource_ids]

    def _get_city(self, city_id: int) -> City:
        city = self.db.query(City).filter(City.id == city_id).first()
        if not city:
            raise NotFoundError("City", city_id)
        return city

    def _get_venue(self, venue_id: int) -> Venue:
        venue = self.db.query(Venue).filter(Venue.id == venue_id).first()
        if not venue:
            raise NotFoundError("Venue", venue_id)
        return venue

    def _get_event_type(self, event_type_id: int) -> EventType:
        event_type = self.db.query(EventType).filter(EventType.id == event_type_id).first()
        if not event_type:
            raise NotFoundError("EventType", event_type_id)
        return event_type

    @contextmanager
    def _scheduling_lock(self, assignments: Assignments, event_date: date):
        """Hold the slot locks and resource row locks of the validated kinds."""
        keys = [
            (kind.value, resource.id, event_date)
            for kind in VALIDATED_KINDS
            for resource in assignments.get(kind, [])
        ]
        with self.lock_arena.hold(keys, timeout=self.settings.resource_lock_timeout_seconds):
            for kind in VALIDATED_KINDS:
                ids = [resource.id for resource in assignments.get(kind, [])]
                if ids:
                    model = RESOURCE_MODELS[kind.value]
                    # Serializes concurrent writers across processes on PostgreSQL
                    self.db.query(model).filter(model.id.in_(ids)).with_for_update().all()
            yield

    def _validate_assignments(
        self,
        assignments: Assignments,
        city: Optional[City],
        event_date: date,
        event_time: time,
        exclude_event_id: Optional[int],
    ) -> None:
        """
        Validate every observer and SNG assignment.

        Raises:
            ResourceConflictError: For the first rejected assignment
        """
        if not any(assignments.get(kind) for kind in VALIDATED_KINDS):
            return

        timeline = ResourceTimeline(self.db)
        validator = ConflictValidator(CityDistanceGraph.load(self.db))

        for kind in VALIDATED_KINDS:
            for resource in assignments.get(kind, []):
                entries = timeline.for_day(kind.value, resource.id, event_date, exclude_event_id)
                verdict = validator.validate(
                    kind,
                    city.id if city else None,
                    city.name if city else None,
                    event_date,
                    event_time,
                    entries,
                )
                if not verdict.valid:
                    logger.warning(
                        f"Rejected {kind.value} {resource.code}: {verdict.message}",
                        extra={
                            "resource_kind": kind.value,
                            "resource_code": resource.code,
                            "reason_code": verdict.reason_code.value,
                            "event_id": exclude_event_id,
                        },
                    )
                    raise ResourceConflictError(verdict, kind.value, resource.id, resource.code)

    def _notify(self, action: str, event: Event) -> None:
        try:
            payload = self.serialize(event)
        except Exception as e:
            logger.warning(f"Could not serialize event {event.id} for notification: {e}")
            return
        self._notify_payload(action, payload)

    def _notify_payload(self, action: str, payload: Dict[str, Any]) -> None:
        try:
            self.notifier.notify(action, payload)
        except Exception as e:
            logger.warning(f"Event {action} notification failed: {e}")

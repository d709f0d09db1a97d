"""
Resource conflict validator.

Decides whether an observer or SNG can take a proposed (city, date, time)
slot given the other assignments it already has that day. The validator is a
pure function of its inputs: the caller supplies the resource timeline and
the travel-time graph, and receives a ConflictVerdict. Rejections are
returned, never raised.

Rules run in a fixed order and the first failing rule wins:

1. Empty timeline -> valid
2. Observer daily limit: an observer with any other assignment that day is
   rejected, whatever the city or time
3. Exact time: another assignment at the same instant is rejected
4. Travel time: for every assignment in a different city with a stored
   travel time, the gap between the two instants must be at least the travel
   time (a tie is enough). Pairs with no stored travel time are not checked.
5. Otherwise valid

Inputs that cannot be interpreted (malformed dates or times) produce an
``internal_error`` rejection so that a bad request is never approved.
"""

from datetime import date, datetime, time
from typing import Optional, Sequence, Union

from backend.src.schemas.conflict import ConflictReason, ConflictVerdict, ResourceKind
from backend.src.services.distance_graph import CityDistanceGraph
from backend.src.services.resource_timeline import TimelineEntry
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")

DATETIME_FORMAT = "%Y-%m-%d %H:%M"
TIME_FORMAT = "%H:%M"


def _parse_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Accept "YYYY-MM-DD" as well as a full datetime string
        return datetime.fromisoformat(value.strip()).date()
    raise TypeError(f"Cannot interpret {value!r} as a date")


def _parse_time(value: Union[time, str, None]) -> time:
    if value is None:
        return time(0, 0)
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise TypeError(f"Cannot interpret {value!r} as a time")


def hours_between(start: datetime, end: datetime) -> float:
    """Signed real number of hours from start to end."""
    return (end - start).total_seconds() / 3600


class ConflictValidator:
    """
    Validates one resource assignment against the resource's daily timeline.

    Usage:
        >>> validator = ConflictValidator(graph)
        >>> verdict = validator.validate(
        ...     ResourceKind.SNG, jeddah.id, "Jeddah",
        ...     "2024-01-10", "13:00", timeline,
        ... )
        >>> verdict.reason_code
        <ConflictReason.INSUFFICIENT_TRAVEL_TIME_AFTER: 'insufficient_travel_time_after'>
    """

    def __init__(self, graph: CityDistanceGraph):
        self.graph = graph

    def validate(
        self,
        kind: Union[ResourceKind, str],
        city_id: Optional[int],
        city_name: Optional[str],
        event_date: Union[date, str],
        event_time: Union[time, str, None],
        timeline: Sequence[TimelineEntry],
    ) -> ConflictVerdict:
        """
        Check a proposed slot for one resource.

        Args:
            kind: observer or sng
            city_id: Proposed city (None disables the travel rule)
            city_name: Proposed city name, used in messages
            event_date: Proposed date
            event_time: Proposed time (midnight when None)
            timeline: The resource's other assignments on that date

        Returns:
            ConflictVerdict, valid or carrying the first failing rule
        """
        kind = ResourceKind(kind)
        try:
            proposed_at = datetime.combine(_parse_date(event_date), _parse_time(event_time))
            return self._evaluate(kind, city_id, city_name, proposed_at, timeline)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(
                f"Could not validate {kind.value} assignment: {e}",
                extra={"resource_kind": kind.value},
                exc_info=True,
            )
            return ConflictVerdict.reject(
                ConflictReason.INTERNAL_ERROR,
                f"Error validating {kind.label} conflicts: {e}",
            )

    def _evaluate(
        self,
        kind: ResourceKind,
        city_id: Optional[int],
        city_name: Optional[str],
        proposed_at: datetime,
        timeline: Sequence[TimelineEntry],
    ) -> ConflictVerdict:
        label = kind.label

        if not timeline:
            return ConflictVerdict.accept(
                f"{label} is available - no conflicts found",
                existing_events_count=0,
                checked_date=proposed_at.date().isoformat(),
            )

        # The daily limit short-circuits the exact-time and travel rules, so
        # those never run for observers. Changing this order changes which
        # reason an observer rejection reports.
        if kind is ResourceKind.OBSERVER:
            first = timeline[0]
            return ConflictVerdict.reject(
                ConflictReason.DAILY_OBSERVER_LIMIT,
                (
                    f'Observer conflict: OB is already assigned to "{first.title}" '
                    f"on {proposed_at.date().isoformat()}; "
                    "an observer can cover only one event per day"
                ),
                conflict_event=first.title,
                conflict_city=first.city_name,
                conflict_time=first.starts_at.strftime(DATETIME_FORMAT),
                existing_events_count=len(timeline),
            )

        for entry in timeline:
            if entry.starts_at == proposed_at:
                return ConflictVerdict.reject(
                    ConflictReason.EXACT_TIME_CONFLICT,
                    (
                        f'{label} conflict: {label} is already assigned to "{entry.title}" '
                        f"at the same time ({proposed_at.strftime(DATETIME_FORMAT)})"
                    ),
                    conflict_event=entry.title,
                    conflict_city=entry.city_name,
                    conflict_time=entry.starts_at.strftime(DATETIME_FORMAT),
                )

        for entry in timeline:
            if city_id is None or entry.city_id is None or entry.city_id == city_id:
                continue

            required = self.graph.get_travel_time(entry.city_id, city_id)
            if required is None:
                logger.debug(
                    f"No travel time between cities {entry.city_id} and {city_id}; not checked",
                    extra={"resource_kind": kind.value},
                )
                continue

            existing_at = entry.starts_at
            if proposed_at > existing_at:
                available = hours_between(existing_at, proposed_at)
                if available < required:
                    return ConflictVerdict.reject(
                        ConflictReason.INSUFFICIENT_TRAVEL_TIME_AFTER,
                        (
                            f"{label} travel conflict: {label} cannot travel from "
                            f"{entry.city_name} ({existing_at.strftime(TIME_FORMAT)}) "
                            f"to {city_name} in time. "
                            f"Required: {required:.1f} hours, Available: {available:.1f} hours"
                        ),
                        previous_event=entry.title,
                        previous_city=entry.city_name,
                        previous_time=existing_at.strftime(DATETIME_FORMAT),
                        new_city=city_name,
                        new_time=proposed_at.strftime(DATETIME_FORMAT),
                        required_travel_hours=round(required, 2),
                        available_hours=round(available, 2),
                        shortage_hours=round(required - available, 2),
                    )
            elif proposed_at < existing_at:
                available = hours_between(proposed_at, existing_at)
                if available < required:
                    return ConflictVerdict.reject(
                        ConflictReason.INSUFFICIENT_TRAVEL_TIME_BEFORE,
                        (
                            f"{label} travel conflict: {label} cannot travel from "
                            f"{city_name} ({proposed_at.strftime(TIME_FORMAT)}) "
                            f"to {entry.city_name} ({existing_at.strftime(TIME_FORMAT)}) in time. "
                            f"Required: {required:.1f} hours, Available: {available:.1f} hours"
                        ),
                        next_event=entry.title,
                        next_city=entry.city_name,
                        next_time=existing_at.strftime(DATETIME_FORMAT),
                        current_city=city_name,
                        current_time=proposed_at.strftime(DATETIME_FORMAT),
                        required_travel_hours=round(required, 2),
                        available_hours=round(available, 2),
                        shortage_hours=round(required - available, 2),
                    )

        return ConflictVerdict.accept(
            f"{label} is available - no conflicts found",
            existing_events_count=len(timeline),
            checked_date=proposed_at.date().isoformat(),
        )

"""
Events API endpoints for scheduling broadcast events.

Provides operations on events:
- List events with filtering and pagination
- Month calendar view
- Create events (entities referenced by name/code, created on demand)
- Update events and their resource assignments
- Change status, delete
- Dry-run validation of a single assignment
- WebSocket channel for live create/update/delete notifications

Design:
- Uses dependency injection for services
- Mutation endpoints are plain ``def`` so they run in the threadpool; they
  may wait on scheduling locks and must not block the event loop
- A rejected assignment returns 422 with the full verdict:
  {valid, message, error_type, reason_code, resource_kind, resource_code, details}
- A scheduling lock timeout returns 503 with retryable=true
"""

import asyncio
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.schemas.conflict import ConflictVerdict, ValidateAssignmentRequest
from backend.src.schemas.event import (
    EventCalendarResponse,
    EventCreate,
    EventListResponse,
    EventResponse,
    EventStatusUpdate,
    EventUpdate,
)
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import (
    NotFoundError,
    ResourceConflictError,
    ResourceLockTimeoutError,
    ValidationError,
)
from backend.src.utils.logging_config import get_logger
from backend.src.utils.websocket import get_connection_manager


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Create EventService instance with database session."""
    return EventService(db=db)


def _conflict_exception(e: ResourceConflictError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=e.to_dict(),
    )


def _lock_timeout_exception(e: ResourceLockTimeoutError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"message": e.message, "retryable": True},
    )


# ============================================================================
# Live Updates
# ============================================================================


@router.websocket("/ws")
async def events_websocket(websocket: WebSocket):
    """
    WebSocket endpoint for live schedule updates.

    Messages are JSON objects:
    {
        "type": "event.created",
        "action": "created",
        "event": { ...full event object... },
        "timestamp": "2024-01-10T10:00:00+00:00"
    }

    Deletions carry the event as it was before deletion.
    """
    manager = get_connection_manager()
    channel = manager.EVENTS_CHANNEL

    await manager.connect(channel, websocket)
    logger.info("WebSocket connected for events channel")

    try:
        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=30.0
                )
                if data == "ping":
                    await websocket.send_text("pong")
            except asyncio.TimeoutError:
                try:
                    await websocket.send_text('{"type": "heartbeat"}')
                except Exception:
                    break
    except WebSocketDisconnect:
        logger.info("WebSocket disconnected from events channel")
    finally:
        manager.disconnect(channel, websocket)


# ============================================================================
# Queries
# ============================================================================


@router.get(
    "",
    response_model=EventListResponse,
    summary="List events",
)
async def list_events(
    start_date: Optional[date] = Query(None, description="Start of date range (inclusive)"),
    end_date: Optional[date] = Query(None, description="End of date range (inclusive)"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    city_id: Optional[int] = Query(None, description="Filter by city"),
    event_type_id: Optional[int] = Query(None, description="Filter by event type"),
    search: Optional[str] = Query(None, description="Title, city, venue or resource code"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    event_service: EventService = Depends(get_event_service),
) -> EventListResponse:
    """
    List events, newest first.

    Example:
        GET /api/events?start_date=2024-01-01&end_date=2024-01-31&status=scheduled
    """
    events, total = event_service.list(
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
        city_id=city_id,
        event_type_id=event_type_id,
        search=search,
        limit=limit,
        offset=offset,
    )
    return EventListResponse(
        items=[EventResponse.model_validate(e) for e in events],
        total=total,
    )


@router.get(
    "/calendar",
    response_model=EventCalendarResponse,
    summary="Month calendar",
)
async def get_calendar(
    year: int = Query(..., ge=1900, le=2999),
    month: int = Query(..., ge=1, le=12),
    event_service: EventService = Depends(get_event_service),
) -> EventCalendarResponse:
    """Events of one month grouped by ISO date."""
    try:
        days = event_service.calendar(year, month)
        return EventCalendarResponse(
            year=year,
            month=month,
            days={
                day: [EventResponse.model_validate(e) for e in events]
                for day, events in days.items()
            },
        )

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )


@router.post(
    "/validate",
    response_model=ConflictVerdict,
    summary="Validate an assignment",
    description="Run the conflict validator for one resource without writing anything",
)
def validate_assignment(
    request: ValidateAssignmentRequest,
    event_service: EventService = Depends(get_event_service),
) -> ConflictVerdict:
    """
    Dry-run validation for a proposed assignment.

    Always returns 200 with the verdict, valid or not.

    Example:
        POST /api/events/validate
        {"resource_kind": "sng", "resource_id": 1, "city_id": 2,
         "event_date": "2024-01-10", "event_time": "13:00"}
    """
    try:
        return event_service.validate_assignment(
            kind=request.resource_kind,
            resource_id=request.resource_id,
            city_id=request.city_id,
            event_date=request.event_date,
            event_time=request.event_time,
            exclude_event_id=request.exclude_event_id,
        )

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    summary="Get event",
)
async def get_event(
    event_id: int,
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """Get an event with its assignments."""
    try:
        return EventResponse.model_validate(event_service.get(event_id))

    except NotFoundError:
        logger.warning(f"Event not found: {event_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event not found: {event_id}",
        )


# ============================================================================
# Mutations
# ============================================================================


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
    responses={
        422: {"description": "Resource assignment rejected"},
        503: {"description": "Scheduling lock busy, retry"},
    },
)
def create_event(
    event: EventCreate,
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Create an event.

    The event type, city, venue and resources are looked up by name/code and
    created when missing. Every observer and SNG is validated; the first
    rejection aborts the request with no changes.

    Example:
        POST /api/events
        {
          "title": "Al Hilal vs Al Nassr",
          "event_date": "2024-01-10",
          "event_time": "13:00",
          "event_type": "Match",
          "city": "Jeddah",
          "venue": "King Abdullah Sports City",
          "observers": ["OB01"],
          "sngs": ["SNG-1"]
        }
    """
    try:
        created = event_service.create(event)
        return EventResponse.model_validate(created)

    except ResourceConflictError as e:
        raise _conflict_exception(e)

    except ResourceLockTimeoutError as e:
        raise _lock_timeout_exception(e)

    except ValidationError as e:
        logger.warning(f"Event validation failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "field": e.field},
        )

    except Exception as e:
        logger.error(f"Error creating event: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create event: {str(e)}",
        )


@router.patch(
    "/{event_id}",
    response_model=EventResponse,
    summary="Update event",
    responses={
        400: {"description": "Venue is not in the event's city"},
        422: {"description": "Resource assignment rejected"},
        503: {"description": "Scheduling lock busy, retry"},
    },
)
def update_event(
    event_id: int,
    event_update: EventUpdate,
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Update an event. Only provided fields are changed.

    Resource id lists replace the current assignments of that kind.
    Changing the city, date, time, observers or SNGs re-validates the
    resulting assignments.
    """
    try:
        updated = event_service.update(event_id, event_update)
        return EventResponse.model_validate(updated)

    except NotFoundError as e:
        logger.warning(f"Event update references missing entity: {e}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    except ResourceConflictError as e:
        raise _conflict_exception(e)

    except ResourceLockTimeoutError as e:
        raise _lock_timeout_exception(e)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "field": e.field},
        )

    except Exception as e:
        logger.error(f"Error updating event {event_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update event: {str(e)}",
        )


@router.patch(
    "/{event_id}/status",
    response_model=EventResponse,
    summary="Change event status",
)
def update_event_status(
    event_id: int,
    status_update: EventStatusUpdate,
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """Change the status of an event. No conflict checks are run."""
    try:
        updated = event_service.update_status(event_id, status_update.status.value)
        return EventResponse.model_validate(updated)

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event not found: {event_id}",
        )


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event",
)
def delete_event(
    event_id: int,
    event_service: EventService = Depends(get_event_service),
) -> None:
    """Delete an event and its assignments."""
    try:
        event_service.delete(event_id)

    except NotFoundError:
        logger.warning(f"Event not found for deletion: {event_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event not found: {event_id}",
        )

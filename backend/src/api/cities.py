"""
Cities API endpoints for managing the nodes of the travel-time graph.

Provides CRUD operations for cities:
- List cities with active/search filters
- Create, get, update and delete cities
- Report pairs of active cities with no travel time configured

Design:
- Uses dependency injection for services
- Duplicate names return 409, unknown ids 404
- Cities with events cannot be deleted; their distance edges are removed
  with them otherwise
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.schemas.city import (
    CityCreate,
    CityUpdate,
    CityResponse,
    CitySummary,
    MissingDistancePair,
    MissingDistancesResponse,
)
from backend.src.services.city_service import CityService
from backend.src.services.exceptions import NotFoundError, ConflictError
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/cities",
    tags=["Cities"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_city_service(db: Session = Depends(get_db)) -> CityService:
    """Create CityService instance with database session."""
    return CityService(db=db)


# ============================================================================
# API Endpoints
# ============================================================================


@router.get(
    "/missing-distances",
    response_model=MissingDistancesResponse,
    summary="List missing distances",
    description="Pairs of active cities with no travel time configured",
)
async def get_missing_distances(
    city_service: CityService = Depends(get_city_service),
) -> MissingDistancesResponse:
    """
    List every unordered pair of active cities without a distance edge.

    Example:
        GET /api/cities/missing-distances

        Response:
        {
          "data": [{"from_city": {"id": 1, "name": "Dammam"}, "to_city": {"id": 3, "name": "Riyadh"}}],
          "count": 1
        }
    """
    try:
        pairs = city_service.missing_distances()

        logger.info(
            "Retrieved missing distances",
            extra={"count": len(pairs)},
        )

        return MissingDistancesResponse(
            data=[
                MissingDistancePair(
                    from_city=CitySummary.model_validate(a),
                    to_city=CitySummary.model_validate(b),
                )
                for a, b in pairs
            ],
            count=len(pairs),
        )

    except Exception as e:
        logger.error(f"Error listing missing distances: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list missing distances: {str(e)}",
        )


@router.get(
    "",
    response_model=List[CityResponse],
    summary="List cities",
)
async def list_cities(
    active: Optional[bool] = Query(None, description="Filter by active flag"),
    search: Optional[str] = Query(None, description="Substring match on name"),
    city_service: CityService = Depends(get_city_service),
) -> List[CityResponse]:
    """List cities ordered by name."""
    cities = city_service.list(active=active, search=search)
    return [CityResponse.model_validate(city) for city in cities]


@router.post(
    "",
    response_model=CityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create city",
)
async def create_city(
    city: CityCreate,
    city_service: CityService = Depends(get_city_service),
) -> CityResponse:
    """
    Create a new city.

    Raises:
        409 Conflict: If a city with the same name exists
    """
    try:
        created = city_service.create(
            name=city.name,
            country=city.country,
            latitude=city.latitude,
            longitude=city.longitude,
            is_active=city.is_active,
        )
        return CityResponse.model_validate(created)

    except ConflictError as e:
        logger.warning(f"City conflict: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.get(
    "/{city_id}",
    response_model=CityResponse,
    summary="Get city",
)
async def get_city(
    city_id: int,
    city_service: CityService = Depends(get_city_service),
) -> CityResponse:
    """Get a city by id."""
    try:
        return CityResponse.model_validate(city_service.get(city_id))

    except NotFoundError:
        logger.warning(f"City not found: {city_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City not found: {city_id}",
        )


@router.put(
    "/{city_id}",
    response_model=CityResponse,
    summary="Update city",
)
async def update_city(
    city_id: int,
    city_update: CityUpdate,
    city_service: CityService = Depends(get_city_service),
) -> CityResponse:
    """
    Update city properties. Only provided fields are changed.

    Raises:
        404 Not Found: If the city doesn't exist
        409 Conflict: If the new name is taken
    """
    try:
        updated = city_service.update(
            city_id, **city_update.model_dump(exclude_unset=True)
        )
        return CityResponse.model_validate(updated)

    except NotFoundError:
        logger.warning(f"City not found for update: {city_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City not found: {city_id}",
        )

    except ConflictError as e:
        logger.warning(f"City conflict: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.delete(
    "/{city_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete city",
)
async def delete_city(
    city_id: int,
    city_service: CityService = Depends(get_city_service),
) -> None:
    """
    Delete a city and its distance edges.

    Raises:
        404 Not Found: If the city doesn't exist
        409 Conflict: If events take place in the city
    """
    try:
        city_service.delete(city_id)

    except NotFoundError:
        logger.warning(f"City not found for deletion: {city_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City not found: {city_id}",
        )

    except ConflictError as e:
        logger.warning(f"Cannot delete city {city_id}: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )

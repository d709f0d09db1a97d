"""
City distances API endpoints for managing travel-time edges.

Provides operations on the travel-time graph:
- List, create, get, update and delete single edges
- Batch upsert of many edges in one call
- Distance matrix over active cities

Design:
- Edges are unordered: creating (B, A) when (A, B) exists returns 409
- Self-pairs return 400 (422 when caught by schema validation)
- Unknown cities return 404
- An edge's cities never change; update accepts hours and notes only
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.schemas.city import CitySummary
from backend.src.schemas.city_distance import (
    CityDistanceCreate,
    CityDistanceUpdate,
    CityDistanceResponse,
    CityDistanceBatchRequest,
    CityDistanceBatchResponse,
    DistanceMatrixResponse,
)
from backend.src.services.city_distance_service import CityDistanceService
from backend.src.services.exceptions import NotFoundError, ConflictError, ValidationError
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(tags=["City Distances"])


# ============================================================================
# Dependencies
# ============================================================================


def get_city_distance_service(db: Session = Depends(get_db)) -> CityDistanceService:
    """Create CityDistanceService instance with database session."""
    return CityDistanceService(db=db)


# ============================================================================
# API Endpoints
# ============================================================================


@router.get(
    "/city-distances",
    response_model=List[CityDistanceResponse],
    summary="List city distances",
)
async def list_city_distances(
    from_city_id: Optional[int] = Query(None, description="Edges touching this city"),
    to_city_id: Optional[int] = Query(None, description="Edges touching this city"),
    service: CityDistanceService = Depends(get_city_distance_service),
) -> List[CityDistanceResponse]:
    """
    List distance edges.

    Edges are unordered, so each filter matches either end of an edge.
    """
    distances = service.list(from_city_id=from_city_id, to_city_id=to_city_id)
    return [CityDistanceResponse.model_validate(d) for d in distances]


@router.post(
    "/city-distances",
    response_model=CityDistanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create city distance",
)
async def create_city_distance(
    distance: CityDistanceCreate,
    service: CityDistanceService = Depends(get_city_distance_service),
) -> CityDistanceResponse:
    """
    Create a travel-time edge.

    Raises:
        400 Bad Request: If both cities are the same
        404 Not Found: If a city doesn't exist
        409 Conflict: If the pair already has an edge, in either direction

    Example:
        POST /api/city-distances
        {"from_city_id": 1, "to_city_id": 2, "travel_time_hours": 5.0}
    """
    try:
        created = service.create(
            from_city_id=distance.from_city_id,
            to_city_id=distance.to_city_id,
            travel_time_hours=distance.travel_time_hours,
            notes=distance.notes,
        )

        logger.info(
            "Created city distance",
            extra={"distance_id": created.id},
        )

        return CityDistanceResponse.model_validate(created)

    except NotFoundError as e:
        logger.warning(f"City not found: {e.identifier}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    except ValidationError as e:
        logger.warning(f"City distance validation failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )

    except ConflictError as e:
        logger.warning(f"City distance conflict: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.post(
    "/city-distances/batch",
    response_model=CityDistanceBatchResponse,
    summary="Batch upsert city distances",
)
async def batch_upsert_city_distances(
    batch: CityDistanceBatchRequest,
    service: CityDistanceService = Depends(get_city_distance_service),
) -> CityDistanceBatchResponse:
    """
    Create or update many edges at once.

    Each entry updates the edge of its city pair (in either direction) or
    creates it. Any invalid entry rejects the whole batch.

    Example:
        POST /api/city-distances/batch
        {"distances": [{"from_city_id": 1, "to_city_id": 2, "travel_time_hours": 5}]}

        Response:
        {"created": 1, "updated": 0}
    """
    try:
        counts = service.batch_upsert(
            (item.from_city_id, item.to_city_id, item.travel_time_hours)
            for item in batch.distances
        )
        return CityDistanceBatchResponse(**counts)

    except NotFoundError as e:
        logger.warning(f"City not found in batch: {e.identifier}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    except ValidationError as e:
        logger.warning(f"Batch validation failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "field": e.field},
        )

    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.get(
    "/distance-matrix",
    response_model=DistanceMatrixResponse,
    summary="Distance matrix",
    description="Symmetric travel-time matrix over active cities",
)
async def get_distance_matrix(
    service: CityDistanceService = Depends(get_city_distance_service),
) -> DistanceMatrixResponse:
    """
    Get the travel-time matrix.

    ``matrix[i][j]`` is the travel time between ``cities[i]`` and
    ``cities[j]``: 0 on the diagonal, null where no edge is stored.
    """
    try:
        cities, matrix = service.matrix()
        return DistanceMatrixResponse(
            cities=[CitySummary.model_validate(city) for city in cities],
            matrix=matrix,
        )

    except Exception as e:
        logger.error(f"Error building distance matrix: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build distance matrix: {str(e)}",
        )


@router.get(
    "/city-distances/{distance_id}",
    response_model=CityDistanceResponse,
    summary="Get city distance",
)
async def get_city_distance(
    distance_id: int,
    service: CityDistanceService = Depends(get_city_distance_service),
) -> CityDistanceResponse:
    """Get a distance edge by id."""
    try:
        return CityDistanceResponse.model_validate(service.get(distance_id))

    except NotFoundError:
        logger.warning(f"City distance not found: {distance_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City distance not found: {distance_id}",
        )


@router.put(
    "/city-distances/{distance_id}",
    response_model=CityDistanceResponse,
    summary="Update city distance",
)
async def update_city_distance(
    distance_id: int,
    distance_update: CityDistanceUpdate,
    service: CityDistanceService = Depends(get_city_distance_service),
) -> CityDistanceResponse:
    """Update the travel time and/or notes of an edge."""
    try:
        updated = service.update(
            distance_id,
            travel_time_hours=distance_update.travel_time_hours,
            notes=distance_update.notes,
        )
        return CityDistanceResponse.model_validate(updated)

    except NotFoundError:
        logger.warning(f"City distance not found for update: {distance_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City distance not found: {distance_id}",
        )

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )


@router.delete(
    "/city-distances/{distance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete city distance",
)
async def delete_city_distance(
    distance_id: int,
    service: CityDistanceService = Depends(get_city_distance_service),
) -> None:
    """Delete a distance edge."""
    try:
        service.delete(distance_id)

    except NotFoundError:
        logger.warning(f"City distance not found for deletion: {distance_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City distance not found: {distance_id}",
        )

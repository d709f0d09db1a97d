"""
Resource catalog API endpoints for observers, SNG units and generators.

One router serves every kind: ``/resources/{kind}`` where kind is
observers, sngs or generators.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.schemas.resource import ResourceCreate, ResourceResponse
from backend.src.services.resource_service import ResourceService
from backend.src.services.exceptions import NotFoundError, ConflictError
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/resources",
    tags=["Resources"],
)

# URL segment -> resource kind
KIND_SEGMENTS = {
    "observers": "observer",
    "sngs": "sng",
    "generators": "generator",
}


# ============================================================================
# Dependencies
# ============================================================================


def get_resource_service(
    kind: str = Path(..., description="observers, sngs or generators"),
    db: Session = Depends(get_db),
) -> ResourceService:
    """Create ResourceService for the kind in the URL."""
    if kind not in KIND_SEGMENTS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown resource kind: {kind}",
        )
    return ResourceService(db=db, kind=KIND_SEGMENTS[kind])


# ============================================================================
# API Endpoints
# ============================================================================


@router.get(
    "/{kind}",
    response_model=List[ResourceResponse],
    summary="List resources",
)
async def list_resources(
    search: Optional[str] = Query(None, description="Match on code or name"),
    service: ResourceService = Depends(get_resource_service),
) -> List[ResourceResponse]:
    """List resources of one kind ordered by code."""
    return [ResourceResponse.model_validate(r) for r in service.list(search=search)]


@router.post(
    "/{kind}",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create resource",
)
async def create_resource(
    resource: ResourceCreate,
    service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    """
    Create a resource.

    Raises:
        409 Conflict: If the code is already used by this kind
    """
    try:
        created = service.create(
            code=resource.code,
            name=resource.name,
            status=resource.status.value,
            notes=resource.notes,
        )
        return ResourceResponse.model_validate(created)

    except ConflictError as e:
        logger.warning(f"Resource conflict: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.get(
    "/{kind}/{resource_id}",
    response_model=ResourceResponse,
    summary="Get resource",
)
async def get_resource(
    resource_id: int,
    service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    """Get a resource by id."""
    try:
        return ResourceResponse.model_validate(service.get(resource_id))

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.delete(
    "/{kind}/{resource_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete resource",
)
async def delete_resource(
    resource_id: int,
    service: ResourceService = Depends(get_resource_service),
) -> None:
    """Delete a resource and its event assignments."""
    try:
        service.delete(resource_id)

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

"""
Resource catalog service for observers, SNG units and generators.

One service class handles every kind; the kind selects the model.

Design:
- Codes are unique per kind
- Deleting a resource removes its event assignments (association CASCADE)
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import RESOURCE_MODELS
from backend.src.services.exceptions import ConflictError, NotFoundError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class ResourceService:
    """
    Service for managing one resource catalog.

    Usage:
        >>> service = ResourceService(db_session, "sng")
        >>> sng = service.create(code="SNG-1", name="SNG Truck 1")
    """

    def __init__(self, db: Session, kind: str):
        """
        Initialize resource service.

        Args:
            db: SQLAlchemy database session
            kind: observer, sng or generator

        Raises:
            ValueError: If kind is unknown
        """
        kind = getattr(kind, "value", kind)
        if kind not in RESOURCE_MODELS:
            raise ValueError(f"Unknown resource kind: {kind}")
        self.db = db
        self.kind = kind
        self.model = RESOURCE_MODELS[kind]

    def create(
        self,
        code: str,
        name: Optional[str] = None,
        status: str = "available",
        notes: Optional[str] = None,
    ):
        """
        Create a resource.

        Raises:
            ConflictError: If the code is already used by this kind
        """
        existing = self.db.query(self.model).filter(self.model.code == code).first()
        if existing:
            raise ConflictError(
                f"{self.model.__name__} with code '{code}' already exists",
                existing_id=existing.id,
            )

        try:
            resource = self.model(code=code, name=name, status=status, notes=notes)
            self.db.add(resource)
            self.db.commit()
            self.db.refresh(resource)

            logger.info(f"Created {self.kind}: {resource.code} (id={resource.id})")
            return resource

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to create {self.kind} '{code}': {e}")
            raise ConflictError(f"{self.model.__name__} with code '{code}' already exists")

    def get(self, resource_id: int):
        """
        Get a resource by id.

        Raises:
            NotFoundError: If the resource does not exist
        """
        resource = self.db.query(self.model).filter(self.model.id == resource_id).first()
        if not resource:
            raise NotFoundError(self.model.__name__, resource_id)
        return resource

    def list(self, search: Optional[str] = None) -> List:
        """List resources ordered by code, optionally matching code or name."""
        query = self.db.query(self.model)
        if search:
            term = f"%{search}%"
            query = query.filter(
                (self.model.code.ilike(term)) | (self.model.name.ilike(term))
            )
        return query.order_by(self.model.code.asc()).all()

    def delete(self, resource_id: int) -> None:
        """
        Delete a resource and its event assignments.

        Raises:
            NotFoundError: If the resource does not exist
        """
        resource = self.get(resource_id)
        code = resource.code
        self.db.delete(resource)
        self.db.commit()
        logger.info(f"Deleted {self.kind}: {code} (id={resource_id})")

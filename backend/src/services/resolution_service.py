"""
Entity resolution service.

Turns the natural keys an event request carries (city name, venue name,
event type name, resource codes) into rows, creating the rows that do not
exist yet. Every lookup is idempotent: resolving the same key twice returns
the same row and never creates a duplicate.

Design:
- Lookup first, then insert inside a SAVEPOINT (begin_nested); a concurrent
  insert of the same key surfaces as IntegrityError and is resolved by
  re-reading the winner's row
- Nothing is committed here; the caller owns the transaction
"""

from typing import Any, Dict, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import City, EventType, Venue, RESOURCE_MODELS
from backend.src.services.exceptions import ValidationError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class ResolutionService:
    """
    Find-or-create for the entities referenced by event requests.

    Usage:
        >>> service = ResolutionService(db)
        >>> city = service.find_or_create_city("Riyadh")
        >>> service.find_or_create_city("Riyadh").id == city.id
        True
    """

    def __init__(self, db: Session):
        self.db = db

    def find_or_create_city(self, name: str) -> City:
        """Resolve a city by its unique name."""
        name = self._require(name, "city")
        return self._find_or_create(City, {"name": name}, {"is_active": True})

    def find_or_create_venue(self, name: str, city_id: Optional[int]) -> Venue:
        """
        Resolve a venue by (name, city).

        Raises:
            ValidationError: If no city is given
        """
        name = self._require(name, "venue")
        if city_id is None:
            raise ValidationError("A venue requires a city", field="venue")
        return self._find_or_create(Venue, {"name": name, "city_id": city_id})

    def find_or_create_event_type(self, name: str) -> EventType:
        """Resolve an event type by name, deriving its code and colour."""
        name = self._require(name, "event_type")
        return self._find_or_create(
            EventType,
            {"name": name},
            {
                "code": EventType.derive_code(name),
                "color": EventType.derive_color(name),
            },
        )

    def find_or_create_resource(self, kind: str, code: str):
        """
        Resolve an observer, SNG or generator by its unique code.

        Raises:
            ValueError: If kind is unknown
        """
        kind = getattr(kind, "value", kind)
        if kind not in RESOURCE_MODELS:
            raise ValueError(f"Unknown resource kind: {kind}")
        code = self._require(code, kind)
        return self._find_or_create(RESOURCE_MODELS[kind], {"code": code})

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _require(value: Optional[str], field: str) -> str:
        if value is None or not str(value).strip():
            raise ValidationError(f"{field} cannot be empty", field=field)
        return str(value).strip()

    def _find_or_create(
        self,
        model: Type,
        lookup: Dict[str, Any],
        defaults: Optional[Dict[str, Any]] = None,
    ):
        existing = self.db.query(model).filter_by(**lookup).first()
        if existing:
            return existing

        try:
            nested = self.db.begin_nested()
            instance = model(**lookup, **(defaults or {}))
            self.db.add(instance)
            self.db.flush()
            nested.commit()
            logger.info(
                f"Created {model.__name__} {lookup}",
                extra={"entity": model.__name__},
            )
            return instance
        except IntegrityError:
            nested.rollback()
            # Concurrent insert: the row was created between our check and insert
            existing = self.db.query(model).filter_by(**lookup).first()
            if existing is None:
                raise
            return existing

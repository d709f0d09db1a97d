"""
City service for managing the nodes of the travel-time graph.

Provides business logic for creating, reading, updating, and deleting
cities, plus the missing-distance report over active cities.

Design:
- City names are unique
- Cities referenced by events cannot be deleted
- Deleting a city removes its distance edges and venues (database CASCADE)
"""

from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import City, Event
from backend.src.services.distance_graph import CityDistanceGraph
from backend.src.services.exceptions import ConflictError, NotFoundError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class CityService:
    """
    Service for managing cities.

    Usage:
        >>> service = CityService(db_session)
        >>> city = service.create(name="Riyadh", country="Saudi Arabia")
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        name: str,
        country: Optional[str] = None,
        latitude: Optional[Decimal] = None,
        longitude: Optional[Decimal] = None,
        is_active: bool = True,
    ) -> City:
        """
        Create a new city.

        Raises:
            ConflictError: If a city with the same name exists
        """
        self._ensure_name_available(name)

        try:
            city = City(
                name=name,
                country=country,
                latitude=latitude,
                longitude=longitude,
                is_active=is_active,
            )
            self.db.add(city)
            self.db.commit()
            self.db.refresh(city)

            logger.info(f"Created city: {city.name} (id={city.id})")
            return city

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to create city '{name}': {e}")
            raise ConflictError(f"City '{name}' already exists")

    def get(self, city_id: int) -> City:
        """
        Get a city by id.

        Raises:
            NotFoundError: If the city does not exist
        """
        city = self.db.query(City).filter(City.id == city_id).first()
        if not city:
            raise NotFoundError("City", city_id)
        return city

    def list(
        self,
        active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[City]:
        """
        List cities ordered by name.

        Args:
            active: Only active (True) or inactive (False) cities
            search: Substring match on the name
        """
        query = self.db.query(City)

        if active is not None:
            query = query.filter(City.is_active == active)

        if search:
            query = query.filter(City.name.ilike(f"%{search}%"))

        return query.order_by(City.name.asc()).all()

    def update(self, city_id: int, **fields) -> City:
        """
        Update city fields. Only keys present in ``fields`` are applied.

        Raises:
            NotFoundError: If the city does not exist
            ConflictError: If the new name is taken
        """
        city = self.get(city_id)

        new_name = fields.get("name")
        if new_name is not None and new_name != city.name:
            self._ensure_name_available(new_name)

        for key, value in fields.items():
            if key not in ("name", "country", "latitude", "longitude", "is_active"):
                continue
            # name and is_active are not nullable
            if value is None and key in ("name", "is_active"):
                continue
            setattr(city, key, value)

        try:
            self.db.commit()
            self.db.refresh(city)
            logger.info(f"Updated city: {city.name} (id={city.id})")
            return city

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to update city {city_id}: {e}")
            raise ConflictError(f"City '{new_name}' already exists")

    def delete(self, city_id: int) -> None:
        """
        Delete a city with its distance edges.

        Raises:
            NotFoundError: If the city does not exist
            ConflictError: If events take place in the city
        """
        city = self.get(city_id)

        event_count = (
            self.db.query(func.count(Event.id))
            .filter(Event.city_id == city.id)
            .scalar()
        )
        if event_count > 0:
            raise ConflictError(
                f"Cannot delete city '{city.name}': {event_count} event(s) take place there"
            )

        try:
            self.db.delete(city)
            self.db.commit()
            logger.info(f"Deleted city: {city.name} (id={city_id})")

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to delete city {city_id}: {e}")
            raise ConflictError(
                f"Cannot delete city '{city.name}': it has associated entities"
            )

    def missing_distances(self) -> List[Tuple[City, City]]:
        """
        Pairs of active cities that have no stored travel time.

        Returns:
            List of (city, city) tuples, cities ordered by name
        """
        cities = self.list(active=True)
        by_id = {city.id: city for city in cities}
        graph = CityDistanceGraph.load(self.db)
        return [
            (by_id[a], by_id[b])
            for a, b in graph.missing_pairs([city.id for city in cities])
        ]

    def _ensure_name_available(self, name: str) -> None:
        existing = self.db.query(City).filter(City.name == name).first()
        if existing:
            raise ConflictError(f"City '{name}' already exists", existing_id=existing.id)

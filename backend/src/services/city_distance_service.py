"""
City distance service for managing travel-time edges.

Provides business logic for creating, reading, updating and deleting the
edges of the travel-time graph, batch upserts, and the distance matrix.

Design:
- Edges are unordered: (A, B) and (B, A) are the same edge, stored once
  with the lower city id first
- Self-pairs and duplicates are rejected through CityDistanceGraph
- An edge's city pair never changes; update touches hours and notes only
- A batch is validated as a whole before any row is written
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import City, CityDistance
from backend.src.services.distance_graph import CityDistanceGraph, canonical_pair
from backend.src.services.exceptions import ConflictError, NotFoundError, ValidationError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


class CityDistanceService:
    """
    Service for managing city travel times.

    Usage:
        >>> service = CityDistanceService(db_session)
        >>> edge = service.create(from_city_id=1, to_city_id=2, travel_time_hours=Decimal("5"))
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        from_city_id: int,
        to_city_id: int,
        travel_time_hours: Decimal,
        notes: Optional[str] = None,
    ) -> CityDistance:
        """
        Create a travel-time edge between two cities.

        Raises:
            ValidationError: If both cities are the same
            NotFoundError: If either city does not exist
            ConflictError: If the pair already has an edge, in either direction
        """
        if from_city_id == to_city_id:
            raise ValidationError(
                "A city cannot have a travel time to itself", field="to_city_id"
            )
        self._require_cities([from_city_id, to_city_id])

        graph = CityDistanceGraph.load(self.db)
        graph.add_edge(from_city_id, to_city_id, travel_time_hours)

        low, high = canonical_pair(from_city_id, to_city_id)
        try:
            distance = CityDistance(
                from_city_id=low,
                to_city_id=high,
                travel_time_hours=travel_time_hours,
                notes=notes,
            )
            self.db.add(distance)
            self.db.commit()
            self.db.refresh(distance)

            logger.info(
                f"Created distance {low}<->{high}: {travel_time_hours}h (id={distance.id})"
            )
            return distance

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to create distance {low}<->{high}: {e}")
            raise ConflictError(
                f"Distance between cities {low} and {high} already exists"
            )

    def get(self, distance_id: int) -> CityDistance:
        """
        Get an edge by id.

        Raises:
            NotFoundError: If the edge does not exist
        """
        distance = (
            self.db.query(CityDistance)
            .filter(CityDistance.id == distance_id)
            .first()
        )
        if not distance:
            raise NotFoundError("CityDistance", distance_id)
        return distance

    def find(self, city_a_id: int, city_b_id: int) -> Optional[CityDistance]:
        """Edge between two cities, in either direction, or None."""
        low, high = canonical_pair(city_a_id, city_b_id)
        return (
            self.db.query(CityDistance)
            .filter(
                CityDistance.from_city_id == low,
                CityDistance.to_city_id == high,
            )
            .first()
        )

    def list(
        self,
        from_city_id: Optional[int] = None,
        to_city_id: Optional[int] = None,
    ) -> List[CityDistance]:
        """
        List edges.

        Edges are unordered, so each filter matches either end of an edge.
        """
        query = self.db.query(CityDistance)

        for city_id in (from_city_id, to_city_id):
            if city_id is not None:
                query = query.filter(
                    or_(
                        CityDistance.from_city_id == city_id,
                        CityDistance.to_city_id == city_id,
                    )
                )

        return query.order_by(CityDistance.id.asc()).all()

    def update(
        self,
        distance_id: int,
        travel_time_hours: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> CityDistance:
        """
        Update the hours and/or notes of an edge.

        Raises:
            NotFoundError: If the edge does not exist
            ValidationError: If hours is negative
        """
        distance = self.get(distance_id)

        if travel_time_hours is not None:
            if travel_time_hours < 0:
                raise ValidationError(
                    "Travel time cannot be negative", field="travel_time_hours"
                )
            distance.travel_time_hours = travel_time_hours
        if notes is not None:
            distance.notes = notes

        self.db.commit()
        self.db.refresh(distance)
        logger.info(
            f"Updated distance {distance.from_city_id}<->{distance.to_city_id}: "
            f"{distance.travel_time_hours}h (id={distance.id})"
        )
        return distance

    def delete(self, distance_id: int) -> None:
        """
        Delete an edge.

        Raises:
            NotFoundError: If the edge does not exist
        """
        distance = self.get(distance_id)
        pair = distance.pair
        self.db.delete(distance)
        self.db.commit()
        logger.info(f"Deleted distance {pair[0]}<->{pair[1]} (id={distance_id})")

    def batch_upsert(
        self,
        items: Iterable[Tuple[int, int, Decimal]],
    ) -> Dict[str, int]:
        """
        Create or update many edges in one transaction.

        Each ``(from_city_id, to_city_id, travel_time_hours)`` item updates the
        edge of its unordered pair if one exists, otherwise creates it. Later
        items for the same pair overwrite earlier ones.

        Returns:
            {"created": n, "updated": m}

        Raises:
            ValidationError: If any item is a self-pair or has negative hours
            NotFoundError: If any item references an unknown city
        """
        items = list(items)
        for index, (from_city_id, to_city_id, hours) in enumerate(items):
            if from_city_id == to_city_id:
                raise ValidationError(
                    f"Item {index}: a city cannot have a travel time to itself",
                    field=f"distances.{index}.to_city_id",
                )
            if hours < 0:
                raise ValidationError(
                    f"Item {index}: travel time cannot be negative",
                    field=f"distances.{index}.travel_time_hours",
                )
        self._require_cities(
            {city_id for from_id, to_id, _ in items for city_id in (from_id, to_id)}
        )

        rows = {row.pair: row for row in self.db.query(CityDistance).all()}
        graph = CityDistanceGraph.from_rows(rows.values())

        created = 0
        updated = 0
        try:
            for from_city_id, to_city_id, hours in items:
                pair = canonical_pair(from_city_id, to_city_id)
                if graph.set_edge(from_city_id, to_city_id, hours):
                    row = CityDistance(
                        from_city_id=pair[0],
                        to_city_id=pair[1],
                        travel_time_hours=hours,
                    )
                    self.db.add(row)
                    rows[pair] = row
                    created += 1
                else:
                    rows[pair].travel_time_hours = hours
                    updated += 1
            self.db.commit()

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Batch distance upsert failed: {e}")
            raise ConflictError("Batch conflicts with concurrently created distances")

        logger.info(
            f"Batch distance upsert: {created} created, {updated} updated",
            extra={"created_count": created, "updated_count": updated},
        )
        return {"created": created, "updated": updated}

    def fill_missing(
        self,
        pairs: Iterable[Tuple[int, int]],
        travel_time_hours: Decimal,
        notes: Optional[str] = None,
    ) -> List[CityDistance]:
        """
        Create edges with one travel time for pairs that have none.

        Pairs that gained an edge in the meantime are skipped.

        Returns:
            The created edges
        """
        graph = CityDistanceGraph.load(self.db)
        created = []
        for city_a_id, city_b_id in pairs:
            if city_a_id == city_b_id or graph.has_edge(city_a_id, city_b_id):
                continue
            graph.add_edge(city_a_id, city_b_id, travel_time_hours)
            low, high = canonical_pair(city_a_id, city_b_id)
            distance = CityDistance(
                from_city_id=low,
                to_city_id=high,
                travel_time_hours=travel_time_hours,
                notes=notes,
            )
            self.db.add(distance)
            created.append(distance)

        self.db.commit()
        logger.info(
            f"Filled {len(created)} missing distance(s) with {travel_time_hours}h",
            extra={"created_count": len(created)},
        )
        return created

    def matrix(self) -> Tuple[List[City], List[List[Optional[float]]]]:
        """
        Travel-time matrix over active cities ordered by name.

        Returns:
            (cities, matrix) where matrix[i][j] is the hours between
            cities[i] and cities[j], 0 on the diagonal, None when missing
        """
        cities = (
            self.db.query(City)
            .filter(City.is_active == True)
            .order_by(City.name.asc())
            .all()
        )
        graph = CityDistanceGraph.load(self.db)
        return cities, graph.matrix([city.id for city in cities])

    def _require_cities(self, city_ids: Iterable[int]) -> None:
        city_ids = set(city_ids)
        found = {
            row[0]
            for row in self.db.query(City.id).filter(City.id.in_(city_ids)).all()
        }
        missing = sorted(city_ids - found)
        if missing:
            raise NotFoundError("City", missing[0])

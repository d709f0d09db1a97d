"""
In-memory travel-time graph over cities.

The graph is undirected and sparse: each edge joins an unordered pair of
cities and carries the hours a resource needs to travel between them.
Edges are keyed by the canonical ``(min(a, b), max(a, b))`` pair so lookups
are O(1) and direction-agnostic.

The graph is loaded from the ``city_distances`` table once per mutation and
then consulted by the conflict validator; the edge-management service
uses the same structure to enforce the no-self-pair and no-duplicate rules.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from sqlalchemy.orm import Session

from backend.src.models import CityDistance
from backend.src.services.exceptions import ConflictError, ValidationError


CityPair = Tuple[int, int]
Hours = Union[int, float, Decimal]


def canonical_pair(city_a_id: int, city_b_id: int) -> CityPair:
    """Order a city pair so (a, b) and (b, a) share one key."""
    if city_a_id <= city_b_id:
        return (city_a_id, city_b_id)
    return (city_b_id, city_a_id)


class CityDistanceGraph:
    """
    Undirected weighted graph of city travel times.

    Usage:
        >>> graph = CityDistanceGraph()
        >>> graph.add_edge(1, 2, 5)
        >>> graph.get_travel_time(2, 1)
        5.0
        >>> graph.get_travel_time(1, 3) is None
        True
    """

    def __init__(self, edges: Optional[Dict[CityPair, Hours]] = None):
        self._edges: Dict[CityPair, float] = {}
        for (city_a_id, city_b_id), hours in (edges or {}).items():
            self.add_edge(city_a_id, city_b_id, hours)

    @classmethod
    def from_rows(cls, rows: Iterable[CityDistance]) -> "CityDistanceGraph":
        """Build a graph from CityDistance rows."""
        graph = cls()
        for row in rows:
            graph.add_edge(row.from_city_id, row.to_city_id, row.travel_time_hours)
        return graph

    @classmethod
    def load(cls, db: Session) -> "CityDistanceGraph":
        """Build a graph from every stored edge."""
        return cls.from_rows(db.query(CityDistance).all())

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, pair: CityPair) -> bool:
        return canonical_pair(*pair) in self._edges

    def has_edge(self, city_a_id: int, city_b_id: int) -> bool:
        return canonical_pair(city_a_id, city_b_id) in self._edges

    def get_travel_time(self, city_a_id: int, city_b_id: int) -> Optional[float]:
        """
        Travel hours between two cities, in either direction.

        Returns:
            0.0 for the same city, None when no edge is stored
        """
        if city_a_id == city_b_id:
            return 0.0
        return self._edges.get(canonical_pair(city_a_id, city_b_id))

    def add_edge(self, city_a_id: int, city_b_id: int, hours: Hours) -> None:
        """
        Add a new edge.

        Raises:
            ValidationError: If both ends are the same city or hours is negative
            ConflictError: If the unordered pair already has an edge
        """
        if city_a_id == city_b_id:
            raise ValidationError(
                "A city cannot have a travel time to itself", field="to_city_id"
            )
        if Decimal(str(hours)) < 0:
            raise ValidationError(
                "Travel time cannot be negative", field="travel_time_hours"
            )
        pair = canonical_pair(city_a_id, city_b_id)
        if pair in self._edges:
            raise ConflictError(
                f"Distance between cities {pair[0]} and {pair[1]} already exists"
            )
        self._edges[pair] = float(hours)

    def set_edge(self, city_a_id: int, city_b_id: int, hours: Hours) -> bool:
        """
        Create or replace the edge for a pair.

        Returns:
            True if the edge was created, False if an existing one was updated
        """
        if self.has_edge(city_a_id, city_b_id):
            self.remove_edge(city_a_id, city_b_id)
            self.add_edge(city_a_id, city_b_id, hours)
            return False
        self.add_edge(city_a_id, city_b_id, hours)
        return True

    def remove_edge(self, city_a_id: int, city_b_id: int) -> bool:
        """Remove an edge; returns False when there was none."""
        return self._edges.pop(canonical_pair(city_a_id, city_b_id), None) is not None

    def missing_pairs(self, city_ids: Sequence[int]) -> List[CityPair]:
        """
        Every distinct unordered pair of the given cities with no edge.

        Pairs keep the order of ``city_ids`` (earlier city first). Quadratic
        in the number of cities.
        """
        ids = list(dict.fromkeys(city_ids))
        missing = []
        for i, city_a_id in enumerate(ids):
            for city_b_id in ids[i + 1:]:
                if not self.has_edge(city_a_id, city_b_id):
                    missing.append((city_a_id, city_b_id))
        return missing

    def matrix(self, city_ids: Sequence[int]) -> List[List[Optional[float]]]:
        """Symmetric travel-time matrix: 0 on the diagonal, None when missing."""
        ids = list(city_ids)
        return [
            [self.get_travel_time(row_id, col_id) for col_id in ids]
            for row_id in ids
        ]

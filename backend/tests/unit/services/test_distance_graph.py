"""
Unit tests for CityDistanceGraph.

Tests undirected lookups, the no-self-pair and no-duplicate rules,
missing-pair enumeration and the travel-time matrix.
"""

import pytest
from decimal import Decimal

from backend.src.services.distance_graph import CityDistanceGraph, canonical_pair
from backend.src.services.exceptions import ConflictError, ValidationError


class TestCanonicalPair:
    """Tests for canonical_pair."""

    def test_orders_ids(self):
        assert canonical_pair(5, 2) == (2, 5)
        assert canonical_pair(2, 5) == (2, 5)


class TestCityDistanceGraph:
    """Tests for the in-memory travel-time graph."""

    def test_lookup_is_direction_agnostic(self):
        graph = CityDistanceGraph()
        graph.add_edge(1, 2, Decimal("5.00"))

        assert graph.get_travel_time(1, 2) == 5.0
        assert graph.get_travel_time(2, 1) == 5.0
        assert graph.has_edge(2, 1)
        assert (2, 1) in graph
        assert len(graph) == 1

    def test_missing_edge_returns_none(self):
        graph = CityDistanceGraph({(1, 2): 5})
        assert graph.get_travel_time(1, 3) is None

    def test_same_city_is_zero(self):
        assert CityDistanceGraph().get_travel_time(4, 4) == 0.0

    def test_self_pair_rejected(self):
        with pytest.raises(ValidationError):
            CityDistanceGraph().add_edge(3, 3, 1)

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CityDistanceGraph().add_edge(1, 2, -1)
        assert exc_info.value.field == "travel_time_hours"

    def test_reverse_duplicate_rejected(self):
        graph = CityDistanceGraph()
        graph.add_edge(1, 2, 5)

        with pytest.raises(ConflictError):
            graph.add_edge(2, 1, 6)

        assert graph.get_travel_time(1, 2) == 5.0

    def test_zero_hours_allowed(self):
        graph = CityDistanceGraph()
        graph.add_edge(1, 2, 0)
        assert graph.get_travel_time(1, 2) == 0.0

    def test_set_edge_creates_then_updates(self):
        graph = CityDistanceGraph()

        assert graph.set_edge(1, 2, 5) is True
        assert graph.set_edge(2, 1, 7) is False
        assert graph.get_travel_time(1, 2) == 7.0
        assert len(graph) == 1

    def test_remove_edge(self):
        graph = CityDistanceGraph({(1, 2): 5})

        assert graph.remove_edge(2, 1) is True
        assert graph.remove_edge(2, 1) is False
        # Pair can be recreated once removed
        graph.add_edge(1, 2, 4)
        assert graph.get_travel_time(1, 2) == 4.0

    def test_missing_pairs(self):
        graph = CityDistanceGraph({(1, 2): 5})

        assert graph.missing_pairs([1, 2, 3]) == [(1, 3), (2, 3)]

    def test_missing_pairs_ignores_duplicate_ids(self):
        assert CityDistanceGraph().missing_pairs([1, 1, 2]) == [(1, 2)]

    def test_matrix_is_symmetric(self):
        graph = CityDistanceGraph({(1, 2): 5, (2, 3): 2.5})

        matrix = graph.matrix([1, 2, 3])

        assert matrix == [
            [0.0, 5.0, None],
            [5.0, 0.0, 2.5],
            [None, 2.5, 0.0],
        ]

    def test_load_from_database(self, test_db_session, riyadh_jeddah):
        riyadh, jeddah = riyadh_jeddah

        graph = CityDistanceGraph.load(test_db_session)

        assert graph.get_travel_time(jeddah.id, riyadh.id) == 5.0

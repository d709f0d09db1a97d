"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions
- FastAPI test client
- Sample data factories (cities, distances, resources, events)
"""

import os
import pytest
from datetime import date, time
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['BCAST_DB_URL'] = 'sqlite:///:memory:'
os.environ['BCAST_CREATE_TABLES'] = 'false'

from backend.src.models import Base, City, CityDistance, Event, Observer, Sng, Generator
from backend.src.services.resource_lock import ResourceLockArena


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    from sqlalchemy import event

    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    # This must be set for each connection
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')
        dbapi_con.isolation_level = None

    def _begin(conn):
        conn.exec_driver_sql('BEGIN')

    event.listen(engine, 'connect', _fk_pragma_on_connect)
    event.listen(engine, 'begin', _begin)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Utility Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def lock_arena():
    """A fresh scheduling lock arena, isolated from the process singleton."""
    return ResourceLockArena()


@pytest.fixture(scope='function')
def mock_notifier(mocker):
    """Event change notifier that records calls instead of broadcasting."""
    notifier = mocker.Mock()
    notifier.notify.return_value = True
    return notifier


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_city(test_db_session):
    """Factory for creating cities."""
    def _create(name='Riyadh', country='Saudi Arabia', is_active=True):
        city = City(name=name, country=country, is_active=is_active)
        test_db_session.add(city)
        test_db_session.commit()
        test_db_session.refresh(city)
        return city
    return _create


@pytest.fixture
def sample_distance(test_db_session):
    """Factory for creating distance edges, stored with the lower city id first."""
    def _create(city_a, city_b, hours=5):
        low, high = sorted([city_a.id, city_b.id])
        distance = CityDistance(
            from_city_id=low,
            to_city_id=high,
            travel_time_hours=Decimal(str(hours)),
        )
        test_db_session.add(distance)
        test_db_session.commit()
        test_db_session.refresh(distance)
        return distance
    return _create


@pytest.fixture
def sample_resource(test_db_session):
    """Factory for creating observers, SNGs and generators."""
    models = {'observer': Observer, 'sng': Sng, 'generator': Generator}

    def _create(kind='sng', code='SNG-1', name=None):
        resource = models[kind](code=code, name=name)
        test_db_session.add(resource)
        test_db_session.commit()
        test_db_session.refresh(resource)
        return resource
    return _create


@pytest.fixture
def sample_event(test_db_session):
    """Factory for creating events with direct resource assignments."""
    def _create(
        title='Morning Match',
        city=None,
        event_date=date(2024, 1, 10),
        event_time=time(10, 0),
        status='scheduled',
        observers=None,
        sngs=None,
        generators=None,
    ):
        event = Event(
            title=title,
            city_id=city.id if city else None,
            event_date=event_date,
            event_time=event_time,
            status=status,
        )
        event.observers = list(observers or [])
        event.sngs = list(sngs or [])
        event.generators = list(generators or [])
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event
    return _create


@pytest.fixture
def riyadh_jeddah(sample_city, sample_distance):
    """Riyadh and Jeddah with a 5 hour travel time."""
    riyadh = sample_city('Riyadh')
    jeddah = sample_city('Jeddah')
    sample_distance(riyadh, jeddah, 5)
    return riyadh, jeddah


# ============================================================================
# FastAPI Test Client Fixture
# ============================================================================

@pytest.fixture
def test_client(test_db_session):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app

    # Override dependencies
    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    from backend.src.db.database import get_db

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()

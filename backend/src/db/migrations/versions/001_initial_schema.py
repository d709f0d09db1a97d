"""Initial scheduling schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2024-01-01

Creates the scheduling tables:
- cities and city_distances (travel-time graph, one row per unordered pair)
- venues, event_types
- observers, sngs, generators (resource catalogs)
- events and the event_observers / event_sngs / event_generators
  association tables
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _json_type():
    return sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _create_resource_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='available'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(f'ix_{name}_code', name, ['code'], unique=True)


def _create_association_table(name: str, resource_table: str, resource_column: str) -> None:
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column(resource_column, sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint([resource_column], [f'{resource_table}.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', resource_column, name=f'uq_{name}_pair'),
    )
    op.create_index(f'ix_{name}_event_id', name, ['event_id'])
    op.create_index(f'ix_{name}_{resource_column}', name, [resource_column])


def upgrade() -> None:
    """Create all scheduling tables."""

    # Cities
    op.create_table(
        'cities',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('latitude', sa.Numeric(precision=10, scale=7), nullable=True),
        sa.Column('longitude', sa.Numeric(precision=10, scale=7), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cities_name', 'cities', ['name'], unique=True)
    op.create_index('ix_cities_is_active', 'cities', ['is_active'])

    # Travel-time edges, stored with from_city_id < to_city_id
    op.create_table(
        'city_distances',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('from_city_id', sa.Integer(), nullable=False),
        sa.Column('to_city_id', sa.Integer(), nullable=False),
        sa.Column('travel_time_hours', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['from_city_id'], ['cities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['to_city_id'], ['cities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('from_city_id', 'to_city_id', name='uq_city_distance_pair'),
        sa.CheckConstraint('from_city_id < to_city_id', name='ck_city_distance_ordered'),
        sa.CheckConstraint('travel_time_hours >= 0', name='ck_city_distance_non_negative'),
    )
    op.create_index('ix_city_distances_from_city_id', 'city_distances', ['from_city_id'])
    op.create_index('ix_city_distances_to_city_id', 'city_distances', ['to_city_id'])

    # Venues
    op.create_table(
        'venues',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('city_id', sa.Integer(), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['city_id'], ['cities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'city_id', name='uq_venue_name_city'),
    )
    op.create_index('ix_venues_city_id', 'venues', ['city_id'])

    # Event types
    op.create_table(
        'event_types',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_event_types_name', 'event_types', ['name'], unique=True)

    # Resource catalogs
    for table in ('observers', 'sngs', 'generators'):
        _create_resource_table(table)

    # Events
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('event_time', sa.Time(), nullable=False, server_default='00:00:00'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='scheduled'),
        sa.Column('event_type_id', sa.Integer(), nullable=True),
        sa.Column('city_id', sa.Integer(), nullable=True),
        sa.Column('venue_id', sa.Integer(), nullable=True),
        sa.Column('teams', _json_type(), nullable=True),
        sa.Column('metadata', _json_type(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_type_id'], ['event_types.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['city_id'], ['cities.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_event_date', 'events', ['event_date'])
    op.create_index('ix_events_date_time', 'events', ['event_date', 'event_time'])
    op.create_index('ix_events_status', 'events', ['status'])
    op.create_index('ix_events_event_type_id', 'events', ['event_type_id'])
    op.create_index('ix_events_city_id', 'events', ['city_id'])
    op.create_index('ix_events_venue_id', 'events', ['venue_id'])

    # Resource assignments
    _create_association_table('event_observers', 'observers', 'observer_id')
    _create_association_table('event_sngs', 'sngs', 'sng_id')
    _create_association_table('event_generators', 'generators', 'generator_id')


def downgrade() -> None:
    """Drop all scheduling tables."""
    for table in ('event_generators', 'event_sngs', 'event_observers'):
        op.drop_table(table)
    op.drop_table('events')
    for table in ('generators', 'sngs', 'observers'):
        op.drop_table(table)
    op.drop_table('event_types')
    op.drop_table('venues')
    op.drop_table('city_distances')
    op.drop_table('cities')

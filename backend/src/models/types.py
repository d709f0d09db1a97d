"""
Column types shared by the scheduling models.

Events carry free-form ``teams`` and ``metadata`` payloads; PostgreSQL stores
them as JSONB while the SQLite test database falls back to plain JSON.
"""

from sqlalchemy import TypeDecorator, JSON
from sqlalchemy.dialects.postgresql import JSONB


class JSONBType(TypeDecorator):
    """JSON column that is JSONB on PostgreSQL and JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

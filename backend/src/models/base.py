"""Declarative base and shared column types for all models"""

from datetime import datetime, timezone

from sqlalchemy import TypeDecorator, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base


class PortableJSONB(TypeDecorator):
    """JSON type that uses JSONB on PostgreSQL and plain JSON elsewhere.

    Order metadata, addresses and payment details are stored as documents;
    SQLite falls back to JSON so the test suite runs without PostgreSQL.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


def utcnow() -> datetime:
    """Timezone-aware current time used for created_at/updated_at defaults."""
    return datetime.now(timezone.utc)


Base = declarative_base()

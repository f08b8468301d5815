"""
Timezone-aware timestamp columns.

Timestamps are stored in UTC. PostgreSQL keeps the offset (``timestamptz``);
SQLite drops it, so naive values read back from it are tagged as UTC.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def timestamp_column(nullable: bool = False) -> Column:
    return Column(UTCDateTime(timezone=True), nullable=nullable)

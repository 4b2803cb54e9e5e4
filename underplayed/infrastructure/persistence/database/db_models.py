"""SQLAlchemy database models for the Underplayed status store.

SQLAlchemy 2.0 declarative models with typed ``Mapped`` columns. The store
holds opaque string values; expiry is tracked per row in epoch milliseconds.
"""

from sqlalchemy import BigInteger, MetaData, String, Text
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from underplayed.domain.entities import now_ms

# Define naming convention for constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_label)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

# Create metadata with naming convention
metadata = MetaData(naming_convention=convention)


class UnderplayedDBBase(AsyncAttrs, DeclarativeBase):
    """Base class for all database models."""

    metadata = metadata


class DBKeyValueEntry(UnderplayedDBBase):
    """One key of the status store, replaced wholesale on every write."""

    __tablename__ = "key_value_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at_ms: Mapped[int | None] = mapped_column(
        BigInteger, default=None, index=True
    )
    updated_at_ms: Mapped[int] = mapped_column(
        BigInteger, default=now_ms, onupdate=now_ms, nullable=False
    )

    def is_expired(self, at_ms: int) -> bool:
        return self.expires_at_ms is not None and self.expires_at_ms <= at_ms

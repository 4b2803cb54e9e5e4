"""Key-value store implementations for job status snapshots.

Both stores treat an expired key as absent. Expiry is lazy: an expired entry
is removed when it is next read, or in bulk by ``purge_expired``.
"""

from collections.abc import Callable

from attrs import define, field
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from underplayed.config import get_logger
from underplayed.domain.entities import now_ms
from underplayed.infrastructure.persistence.database import (
    DBKeyValueEntry,
    session_scope,
)

logger = get_logger(__name__).bind(service="database")

Clock = Callable[[], int]


def _expiry(clock: Clock, ttl_seconds: int | None) -> int | None:
    if ttl_seconds is None:
        return None
    return clock() + ttl_seconds * 1000


@define(slots=True)
class SQLAlchemyKeyValueStore:
    """Durable store backed by a single SQLAlchemy table."""

    session_factory: async_sessionmaker[AsyncSession]
    clock: Clock = field(default=now_ms, repr=False)

    async def get(self, key: str) -> str | None:
        async with session_scope(self.session_factory) as session:
            entry = await session.get(DBKeyValueEntry, key)
            if entry is None:
                return None
            if entry.is_expired(self.clock()):
                await session.delete(entry)
                return None
            return entry.value

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        async with session_scope(self.session_factory) as session:
            await session.merge(
                DBKeyValueEntry(
                    key=key,
                    value=value,
                    expires_at_ms=_expiry(self.clock, ttl_seconds),
                    updated_at_ms=self.clock(),
                )
            )

    async def delete(self, key: str) -> None:
        async with session_scope(self.session_factory) as session:
            await session.execute(delete(DBKeyValueEntry).where(DBKeyValueEntry.key == key))

    async def purge_expired(self) -> int:
        """Delete every expired entry and return how many were removed."""
        async with session_scope(self.session_factory) as session:
            expired_keys = (
                await session.scalars(
                    select(DBKeyValueEntry.key).where(
                        DBKeyValueEntry.expires_at_ms.is_not(None),
                        DBKeyValueEntry.expires_at_ms <= self.clock(),
                    )
                )
            ).all()
            if expired_keys:
                await session.execute(
                    delete(DBKeyValueEntry).where(DBKeyValueEntry.key.in_(expired_keys))
                )

        if expired_keys:
            logger.debug(f"Purged {len(expired_keys)} expired status entries")
        return len(expired_keys)


@define(slots=True)
class InMemoryKeyValueStore:
    """Process-local store; everything is lost when the process exits."""

    clock: Clock = field(default=now_ms, repr=False)
    _entries: dict[str, tuple[str, int | None]] = field(factory=dict, init=False)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at_ms = entry
        if expires_at_ms is not None and expires_at_ms <= self.clock():
            del self._entries[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        self._entries[key] = (value, _expiry(self.clock, ttl_seconds))

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def purge_expired(self) -> int:
        """Delete every expired entry and return how many were removed."""
        now = self.clock()
        expired = [
            key
            for key, (_, expires_at_ms) in self._entries.items()
            if expires_at_ms is not None and expires_at_ms <= now
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

"""Status snapshot persistence on top of a key-value store.

Each job owns exactly one key, ``<prefix><process_id>``. Terminal snapshots
are written with the retention TTL so finished jobs eventually disappear;
in-flight snapshots never expire on their own because the next transition
replaces them.
"""

import json

from attrs import define

from underplayed.config import get_logger
from underplayed.domain.entities import JobSnapshot
from underplayed.domain.repositories import KeyValueStoreProtocol

logger = get_logger(__name__)


@define(slots=True)
class JobStatusRepository:
    """Reads and writes whole job snapshots keyed by process id."""

    store: KeyValueStoreProtocol
    key_prefix: str = "playlist_status_"
    retention_seconds: int = 3600

    def key_for(self, process_id: str) -> str:
        return f"{self.key_prefix}{process_id}"

    async def save(self, snapshot: JobSnapshot) -> None:
        """Replace the stored snapshot for ``snapshot.process_id``."""
        ttl = self.retention_seconds if snapshot.is_terminal else None
        await self.store.put(
            self.key_for(snapshot.process_id),
            json.dumps(snapshot.to_dict()),
            ttl_seconds=ttl,
        )

    async def get(self, process_id: str) -> JobSnapshot | None:
        """Return the latest snapshot, or None if unknown, expired or unreadable."""
        raw = await self.store.get(self.key_for(process_id))
        if raw is None:
            return None

        try:
            return JobSnapshot.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unreadable status record for process {process_id}: {e}")
            return None

    async def delete(self, process_id: str) -> None:
        await self.store.delete(self.key_for(process_id))

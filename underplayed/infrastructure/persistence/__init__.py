"""Status store persistence."""

from .key_value_store import InMemoryKeyValueStore, SQLAlchemyKeyValueStore

__all__ = ["InMemoryKeyValueStore", "SQLAlchemyKeyValueStore"]

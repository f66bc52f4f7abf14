"""Correlation stores — event ID → open notification metadata."""

from zbxrelay.store.base import CorrelationStore
from zbxrelay.store.exceptions import StoreError, StoreUnavailableError
from zbxrelay.store.factory import create_store
from zbxrelay.store.memory import MemoryStore
from zbxrelay.store.redis_store import RedisStore

__all__ = [
    "CorrelationStore",
    "MemoryStore",
    "RedisStore",
    "StoreError",
    "StoreUnavailableError",
    "create_store",
]

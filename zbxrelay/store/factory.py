"""Select the correlation store backend from configuration."""

from __future__ import annotations

import structlog

from zbxrelay.core.config import RedisConfig
from zbxrelay.store.base import CorrelationStore
from zbxrelay.store.memory import MemoryStore
from zbxrelay.store.redis_store import RedisStore

logger = structlog.get_logger(__name__)


def create_store(config: RedisConfig) -> CorrelationStore:
    """Return a RedisStore when ``config.addr`` is set, else a MemoryStore."""
    if config.enabled:
        logger.info("store_selected", backend="redis", addr=config.addr, db=config.db)
        return RedisStore.from_config(config)

    logger.info("store_selected", backend="memory")
    return MemoryStore()

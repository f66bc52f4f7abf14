"""Redis-backed correlation store.

Entries are stored as JSON, one key per open event, with no expiry. Every
call is bounded by an operation timeout; on timeout or any Redis error a
read behaves as "not found" and a write is logged and dropped, so an
outage degrades to duplicate notifications instead of failed requests.
"""

from __future__ import annotations

import asyncio

import structlog
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from zbxrelay.core.config import RedisConfig, split_addr
from zbxrelay.core.types import CorrelationEntry
from zbxrelay.store.exceptions import StoreUnavailableError

logger = structlog.get_logger(__name__)

DEFAULT_OP_TIMEOUT_SECS = 5.0


class RedisStore:
    """Correlation store on a Redis-compatible server."""

    def __init__(
        self,
        client: Redis,
        op_timeout_secs: float = DEFAULT_OP_TIMEOUT_SECS,
        key_prefix: str = "",
    ) -> None:
        self._client = client
        self._op_timeout = op_timeout_secs
        self._key_prefix = key_prefix

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisStore:
        host, port = split_addr(config.addr, default_host="localhost")
        client = Redis(
            host=host,
            port=port,
            password=config.password.get_secret_value() or None,
            db=config.db,
            decode_responses=True,
            socket_connect_timeout=config.op_timeout_secs,
            socket_keepalive=True,
        )
        return cls(
            client,
            op_timeout_secs=config.op_timeout_secs,
            key_prefix=config.key_prefix,
        )

    def _key(self, event_id: str) -> str:
        return f"{self._key_prefix}{event_id}"

    async def ping(self) -> None:
        """Check connectivity. Unlike the other operations this one raises.

        Raises:
            StoreUnavailableError: The server is unreachable or timed out.
        """
        try:
            await asyncio.wait_for(self._client.ping(), timeout=self._op_timeout)
        except (TimeoutError, RedisError) as exc:
            raise StoreUnavailableError(f"redis ping failed: {exc!r}") from exc

    async def set(self, event_id: str, entry: CorrelationEntry) -> None:
        data = entry.model_dump_json(by_alias=True)
        try:
            await asyncio.wait_for(
                self._client.set(self._key(event_id), data),
                timeout=self._op_timeout,
            )
        except (TimeoutError, RedisError):
            logger.error("redis_set_failed", event_id=event_id, exc_info=True)

    async def get(self, event_id: str) -> CorrelationEntry | None:
        try:
            data = await asyncio.wait_for(
                self._client.get(self._key(event_id)),
                timeout=self._op_timeout,
            )
        except (TimeoutError, RedisError):
            logger.error("redis_get_failed", event_id=event_id, exc_info=True)
            return None

        if data is None:
            return None

        try:
            return CorrelationEntry.model_validate_json(data)
        except ValidationError:
            logger.error("redis_entry_decode_failed", event_id=event_id, exc_info=True)
            return None

    async def delete(self, event_id: str) -> None:
        try:
            await asyncio.wait_for(
                self._client.delete(self._key(event_id)),
                timeout=self._op_timeout,
            )
        except (TimeoutError, RedisError):
            logger.error("redis_delete_failed", event_id=event_id, exc_info=True)

    async def close(self) -> None:
        await self._client.aclose()

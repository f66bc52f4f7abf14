"""Convenience factory for wiring the relay stack."""

from __future__ import annotations

import structlog
from aiohttp import web

from zbxrelay.core.config import Settings
from zbxrelay.relay.correlator import AlertCorrelator
from zbxrelay.relay.server import create_app
from zbxrelay.relay.transport import MessageTransport, TelegramTransport
from zbxrelay.store.base import CorrelationStore
from zbxrelay.store.factory import create_store
from zbxrelay.store.redis_store import RedisStore

logger = structlog.get_logger(__name__)


def create_relay_app(
    settings: Settings,
    transport: MessageTransport | None = None,
    store: CorrelationStore | None = None,
) -> web.Application:
    """Build transport + store + correlator and return the web app.

    Components not passed in are built from *settings*. The transport and
    store are closed when the app shuts down.
    """
    if transport is None:
        transport = TelegramTransport(settings.telegram)
    if store is None:
        store = create_store(settings.redis)

    correlator = AlertCorrelator(transport=transport, store=store)
    app = create_app(
        correlator,
        secret=settings.server.secret.get_secret_value(),
        path=settings.server.path,
    )

    async def _close_components(_: web.Application) -> None:
        try:
            await transport.close()
        except Exception:
            logger.exception("transport_close_error")
        try:
            await store.close()
        except Exception:
            logger.exception("store_close_error")

    app.on_cleanup.append(_close_components)
    return app


async def check_dependencies(
    transport: MessageTransport,
    store: CorrelationStore,
) -> None:
    """Fail fast on a bad bot token or an unreachable Redis server.

    Raises:
        TransportError: ``getMe`` failed.
        StoreUnavailableError: Redis did not answer the ping.
    """
    if isinstance(transport, TelegramTransport):
        await transport.verify()
    if isinstance(store, RedisStore):
        await store.ping()
        logger.info("redis_store_connected")

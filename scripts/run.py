#!/usr/bin/env python3
"""Relay entrypoint — wires transport, store and HTTP server and serves alerts.

Usage::

    # Run with default config (config/settings.yaml + environment)
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config /etc/zbxrelay/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog
from aiohttp import web

from zbxrelay.core.config import load_settings
from zbxrelay.core.exceptions import ConfigError
from zbxrelay.core.logging import setup_logging
from zbxrelay.relay.exceptions import TransportError
from zbxrelay.relay.factory import check_dependencies, create_relay_app
from zbxrelay.relay.transport import TelegramTransport
from zbxrelay.store.exceptions import StoreUnavailableError
from zbxrelay.store.factory import create_store

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the relay and serve until interrupted."""
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 1
    setup_logging(level=args.log_level)

    # ── Dependencies ─────────────────────────────────────────────
    transport = TelegramTransport(settings.telegram)
    store = create_store(settings.redis)
    try:
        await check_dependencies(transport, store)
    except (TransportError, StoreUnavailableError):
        logger.exception("startup_check_failed")
        await transport.close()
        await store.close()
        return 1

    # ── HTTP server ──────────────────────────────────────────────
    app = create_relay_app(settings, transport=transport, store=store)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.server.host, settings.server.port)
    try:
        await site.start()
    except OSError:
        logger.exception("listen_failed", addr=settings.server.addr)
        # Runs the app's cleanup hooks, which close the transport and store.
        await runner.cleanup()
        return 1

    logger.info(
        "relay_listening",
        addr=settings.server.addr,
        path=settings.server.path,
        store="redis" if settings.redis.enabled else "memory",
        auth=bool(settings.server.secret.get_secret_value()),
    )

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("relay_shutting_down")
    await runner.cleanup()
    logger.info("relay_stopped")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Relay Zabbix alerts to Telegram, editing messages on resolution.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: $CONFIG_FILE or config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()

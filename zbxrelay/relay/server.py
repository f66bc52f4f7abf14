"""HTTP endpoint receiving Zabbix webhook alerts.

Exposes a single route (``POST /zabbix/alert`` by default):

- ``200`` empty body when the alert was forwarded
- ``400`` malformed JSON body or missing ``event_id``
- ``401`` shared secret configured but missing or wrong
- ``405`` any method other than POST
- ``500`` the Telegram send/edit failed
"""

from __future__ import annotations

import hmac

import structlog
from aiohttp import web
from pydantic import ValidationError

from zbxrelay.core.logging import alert_context
from zbxrelay.core.types import ZabbixAlert
from zbxrelay.relay.correlator import AlertCorrelator
from zbxrelay.relay.exceptions import TransportError

logger = structlog.get_logger(__name__)

DEFAULT_PATH = "/zabbix/alert"

CORRELATOR_KEY: web.AppKey[AlertCorrelator] = web.AppKey("correlator", AlertCorrelator)
SECRET_KEY: web.AppKey[str] = web.AppKey("secret", str)


def secret_matches(provided: str, expected: str) -> bool:
    """Exact match, compared in constant time."""
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def handle_alert(request: web.Request) -> web.Response:
    if request.method != "POST":
        return web.Response(status=405, text="method not allowed", headers={"Allow": "POST"})

    body = await request.read()
    try:
        alert = ZabbixAlert.model_validate_json(body)
    except ValidationError:
        logger.warning("alert_rejected", reason="invalid_json")
        return web.Response(status=400, text="invalid JSON body")

    if not alert.event_id:
        logger.warning("alert_rejected", reason="missing_event_id")
        return web.Response(status=400, text="event_id is required")

    secret = request.app[SECRET_KEY]
    if secret and not secret_matches(alert.secret, secret):
        logger.warning("alert_rejected", reason="unauthorized", event_id=alert.event_id)
        return web.Response(status=401, text="unauthorized")

    correlator = request.app[CORRELATOR_KEY]
    with alert_context(alert):
        try:
            await correlator.process(alert)
        except TransportError:
            return web.Response(status=500, text="failed to deliver Telegram message")

    return web.Response(status=200)


def create_app(
    correlator: AlertCorrelator,
    secret: str = "",
    path: str = DEFAULT_PATH,
) -> web.Application:
    """Build the aiohttp application serving the alert endpoint.

    Args:
        correlator: Handles validated alerts.
        secret: Shared secret every request body must carry; empty disables the check.
        path: Route of the endpoint.
    """
    app = web.Application()
    app[CORRELATOR_KEY] = correlator
    app[SECRET_KEY] = secret
    app.router.add_route("*", path, handle_alert)
    return app

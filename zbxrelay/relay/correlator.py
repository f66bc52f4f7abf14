"""Alert correlator — decides between sending a new message and editing one.

Per event ID the lifecycle is::

    no open event --PROBLEM--> open event --RESOLVED--> no open event

A repeated PROBLEM for an open event overwrites its entry (last one wins).
A RESOLVED with no open event is sent as a new message so it is never
dropped. Any other status is informational and never correlated.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import StrEnum

import structlog

from zbxrelay.core.types import CorrelationEntry, MessageHandle, ZabbixAlert
from zbxrelay.relay.exceptions import TransportError
from zbxrelay.relay.formatters import format_message, format_timestamp
from zbxrelay.relay.transport import MessageTransport
from zbxrelay.store.base import CorrelationStore

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


class Outcome(StrEnum):
    """What the correlator did with an alert."""

    PROBLEM_SENT = "PROBLEM_SENT"
    RESOLVED_EDITED = "RESOLVED_EDITED"
    RESOLVED_SENT = "RESOLVED_SENT"
    INFO_SENT = "INFO_SENT"


class AlertCorrelator:
    """Routes validated alerts to the transport and keeps the store in step.

    The store is only mutated after the transport call succeeds: a failed
    send creates no entry and a failed edit keeps the entry, so the
    upstream can safely retry the same payload.
    """

    def __init__(
        self,
        transport: MessageTransport,
        store: CorrelationStore,
        clock: Clock = local_now,
    ) -> None:
        self._transport = transport
        self._store = store
        self._clock = clock

    async def process(self, alert: ZabbixAlert) -> Outcome:
        """Forward *alert*. Raises TransportError when sending/editing fails."""
        if alert.is_problem:
            return await self._on_problem(alert)
        if alert.is_resolved:
            return await self._on_resolved(alert)
        return await self._on_info(alert)

    # ── State transitions ───────────────────────────────────────

    async def _on_problem(self, alert: ZabbixAlert) -> Outcome:
        now = self._clock()
        message_id = await self._send(alert, format_message(alert, now))
        await self._store.set(
            alert.event_id,
            CorrelationEntry(
                message_id=message_id,
                start_time=format_timestamp(now),
                message=alert.message,
                severity=alert.severity,
            ),
        )
        logger.info("problem_alert_sent", message_id=message_id)
        return Outcome.PROBLEM_SENT

    async def _on_resolved(self, alert: ZabbixAlert) -> Outcome:
        entry = await self._store.get(alert.event_id)
        if entry is None:
            message_id = await self._send(alert, format_message(alert, self._clock()))
            logger.info("resolved_alert_sent_untracked", message_id=message_id)
            return Outcome.RESOLVED_SENT

        if not alert.severity and entry.severity:
            alert = alert.model_copy(update={"severity": entry.severity})
        text = format_message(alert, self._clock(), entry.start_time, entry.message)

        try:
            await self._transport.edit_message(entry.message_id, text)
        except TransportError:
            logger.error("telegram_edit_failed", message_id=entry.message_id, exc_info=True)
            raise

        await self._store.delete(alert.event_id)
        logger.info("resolved_alert_edited", message_id=entry.message_id)
        return Outcome.RESOLVED_EDITED

    async def _on_info(self, alert: ZabbixAlert) -> Outcome:
        message_id = await self._send(alert, format_message(alert, self._clock()))
        logger.info("info_alert_sent", message_id=message_id)
        return Outcome.INFO_SENT

    async def _send(self, alert: ZabbixAlert, text: str) -> MessageHandle:
        try:
            return await self._transport.send_message(text)
        except TransportError:
            logger.error("telegram_send_failed", status=alert.status, exc_info=True)
            raise

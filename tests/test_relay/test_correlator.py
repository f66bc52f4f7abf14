"""Tests for the alert correlator — send/edit decisions and store bookkeeping."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from zbxrelay.core.types import CorrelationEntry, ZabbixAlert
from zbxrelay.relay.correlator import AlertCorrelator, Outcome
from zbxrelay.relay.exceptions import TransportError
from zbxrelay.store.memory import MemoryStore

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# ── Helpers ─────────────────────────────────────────────────────


class FakeTransport:
    """Records sends and edits; handles count up from 1."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.edits: list[tuple[int, str]] = []
        self.send_error: Exception | None = None
        self.edit_error: Exception | None = None

    async def send_message(self, text: str) -> int:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(text)
        return len(self.sent)

    async def edit_message(self, message_id: int, text: str) -> None:
        if self.edit_error is not None:
            raise self.edit_error
        self.edits.append((message_id, text))

    async def close(self) -> None:
        pass


class StepClock:
    """Returns T0, T0+1m, T0+2m, ... on successive calls."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> datetime:
        moment = T0 + timedelta(minutes=self.calls)
        self.calls += 1
        return moment


def _alert(**kw: object) -> ZabbixAlert:
    defaults: dict[str, object] = {
        "trigger_id": "10",
        "trigger_name": "Disk Full",
        "status": "PROBLEM",
        "severity": "High",
        "host": "server1",
        "event_id": "100",
        "message": "/var is 98% full",
    }
    defaults.update(kw)
    return ZabbixAlert(**defaults)  # type: ignore[arg-type]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def correlator(transport: FakeTransport, store: MemoryStore) -> AlertCorrelator:
    return AlertCorrelator(transport=transport, store=store, clock=StepClock())


# ── PROBLEM ─────────────────────────────────────────────────────


class TestProblem:
    async def test_sends_and_stores_entry(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        outcome = await correlator.process(_alert())

        assert outcome is Outcome.PROBLEM_SENT
        assert len(transport.sent) == 1
        assert transport.edits == []
        entry = await store.get("100")
        assert entry == CorrelationEntry(
            message_id=1,
            start_time="2024-03-01 12:00:00 UTC",
            message="/var is 98% full",
            severity="High",
        )

    async def test_send_failure_leaves_store_untouched(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        transport.send_error = TransportError("boom")
        with pytest.raises(TransportError):
            await correlator.process(_alert())
        assert await store.get("100") is None

    async def test_duplicate_problem_overwrites(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        await correlator.process(_alert(message="first"))
        await correlator.process(_alert(message="second"))

        assert len(transport.sent) == 2
        entry = await store.get("100")
        assert entry is not None
        assert entry.message_id == 2
        assert entry.message == "second"
        assert len(store) == 1


# ── RESOLVED ────────────────────────────────────────────────────


class TestResolved:
    async def test_edits_previous_message_and_deletes_entry(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        await correlator.process(_alert())
        outcome = await correlator.process(_alert(status="RESOLVED"))

        assert outcome is Outcome.RESOLVED_EDITED
        assert len(transport.sent) == 1
        assert len(transport.edits) == 1
        message_id, text = transport.edits[0]
        assert message_id == 1
        assert "✅ <b>RESOLVED</b>" in text
        assert "Start Time:</b> 2024-03-01 12:00:00 UTC" in text
        assert "End Time:</b> 2024-03-01 12:01:00 UTC" in text
        assert await store.get("100") is None

    async def test_falls_back_to_stored_severity_and_details(
        self, correlator: AlertCorrelator, transport: FakeTransport
    ) -> None:
        await correlator.process(_alert(severity="Disaster", message="db down"))
        await correlator.process(_alert(status="RESOLVED", severity="", message=""))

        text = transport.edits[0][1]
        assert "💀 <b>Severity:</b> Disaster" in text
        assert "Details:</b> db down" in text

    async def test_own_severity_kept(
        self, correlator: AlertCorrelator, transport: FakeTransport
    ) -> None:
        await correlator.process(_alert(severity="Disaster"))
        await correlator.process(_alert(status="RESOLVED", severity="Warning"))

        text = transport.edits[0][1]
        assert "Severity:</b> Warning" in text
        assert "Disaster" not in text

    async def test_untracked_resolution_sends_new_message(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        outcome = await correlator.process(_alert(status="RESOLVED"))

        assert outcome is Outcome.RESOLVED_SENT
        assert len(transport.sent) == 1
        assert transport.edits == []
        assert "Start Time" not in transport.sent[0]
        assert "End Time" in transport.sent[0]
        assert await store.get("100") is None

    async def test_resolving_twice_degrades_to_send(
        self, correlator: AlertCorrelator, transport: FakeTransport
    ) -> None:
        await correlator.process(_alert())
        first = await correlator.process(_alert(status="RESOLVED"))
        second = await correlator.process(_alert(status="RESOLVED"))

        assert first is Outcome.RESOLVED_EDITED
        assert second is Outcome.RESOLVED_SENT
        assert len(transport.edits) == 1
        assert len(transport.sent) == 2

    async def test_edit_failure_keeps_entry_for_retry(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        await correlator.process(_alert())
        transport.edit_error = TransportError("boom")

        with pytest.raises(TransportError):
            await correlator.process(_alert(status="RESOLVED"))
        assert await store.get("100") is not None

        transport.edit_error = None
        outcome = await correlator.process(_alert(status="RESOLVED"))
        assert outcome is Outcome.RESOLVED_EDITED
        assert transport.edits[0][0] == 1
        assert await store.get("100") is None

    async def test_untracked_send_failure_raises(
        self, correlator: AlertCorrelator, transport: FakeTransport
    ) -> None:
        transport.send_error = TransportError("boom")
        with pytest.raises(TransportError):
            await correlator.process(_alert(status="RESOLVED"))

    async def test_events_are_independent(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        await correlator.process(_alert(event_id="A"))
        await correlator.process(_alert(event_id="B"))
        await correlator.process(_alert(event_id="A", status="RESOLVED"))

        assert transport.edits[0][0] == 1
        assert await store.get("A") is None
        entry_b = await store.get("B")
        assert entry_b is not None
        assert entry_b.message_id == 2


# ── Informational ───────────────────────────────────────────────


class TestInformational:
    @pytest.mark.parametrize("status", ["UPDATE", "", "problem", "OK"])
    async def test_other_status_sent_not_stored(
        self,
        status: str,
        correlator: AlertCorrelator,
        transport: FakeTransport,
        store: MemoryStore,
    ) -> None:
        outcome = await correlator.process(_alert(status=status))

        assert outcome is Outcome.INFO_SENT
        assert len(transport.sent) == 1
        assert transport.sent[0].startswith("ℹ️")
        assert len(store) == 0

    async def test_info_does_not_consume_open_event(
        self, correlator: AlertCorrelator, transport: FakeTransport, store: MemoryStore
    ) -> None:
        await correlator.process(_alert())
        await correlator.process(_alert(status="UPDATE"))

        assert transport.edits == []
        assert await store.get("100") is not None


# ── Store soft-fail ─────────────────────────────────────────────


class TestStoreUnavailable:
    async def test_store_miss_degrades_to_send(self, transport: FakeTransport) -> None:
        store = AsyncMock()
        store.get = AsyncMock(return_value=None)
        correlator = AlertCorrelator(transport=transport, store=store, clock=StepClock())

        await correlator.process(_alert())
        outcome = await correlator.process(_alert(status="RESOLVED"))

        assert outcome is Outcome.RESOLVED_SENT
        assert len(transport.sent) == 2
        store.set.assert_awaited_once()
        store.delete.assert_not_awaited()

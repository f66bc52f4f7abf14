"""Correlation store capability shared by every backend."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from zbxrelay.core.types import CorrelationEntry


@runtime_checkable
class CorrelationStore(Protocol):
    """Maps an event ID to the entry for its open (unresolved) notification.

    Implementations never raise backend errors from ``set``/``get``/``delete``:
    a failed read is reported as a missing entry and a failed write is
    logged and dropped.
    """

    async def set(self, event_id: str, entry: CorrelationEntry) -> None:
        """Store *entry* under *event_id*, replacing any previous entry."""

    async def get(self, event_id: str) -> CorrelationEntry | None:
        """Return the entry for *event_id*, or None if absent."""

    async def delete(self, event_id: str) -> None:
        """Remove the entry for *event_id*. Missing keys are ignored."""

    async def close(self) -> None:
        """Release backend resources."""

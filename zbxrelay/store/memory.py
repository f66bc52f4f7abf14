"""In-process correlation store. Entries do not survive a restart."""

from __future__ import annotations

import threading

from zbxrelay.core.types import CorrelationEntry


class MemoryStore:
    """Dict-backed store guarded by a lock.

    Each instance owns its own mapping, so tests and multiple relays in
    one process never share state. ``get`` returns a copy; callers cannot
    mutate the stored entry.

    Reads and writes share one exclusive ``threading.Lock`` rather than a
    reader/writer lock. Every critical section is a single dict access with
    no ``await`` inside it, so readers never wait behind a slow writer.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CorrelationEntry] = {}
        self._lock = threading.Lock()

    async def set(self, event_id: str, entry: CorrelationEntry) -> None:
        with self._lock:
            self._entries[event_id] = entry.model_copy()

    async def get(self, event_id: str) -> CorrelationEntry | None:
        with self._lock:
            entry = self._entries.get(event_id)
        return entry.model_copy() if entry is not None else None

    async def delete(self, event_id: str) -> None:
        with self._lock:
            self._entries.pop(event_id, None)

    async def close(self) -> None:
        pass

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, event_id: object) -> bool:
        with self._lock:
            return event_id in self._entries

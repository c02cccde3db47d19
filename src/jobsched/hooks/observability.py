from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any

DEFAULT_MAX_EVENTS = 1000


@dataclass(frozen=True)
class HookEvent:
    at: datetime
    kind: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


class EventLogger:
    """Keeps the most recent request events; older ones fall off once max_events is reached."""

    def __init__(self, *, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        self.max_events = max(1, max_events)
        self._events: deque[HookEvent] = deque(maxlen=self.max_events)
        self._lock = Lock()

    def record(self, kind: str, name: str, payload: dict[str, Any] | None = None) -> None:
        event = HookEvent(
            at=datetime.now(timezone.utc),
            kind=kind,
            name=name,
            payload=payload or {},
        )
        with self._lock:
            self._events.append(event)

    def on_request(self, method: str, path: str, phase: str, **details: Any) -> None:
        self.record("http_request", phase, {"method": method, "path": path, **details})

    def list_events(self) -> list[HookEvent]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

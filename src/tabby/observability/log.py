"""Event log — bounded store of export events with per-export summaries.

Exports append their events as they run; a caller that remembers
:func:`~tabby.observability.events.now_ns` before starting an export can
later ask for just that export's modules, documents and failures through
``since_ns``.

Thread Safety:
    All methods are protected by a ``threading.Lock``.  Safe for
    concurrent exports sharing one log.

"""

import threading
from collections import Counter, deque
from collections.abc import Sequence
from typing import Any

from tabby.observability.events import (
    ExportEvent,
    ManifestRendered,
    ModuleMaterialized,
    StageFailed,
)


class EventLog:
    """Bounded event store with query support.

    Events are stored in a ring buffer (deque with maxlen).  When the
    buffer is full, the oldest events are discarded automatically.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[ExportEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: ExportEvent) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def append_many(self, events: Sequence[ExportEvent]) -> None:
        """Record multiple events at once."""
        with self._lock:
            self._events.extend(events)

    def _snapshot(self, since_ns: int) -> list[ExportEvent]:
        with self._lock:
            return [e for e in self._events if e.timestamp_ns >= since_ns]

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        module_id: str | None = None,
        template: str | None = None,
        stage: str | None = None,
        limit: int = 100,
    ) -> list[ExportEvent]:
        """Query events with optional filters.

        The ``module_id``, ``template`` and ``stage`` filters match exactly
        and only select :class:`ModuleMaterialized`, :class:`ManifestRendered`
        and :class:`StageFailed` events respectively.

        Args:
            event_type: Only return events of this type.
            since_ns: Only return events at or after this timestamp.
            module_id: Output-root relative path of a module.
            template: Template path of a rendered document.
            stage: Pipeline stage of a failure.
            limit: Maximum number of events to return.

        Returns:
            List of matching events, most recent first.

        """
        results: list[ExportEvent] = []
        for event in reversed(self._snapshot(since_ns)):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if module_id is not None and not (
                isinstance(event, ModuleMaterialized) and event.module_id == module_id
            ):
                continue
            if template is not None and not (
                isinstance(event, ManifestRendered) and event.template == template
            ):
                continue
            if stage is not None and not (isinstance(event, StageFailed) and event.stage == stage):
                continue
            results.append(event)
        return results

    def failures(self, *, since_ns: int = 0) -> list[StageFailed]:
        """Failures recorded since ``since_ns``, oldest first."""
        return [e for e in self._snapshot(since_ns) if isinstance(e, StageFailed)]

    def recent(self, n: int = 20) -> list[ExportEvent]:
        """Return the N most recent events."""
        with self._lock:
            items = list(self._events)
        return items[-n:]

    def clear(self) -> int:
        """Clear all events and return the count that was cleared."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self, *, since_ns: int = 0) -> dict[str, Any]:
        """Summarize the events recorded since ``since_ns``.

        Returns:
            ``total`` and ``max_events``; ``by_type`` (event counts per
            class name); ``by_action`` (materialized modules per action);
            ``bytes_written`` by materialized modules; ``documents``
            rendered; ``failures`` recorded.

        """
        events = self._snapshot(since_ns)
        by_type = Counter(type(e).__name__ for e in events)
        modules = [e for e in events if isinstance(e, ModuleMaterialized)]

        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": dict(by_type),
            "by_action": dict(Counter(e.action for e in modules)),
            "bytes_written": sum(e.size_bytes for e in modules),
            "documents": by_type[ManifestRendered.__name__],
            "failures": by_type[StageFailed.__name__],
        }

"""Export observability — what each stage of an export did.

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from several exports at once.

Quick Start:
    >>> from tabby.observability import ExportCollector, EventLog
    >>> log = EventLog()
    >>> collector = ExportCollector(log)
    >>> # Pass collector to Exporter(collector=...)
    >>> # then inspect log.query(event_type=ModuleMaterialized)

"""

from tabby.observability.collector import ExportCollector
from tabby.observability.events import (
    ExportEvent,
    ManifestRendered,
    ModuleMaterialized,
    ModulePlanned,
    StageFailed,
    now_ns,
)
from tabby.observability.log import EventLog

__all__ = [
    "EventLog",
    "ExportCollector",
    "ExportEvent",
    "ManifestRendered",
    "ModuleMaterialized",
    "ModulePlanned",
    "StageFailed",
    "now_ns",
]

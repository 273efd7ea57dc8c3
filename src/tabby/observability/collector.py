"""Export collector — records pipeline events into an EventLog.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent exports sharing one collector.

"""

from __future__ import annotations

from typing import Literal

from tabby.observability.events import (
    ManifestRendered,
    ModuleMaterialized,
    ModulePlanned,
    StageFailed,
    now_ns,
)
from tabby.observability.log import EventLog


class ExportCollector:
    """Records planning, materialization, manifest and failure events.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record_plan(self, target: str, *, module_count: int, scene_count: int) -> None:
        """Record the module list produced by the planner."""
        self._log.append(
            ModulePlanned(
                target=target,
                module_count=module_count,
                scene_count=scene_count,
                timestamp_ns=now_ns(),
            )
        )

    def record_module(
        self,
        module_id: str,
        action: Literal["generated", "reused", "copied", "merged", "written"],
        *,
        size_bytes: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a module being materialized."""
        self._log.append(
            ModuleMaterialized(
                module_id=module_id,
                action=action,
                size_bytes=size_bytes,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_manifest(self, target: str, template: str, path: str, *, markers: int = 0) -> None:
        """Record a rendered target document."""
        self._log.append(
            ManifestRendered(
                target=target,
                template=template,
                path=path,
                markers=markers,
                timestamp_ns=now_ns(),
            )
        )

    def record_failure(self, stage: str, kind: str, artifact: str, message: str) -> None:
        """Record the failure that stopped an export."""
        self._log.append(
            StageFailed(
                stage=stage,
                kind=kind,
                artifact=artifact,
                message=message,
                timestamp_ns=now_ns(),
            )
        )

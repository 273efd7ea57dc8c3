"""Export event model.

Every stage of an export records what it did as a frozen dataclass with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# Planning events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ModulePlanned:
    """The module set builder produced a module list.

    Attributes:
        target: Target kind of the export.
        module_count: Number of modules planned.
        scene_count: Number of scene-code modules among them.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    target: str
    module_count: int
    scene_count: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Materialization events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ModuleMaterialized:
    """A module was written (or deliberately reused) under the output root.

    Attributes:
        module_id: Output-root relative path of the module.
        action: What happened to the module.
        size_bytes: Bytes written (0 when reused).
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    module_id: str
    action: Literal["generated", "reused", "copied", "merged", "written"]
    size_bytes: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Manifest events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ManifestRendered:
    """A target template was rendered and written.

    Attributes:
        target: Target kind.
        template: Template name (e.g. ``config.xml``).
        path: Absolute path of the written document.
        markers: Number of markers substituted.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    target: str
    template: str
    path: str
    markers: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class StageFailed:
    """An export stopped at a failing stage.

    Attributes:
        stage: Failing stage name.
        kind: Error kind (``io``, ``template``, ...).
        artifact: Offending module, template or path.
        message: Human-readable message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: str
    kind: str
    artifact: str
    message: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

ExportEvent: TypeAlias = ModulePlanned | ModuleMaterialized | ManifestRendered | StageFailed


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()

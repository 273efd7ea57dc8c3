"""Project watcher — re-export the preview whenever the project changes.

Monitors the project file, its external source files and its resources.
Each debounced batch of changes triggers one preview export that hands the
previous result's fingerprints to the next request, so only scenes whose
inputs changed are regenerated.
"""

from __future__ import annotations

import queue
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

from watchfiles import Change

from tabby._errors import ConfigurationError
from tabby.project import load_project

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from tabby.bundle.fingerprints import FingerprintStore
    from tabby.export.exporter import Exporter
    from tabby.export.result import ExportResult
    from tabby.project import Project

ChangeCategory: TypeAlias = Literal["project", "source", "resource"]


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: What the file is to the project.

    """

    path: Path
    kind: Literal["created", "modified", "deleted"]
    category: ChangeCategory


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def _resolve(project: Project, file: str) -> Path:
    path = Path(file)
    if not path.is_absolute():
        path = project.base_dir / path
    return path.resolve()


def categorize_change(path: Path, project: Project) -> ChangeCategory | None:
    """Determine what a changed file is to ``project``.

    Returns None if the project does not reference the file.

    """
    path = path.resolve()
    if project.project_file is not None and path == project.project_file.resolve():
        return "project"
    if any(path == _resolve(project, f.path) for f in project.source_files):
        return "source"
    if any(r.file and path == _resolve(project, r.file) for r in project.resources):
        return "resource"
    return None


class ProjectWatcher:
    """Watches a project's files in a background thread.

    Uses watchfiles for efficient filesystem monitoring.  Every debounced
    batch of relevant changes is queued as a list of :class:`ChangeEvent`.

    Args:
        project: The loaded project; its ``project_file`` must be set.

    """

    def __init__(self, project: Project) -> None:
        if project.project_file is None:
            msg = "Cannot watch a project that was not loaded from a file"
            raise ConfigurationError(msg, stage="watch", artifact=project.name)
        self._project = project
        self._queue: queue.Queue[list[ChangeEvent]] = queue.Queue()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def track(self, project: Project) -> None:
        """Categorize future changes against a reloaded ``project``."""
        self._project = project

    def start(self) -> None:
        """Start watching for file changes in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="tabby-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def batches(self, stop_event: threading.Event | None = None) -> Iterator[list[ChangeEvent]]:
        """Yield change batches until the watcher or ``stop_event`` stops."""
        while self.is_running or not self._queue.empty():
            if stop_event is not None and stop_event.is_set():
                return
            try:
                yield self._queue.get(timeout=0.5)
            except queue.Empty:
                continue

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and queue categorized batches."""
        from watchfiles import watch

        watch_paths = {self._project.base_dir}
        for file in [f.path for f in self._project.source_files] + [r.file for r in self._project.resources]:
            if file:
                watch_paths.add(_resolve(self._project, file).parent)

        for raw_changes in watch(
            *sorted(watch_paths),
            stop_event=self._stop_event,
            debounce=300,
            step=100,
        ):
            batch: list[ChangeEvent] = []
            for change_type, path_str in raw_changes:
                path = Path(path_str)
                category = categorize_change(path, self._project)
                if category is None:
                    continue
                kind = _CHANGE_KIND_MAP.get(change_type, "modified")
                batch.append(ChangeEvent(path=path, kind=kind, category=category))
            if batch:
                self._queue.put(batch)


def watch_preview(
    exporter: Exporter,
    project_path: Path,
    output_root: Path,
    *,
    prior_fingerprints: FingerprintStore | None = None,
    on_result: Callable[[ExportResult], None] | None = None,
    stop_event: threading.Event | None = None,
    watcher: ProjectWatcher | None = None,
    **options: object,
) -> ExportResult:
    """Export a preview, then re-export after every batch of changes.

    Blocks until ``stop_event`` is set (or the watcher stops) and returns
    the last result.  A project file that fails to load is reported and
    the previous project is kept.

    Args:
        exporter: Exporter to run.
        project_path: Project file.
        output_root: Preview output directory.
        prior_fingerprints: Fingerprints of an earlier export, if any.
        on_result: Called with every export result.
        stop_event: Stops the loop when set.
        watcher: Watcher to read changes from (built from the project by
            default).
        **options: Extra ``export_for_preview`` keyword arguments.

    Raises:
        ConfigurationError: If ``options`` asks for a data-only export.

    """
    if options.get("data_only"):
        msg = "Data-only exports cannot be watched"
        raise ConfigurationError(msg, stage="validate", artifact="data_only")

    project = load_project(project_path)
    result = exporter.export_for_preview(
        project, output_root, prior_fingerprints=prior_fingerprints, **options,
    )
    if on_result is not None:
        on_result(result)

    watcher = watcher if watcher is not None else ProjectWatcher(project)
    watcher.start()
    try:
        for batch in watcher.batches(stop_event):
            if any(event.category == "project" for event in batch):
                try:
                    project = load_project(project_path)
                except ConfigurationError as exc:
                    print(f"  Project reload failed: {exc}", file=sys.stderr)
                    continue
                watcher.track(project)

            result = exporter.export_for_preview(
                project, output_root, prior_fingerprints=result.fingerprints, **options,
            )
            if on_result is not None:
                on_result(result)
    finally:
        watcher.stop()

    return result

"""Tabby application — load configuration and project, run an export.

The three public functions (preview, package, data) are the entry points
behind the CLI; they print a short summary to stderr and return the result.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from tabby.bundle.fingerprints import FingerprintStore
from tabby.collaborators import LocalFileSystem
from tabby.config_loader import load_config
from tabby.export import DebuggerEndpoint, Exporter, ExportResult, export_project_data
from tabby.observability.collector import ExportCollector
from tabby.observability.events import now_ns
from tabby.observability.log import EventLog
from tabby.project import load_project

if TYPE_CHECKING:
    from tabby._types import TargetKind
    from tabby.bundle.records import ExportedFile


def _absolute(path: str | Path) -> Path:
    return Path(path).expanduser().resolve()


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def preview(
    project: str | Path,
    output: str | Path | None = None,
    *,
    root: str | Path = ".",
    debugger: str | None = None,
    scene: str = "",
    external_layout: str = "",
    data_only: bool = False,
    hashes: str | Path | None = None,
    force: bool = False,
    watch: bool = False,
    **kwargs: object,
) -> ExportResult:
    """Export a browser preview.

    Args:
        project: Path to the project file.
        output: Output directory (defaults to the configured output).
        root: Workspace root holding ``tabby.yaml``, ``runtime/`` and
            ``templates/``.
        debugger: ``HOST:PORT`` of the debugger server.
        scene: Scene to start on.
        external_layout: External layout to inject at startup.
        data_only: Only rewrite the project data module.
        hashes: JSON file the fingerprint store is loaded from and saved to.
        force: Regenerate every scene module.
        watch: Keep running and re-export on every change.
        **kwargs: Override TabbyConfig fields.

    """
    config = load_config(Path(root), **kwargs)
    output_root = _absolute(output) if output is not None else config.output_path
    project_path = _absolute(project)
    hashes_path = _absolute(hashes) if hashes is not None else None
    prior = FingerprintStore.load(hashes_path) if hashes_path is not None else FingerprintStore()

    event_log = EventLog()
    exporter = Exporter(config, collector=ExportCollector(event_log))
    options = {
        "debugger": DebuggerEndpoint.parse(debugger) if debugger else None,
        "initial_scene": scene,
        "initial_external_layout": external_layout,
        "data_only": data_only,
        "force_regenerate": force,
    }

    mark = now_ns()

    def _report(result: ExportResult) -> None:
        nonlocal mark
        _print_export_summary(result, event_log, since_ns=mark)
        mark = now_ns()
        if hashes_path is not None and result.ok:
            result.fingerprints.save(hashes_path)

    if watch:
        from tabby.watch import watch_preview

        return watch_preview(
            exporter,
            project_path,
            output_root,
            prior_fingerprints=prior,
            on_result=_report,
            **options,
        )

    result = exporter.export_for_preview(
        load_project(project_path),
        output_root,
        prior_fingerprints=prior,
        **options,
    )
    _report(result)
    return result


def package(
    target: TargetKind,
    project: str | Path,
    output: str | Path | None = None,
    *,
    root: str | Path = ".",
    minify: bool = False,
    **kwargs: object,
) -> ExportResult:
    """Export a project for a packaged target (cordova, electron, facebook).

    Args:
        target: Target kind.
        project: Path to the project file.
        output: Output directory (defaults to the configured output).
        root: Workspace root.
        minify: Merge and minify the bundle.
        **kwargs: Override TabbyConfig fields.

    """
    config = load_config(Path(root), **kwargs)
    output_root = _absolute(output) if output is not None else config.output_path

    event_log = EventLog()
    result = Exporter(config, collector=ExportCollector(event_log)).export_for_packaged_target(
        target,
        load_project(_absolute(project)),
        output_root,
        minify=minify,
    )
    _print_export_summary(result, event_log)
    return result


def data(project: str | Path, destination: str | Path) -> ExportedFile:
    """Write only the project data module of ``project`` to ``destination``."""
    record = export_project_data(
        LocalFileSystem(),
        load_project(_absolute(project)),
        _absolute(destination),
        {"isPreview": False},
    )
    print(f"  Wrote {record.output_path} ({record.size_bytes} bytes)", file=sys.stderr)
    return record


def _print_export_summary(result: ExportResult, log: EventLog, *, since_ns: int = 0) -> None:
    """Print export completion summary to stderr.

    Counts and sizes come from the events ``log`` recorded since ``since_ns``.
    """
    if not result.ok:
        failures = log.failures(since_ns=since_ns)
        if failures:
            failure = failures[-1]
            where = f" ({failure.artifact})" if failure.artifact else ""
            print(f"\n  Export failed: [{failure.stage}] {failure.message}{where}", file=sys.stderr)
        else:
            print(f"\n  Export failed: {result.error}", file=sys.stderr)
        return

    stats = log.stats(since_ns=since_ns)
    module_count = len(result.modules)
    lines = [
        "",
        "─" * 41,
        f"  Exported {module_count} module{'s' if module_count != 1 else ''} for {result.target}",
    ]
    if result.regenerated:
        lines.append(f"  Generated {len(result.regenerated)}: {', '.join(result.regenerated)}")
    if result.reused:
        lines.append(f"  Reused {len(result.reused)}: {', '.join(result.reused)}")
    if stats["by_action"]:
        counts = ", ".join(f"{n} {action}" for action, n in sorted(stats["by_action"].items()))
        lines.append(f"  Modules: {counts}")
    lines.append(f"  Wrote {stats['bytes_written'] / 1024:.1f} KB, {stats['documents']} document(s)")
    lines.append(f"  Entry point: {result.entry_point}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)

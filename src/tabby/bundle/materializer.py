"""Module materializer — turn planned modules into files under the output root.

For every planned module:

- ``scene-code``: ask the code generator for the module text, unless the
  incremental tracker says the copy already on disk is current.
- ``external-source``: copy the project's source file.
- runtime roles: copy the engine file verbatim from the runtime directory
  (plus its ``.map`` source map when one exists).  Absolute paths (files
  contributed from outside the runtime directory) are copied flat and
  their module path rewritten to the bare file name.

When a minifier is given, contiguous mergeable runs are concatenated and
minified into one ``bundle{n}.min.js`` instead of being written one by one.

The returned module list holds output-root relative POSIX paths only.
Nothing is rolled back on failure: exports are idempotent and simply
overwrite on the next run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from tabby._errors import ExportIOError, GenerationError, TabbyError, ToolError
from tabby.bundle.fingerprints import FingerprintStore, scene_fingerprint, should_regenerate
from tabby.bundle.merge import collapse_runs, find_runs
from tabby.bundle.module import Module, ModuleList
from tabby.bundle.records import ExportedFile

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tabby._types import ProgressSink
    from tabby.collaborators import CodeGenerator, FileSystem, Minifier
    from tabby.observability.collector import ExportCollector
    from tabby.project import Project


@dataclass(frozen=True, slots=True)
class MaterializedModules:
    """Outcome of materializing a module list.

    Attributes:
        modules: Final module list, paths relative to the output root.
        files: Every file written.
        fingerprints: Fresh fingerprints of the scene modules.
        regenerated: Module ids the code generator produced.
        reused: Module ids kept from a previous export.

    """

    modules: ModuleList
    files: tuple[ExportedFile, ...] = ()
    fingerprints: dict[str, str] = field(default_factory=dict)
    regenerated: tuple[str, ...] = ()
    reused: tuple[str, ...] = ()


def output_name(module: Module) -> str:
    """Output-root relative path a planned module is written to.

    Absolute paths (files from outside the runtime directory) are flattened
    to their bare file name.
    """
    path = module.path.replace("\\", "/")
    if Path(module.path).is_absolute():
        return PurePosixPath(path).name
    return path


class Materializer:
    """Writes planned modules under an output root.

    Args:
        fs: File system to read sources from and write modules to.
        generator: Code generator for scene modules.
        runtime_root: Directory holding the engine runtime files.
        collector: Optional event collector.
        progress: Optional sink called with ``(done, total)``.

    """

    def __init__(
        self,
        fs: FileSystem,
        generator: CodeGenerator,
        runtime_root: Path,
        *,
        collector: ExportCollector | None = None,
        progress: ProgressSink | None = None,
    ) -> None:
        self._fs = fs
        self._generator = generator
        self._runtime_root = runtime_root
        self._collector = collector
        self._progress = progress

    def materialize(
        self,
        modules: ModuleList,
        output_root: Path,
        project: Project,
        *,
        prior: Mapping[str, str] | None = None,
        force: bool = False,
        minifier: Minifier | None = None,
    ) -> MaterializedModules:
        """Write every module of ``modules`` under ``output_root``.

        Args:
            modules: Planned module list.
            output_root: Directory the bundle is written to.
            project: Project the scene modules are generated from.
            prior: Fingerprints recorded by the previous export.
            force: Regenerate every scene module regardless of fingerprints.
            minifier: Merge contiguous mergeable runs through this tool.

        Raises:
            ExportIOError: A source file is missing or a write failed.
            GenerationError: The code generator failed for a module.
            ToolError: The minifier failed.

        """
        prior = prior if prior is not None else FingerprintStore()
        relative = ModuleList(m.with_path(output_name(m)) for m in modules)
        if len(relative) != len(modules):
            # Two absolute includes share a file name: flattening would
            # silently drop one of them.
            msg = "Two modules would be written to the same output path"
            raise ExportIOError(msg, path=output_root)

        runs = find_runs(relative) if minifier is not None else []
        final = collapse_runs(relative, runs) if runs else relative
        run_starts = {start: stop for start, stop in runs}

        files: list[ExportedFile] = []
        fingerprints: dict[str, str] = {}
        regenerated: list[str] = []
        reused: list[str] = []
        total = len(modules)
        done = 0

        index = 0
        merged_ordinal = 0
        while index < total:
            if index in run_starts:
                stop = run_starts[index]
                merged = _merged_at(final, merged_ordinal)
                merged_ordinal += 1
                sources: list[bytes] = []
                for offset in range(index, stop):
                    data, fresh = self._module_bytes(modules[offset], project)
                    sources.append(data)
                    if fresh is not None:
                        fingerprints[relative[offset].path] = fresh
                        regenerated.append(relative[offset].path)
                files.append(self._write_merged(merged, sources, output_root, minifier))
                done += stop - index
                index = stop
                self._report(done, total)
                continue

            planned, target = modules[index], relative[index]
            if planned.role == "scene-code":
                record, fresh, was_reused = self._materialize_scene(
                    planned, target, output_root, project, prior, force,
                )
                fingerprints[target.path] = fresh
                (reused if was_reused else regenerated).append(target.path)
                if record is not None:
                    files.append(record)
            else:
                files.extend(self._copy_module(planned, target, output_root, project))

            done += 1
            index += 1
            self._report(done, total)

        return MaterializedModules(
            modules=final,
            files=tuple(files),
            fingerprints=fingerprints,
            regenerated=tuple(regenerated),
            reused=tuple(reused),
        )

    # ------------------------------------------------------------------
    # Per-role handling
    # ------------------------------------------------------------------

    def _materialize_scene(
        self,
        planned: Module,
        target: Module,
        output_root: Path,
        project: Project,
        prior: Mapping[str, str],
        force: bool,
    ) -> tuple[ExportedFile | None, str, bool]:
        assert planned.scene is not None
        fresh = scene_fingerprint(project, planned.scene)
        destination = output_root / target.path

        if not should_regenerate(target.path, fresh, prior, force=force) and self._fs.exists(destination):
            if self._collector is not None:
                self._collector.record_module(target.path, "reused")
            return None, fresh, True

        t0 = time.perf_counter()
        code = self._generate(planned, project)
        size = self._fs.write_text(destination, code)
        elapsed = (time.perf_counter() - t0) * 1000
        if self._collector is not None:
            self._collector.record_module(target.path, "generated", size_bytes=size, duration_ms=elapsed)
        record = ExportedFile(
            source_path=target.path,
            output_path=destination,
            source_type="module",
            size_bytes=size,
            duration_ms=elapsed,
        )
        return record, fresh, False

    def _copy_module(
        self,
        planned: Module,
        target: Module,
        output_root: Path,
        project: Project,
    ) -> list[ExportedFile]:
        t0 = time.perf_counter()
        source = self._source_path(planned, project)
        destination = output_root / target.path
        size = self._fs.copy(source, destination)
        elapsed = (time.perf_counter() - t0) * 1000
        if self._collector is not None:
            self._collector.record_module(target.path, "copied", size_bytes=size, duration_ms=elapsed)

        records = [ExportedFile(
            source_path=target.path,
            output_path=destination,
            source_type="module",
            size_bytes=size,
            duration_ms=elapsed,
        )]

        if planned.is_runtime:
            source_map = source.with_name(source.name + ".map")
            if self._fs.exists(source_map):
                map_destination = destination.with_name(destination.name + ".map")
                records.append(ExportedFile(
                    source_path=target.path + ".map",
                    output_path=map_destination,
                    source_type="source_map",
                    size_bytes=self._fs.copy(source_map, map_destination),
                    duration_ms=0.0,
                ))
        return records

    def _write_merged(
        self,
        merged: Module,
        sources: list[bytes],
        output_root: Path,
        minifier: Minifier | None,
    ) -> ExportedFile:
        assert minifier is not None
        t0 = time.perf_counter()
        try:
            data = minifier.merge(sources)
        except ToolError:
            raise
        except Exception as exc:
            msg = f"Minifier failed while producing {merged.path}: {exc}"
            raise ToolError(msg, tool=type(minifier).__name__) from exc
        destination = output_root / merged.path
        size = self._fs.write_bytes(destination, data)
        elapsed = (time.perf_counter() - t0) * 1000
        if self._collector is not None:
            self._collector.record_module(merged.path, "merged", size_bytes=size, duration_ms=elapsed)
        return ExportedFile(
            source_path=merged.path,
            output_path=destination,
            source_type="module",
            size_bytes=size,
            duration_ms=elapsed,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _module_bytes(self, planned: Module, project: Project) -> tuple[bytes, str | None]:
        """Bytes of a module about to be merged, plus its fingerprint if generated."""
        if planned.role == "scene-code":
            assert planned.scene is not None
            code = self._generate(planned, project)
            return code.encode("utf-8"), scene_fingerprint(project, planned.scene)
        return self._fs.read_bytes(self._source_path(planned, project)), None

    def _generate(self, planned: Module, project: Project) -> str:
        assert planned.scene is not None
        try:
            return self._generator.generate_module_code(project, planned.scene)
        except TabbyError:
            raise
        except Exception as exc:
            msg = f"Code generation failed for scene {planned.scene.name!r}: {exc}"
            raise GenerationError(msg, module_id=planned.path) from exc

    def _source_path(self, planned: Module, project: Project) -> Path:
        if planned.role == "external-source":
            assert planned.source is not None
            path = Path(planned.source.path)
            return path if path.is_absolute() else project.base_dir / path
        path = Path(planned.path)
        return path if path.is_absolute() else self._runtime_root / planned.path

    def _report(self, done: int, total: int) -> None:
        if self._progress is not None:
            self._progress(done, total)


def _merged_at(modules: ModuleList, ordinal: int) -> Module:
    """Return the ``ordinal``-th merged module of ``modules``."""
    merged = [m for m in modules if m.role == "merged"]
    return merged[ordinal]

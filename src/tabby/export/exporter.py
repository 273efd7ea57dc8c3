"""Export orchestrator — run the pipeline stages for one request.

Stage order depends on the target:

- preview: plan, resources, materialize (incremental), project data,
  ``index.html``.
- packaged (cordova, electron, facebook): plan, materialize (full, merged
  when minifying), resources, project data, ``index.html``, supporting
  documents.

Stages raise :class:`~tabby._errors.TabbyError`.  ``export_project`` catches
the first one, tags it with the stage it came from and returns it inside the
:class:`ExportResult`; files already written stay in place.  Any other
exception is a bug and propagates.
"""

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from tabby._errors import TabbyError
from tabby.bundle.fingerprints import FingerprintStore
from tabby.bundle.materializer import Materializer, output_name
from tabby.bundle.module import Module
from tabby.bundle.planner import PlanFlags, plan_modules
from tabby.bundle.records import ExportedFile
from tabby.bundle.resources import export_resources
from tabby.collaborators import CommandMinifier, ConcatMinifier, LocalFileSystem, SceneCodeGenerator
from tabby.export.request import DebuggerEndpoint, ExportRequest
from tabby.export.result import ExportFailure, ExportResult
from tabby.targets import ManifestGenerator, TemplateLocator, get_target

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from pathlib import Path

    from tabby._types import ProgressSink, TargetKind
    from tabby.bundle.module import ModuleList
    from tabby.collaborators import CodeGenerator, FileSystem, Minifier
    from tabby.config import TabbyConfig
    from tabby.observability.collector import ExportCollector
    from tabby.project import Project
    from tabby.targets import TargetSpec

PROJECT_DATA_FILE = "data.js"


def project_data_module() -> Module:
    """The module holding project data and runtime options; never merged."""
    return Module(path=PROJECT_DATA_FILE, role="project-data", mergeable=False)


def export_project_data(
    fs: FileSystem,
    project: Project,
    destination: Path,
    runtime_options: Mapping[str, Any],
) -> ExportedFile:
    """Write the project data module to ``destination``.

    The module assigns the serialized project to ``tabby.projectData`` and
    the options the runtime starts with to ``tabby.runtimeGameOptions``.
    """
    t0 = time.perf_counter()
    project_json = json.dumps(project.to_data(), ensure_ascii=False, separators=(",", ":"))
    options_json = json.dumps(dict(runtime_options), ensure_ascii=False, separators=(",", ":"))
    text = f"tabby.projectData = {project_json};\ntabby.runtimeGameOptions = {options_json};\n"
    size = fs.write_text(destination, text)
    return ExportedFile(
        source_path=PROJECT_DATA_FILE,
        output_path=destination,
        source_type="data",
        size_bytes=size,
        duration_ms=(time.perf_counter() - t0) * 1000,
    )


def _reserved_names(target: TargetSpec, modules: Iterable[Module]) -> frozenset[str]:
    """Output names in the bundle directory that resources may not take."""
    names = {output_name(module) for module in modules}
    names.update([f"{name}.map" for name in names])
    names.update((PROJECT_DATA_FILE, "index.html"))
    if not target.web_dir:
        names.update(document.output for document in target.documents)
    return frozenset(names)


@contextmanager
def _stage(name: str) -> Iterator[None]:
    """Tag tabby errors escaping the block with stage ``name``."""
    try:
        yield
    except TabbyError as exc:
        if exc.stage is None:
            exc.stage = name
        raise


class Exporter:
    """Exports projects for every target.

    Args:
        config: Frozen tabby configuration.
        fs: File system (defaults to the local disk).
        generator: Scene code generator.
        minifier: Minifier used when a request asks for minification
            (defaults to the configured command, or plain concatenation).
        progress: Optional sink called with ``(done, total)`` per module.
        collector: Optional event collector.

    """

    def __init__(
        self,
        config: TabbyConfig,
        fs: FileSystem | None = None,
        generator: CodeGenerator | None = None,
        minifier: Minifier | None = None,
        progress: ProgressSink | None = None,
        collector: ExportCollector | None = None,
    ) -> None:
        self._config = config
        self._fs = fs if fs is not None else LocalFileSystem()
        self._generator = generator if generator is not None else SceneCodeGenerator()
        self._minifier = minifier
        self._progress = progress
        self._collector = collector
        self._manifests = ManifestGenerator(
            self._fs,
            TemplateLocator.for_config(self._fs, config),
            collector=collector,
        )

    @property
    def config(self) -> TabbyConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def export_project(self, request: ExportRequest) -> ExportResult:
        """Run ``request``; failures are returned in the result, not raised."""
        t0 = time.perf_counter()
        try:
            with _stage("validate"):
                request.validate()
            if request.is_preview:
                return self._run_preview(request, t0)
            return self._run_packaged(request, t0)
        except TabbyError as exc:
            return self._failed(request, exc, t0)

    def export_for_preview(
        self,
        project: Project,
        output_root: Path,
        *,
        debugger: DebuggerEndpoint | None = None,
        initial_scene: str = "",
        initial_external_layout: str = "",
        data_only: bool = False,
        prior_fingerprints: FingerprintStore | None = None,
        force_regenerate: bool = False,
        additional_spec: str | None = None,
    ) -> ExportResult:
        """Export a hot-reloadable browser preview of ``project``."""
        return self.export_project(ExportRequest(
            target="preview",
            output_root=output_root,
            project=project,
            debugger=debugger,
            initial_scene=initial_scene,
            initial_external_layout=initial_external_layout,
            data_only=data_only,
            prior_fingerprints=prior_fingerprints if prior_fingerprints is not None else FingerprintStore(),
            force_regenerate=force_regenerate,
            additional_spec=additional_spec,
        ))

    def export_for_packaged_target(
        self,
        target: TargetKind,
        project: Project,
        output_root: Path,
        *,
        minify: bool = False,
        additional_spec: str | None = None,
    ) -> ExportResult:
        """Export ``project`` for a packaged deployment shell."""
        return self.export_project(ExportRequest(
            target=target,
            output_root=output_root,
            project=project,
            minify=minify,
            additional_spec=additional_spec,
        ))

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    def _run_preview(self, request: ExportRequest, t0: float) -> ExportResult:
        output_root = request.output_root
        project = request.project
        if request.initial_scene:
            project = project.with_first_scene(request.initial_scene)
        files: list[ExportedFile] = []

        with _stage("plan"):
            modules = self._plan(project, request, debugger_client=request.debugger is not None)

        with _stage("resources"):
            project, copied = export_resources(
                self._fs, project, output_root, reserved=_reserved_names(get_target("preview"), modules),
            )
            files.extend(copied)

        with _stage("materialize"):
            materialized = self._materializer().materialize(
                modules,
                output_root,
                project,
                prior=request.prior_fingerprints,
                force=request.force_regenerate,
            )
            files.extend(materialized.files)
        fingerprints = request.prior_fingerprints.with_updates(materialized.fingerprints)

        final = materialized.modules.copy()
        with _stage("data"):
            options = self._preview_options(request, final, fingerprints)
            files.append(self._write_data(project, output_root, options))
            final.append(project_data_module())

        with _stage("manifest"):
            index = self._manifests.write_index(
                get_target("preview"), final, output_root, request.additional_spec,
            )
            files.append(index)

        return ExportResult(
            output_root=output_root,
            target=request.target,
            modules=tuple(final),
            fingerprints=fingerprints,
            regenerated=materialized.regenerated,
            reused=materialized.reused,
            entry_point=index.output_path,
            files=tuple(files),
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

    def _run_packaged(self, request: ExportRequest, t0: float) -> ExportResult:
        target = get_target(request.target)
        output_root = request.output_root
        web_root = output_root / target.web_dir if target.web_dir else output_root
        project = request.project
        if request.initial_scene:
            project = project.with_first_scene(request.initial_scene)
        files: list[ExportedFile] = []

        with _stage("plan"):
            modules = self._plan(project, request, debugger_client=False)

        with _stage("materialize"):
            materialized = self._materializer().materialize(
                modules,
                web_root,
                project,
                force=True,
                minifier=self._resolve_minifier() if request.minify else None,
            )
            files.extend(materialized.files)

        with _stage("resources"):
            project, copied = export_resources(
                self._fs, project, web_root, reserved=_reserved_names(target, materialized.modules),
            )
            files.extend(copied)

        final = materialized.modules.copy()
        with _stage("data"):
            files.append(self._write_data(project, web_root, {"isPreview": False}))
            final.append(project_data_module())

        with _stage("manifest"):
            documents = self._manifests.generate(
                target, project, final, output_root, request.additional_spec,
            )
            files.extend(documents)

        return ExportResult(
            output_root=output_root,
            target=request.target,
            modules=tuple(final),
            fingerprints=request.prior_fingerprints.with_updates(materialized.fingerprints),
            regenerated=materialized.regenerated,
            reused=materialized.reused,
            entry_point=documents[0].output_path,
            files=tuple(files),
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _plan(self, project: Project, request: ExportRequest, *, debugger_client: bool) -> ModuleList:
        flags = PlanFlags(
            pixi=self._config.pixi,
            cocos=self._config.cocos,
            debugger_client=debugger_client,
            include_generated=not request.data_only,
        )
        modules = plan_modules(project, flags)
        if self._collector is not None:
            self._collector.record_plan(
                request.target, module_count=len(modules), scene_count=len(project.scenes),
            )
        return modules

    def _materializer(self) -> Materializer:
        return Materializer(
            self._fs,
            self._generator,
            self._config.runtime_path,
            collector=self._collector,
            progress=self._progress,
        )

    def _resolve_minifier(self) -> Minifier:
        if self._minifier is not None:
            return self._minifier
        if self._config.minifier:
            return CommandMinifier(self._config.minifier)
        return ConcatMinifier()

    def _preview_options(
        self,
        request: ExportRequest,
        modules: ModuleList,
        fingerprints: Mapping[str, str],
    ) -> dict[str, Any]:
        options: dict[str, Any] = {
            "isPreview": True,
            "projectDataOnlyExport": request.data_only,
        }
        if request.initial_external_layout:
            options["injectExternalLayout"] = request.initial_external_layout
        if request.debugger is not None:
            options["debuggerServerAddress"] = request.debugger.address
            options["debuggerServerPort"] = request.debugger.port

        script_files: list[dict[str, str]] = []
        for module in modules:
            entry = {"path": module.path}
            if module.path in fingerprints:
                entry["hash"] = fingerprints[module.path]
            script_files.append(entry)
        options["scriptFiles"] = script_files
        return options

    def _write_data(self, project: Project, web_root: Path, options: Mapping[str, Any]) -> ExportedFile:
        record = export_project_data(self._fs, project, web_root / PROJECT_DATA_FILE, options)
        if self._collector is not None:
            self._collector.record_module(
                PROJECT_DATA_FILE, "written", size_bytes=record.size_bytes, duration_ms=record.duration_ms,
            )
        return record

    def _failed(self, request: ExportRequest, exc: TabbyError, t0: float) -> ExportResult:
        failure = ExportFailure.from_error(exc)
        if self._collector is not None:
            self._collector.record_failure(failure.stage, failure.kind, failure.artifact, failure.message)
        return ExportResult(
            output_root=request.output_root,
            target=str(request.target),
            fingerprints=request.prior_fingerprints,
            duration_ms=(time.perf_counter() - t0) * 1000,
            error=failure,
            cause=exc,
        )

"""Module set builder — which modules a bundle loads, and in which order.

The plan is assembled from four sources, in load order:

1. The engine runtime catalog (core, third-party libraries, debugger
   client, renderer backends).
2. Runtime files contributed by the extensions the project uses.
3. One generated module per scene (``code{i}.js``), each preceded by the
   runtime files its events need.
4. One copied module per JavaScript external source file
   (``ext-code{i}.js``).

Every candidate carries a role tag and, for renderer-specific files, a
renderer family.  A single inclusion predicate then decides, once per
build, which candidates stay.  Module names are derived from ordinal
positions only, so two plans of the same project name their modules
identically and fingerprints can be matched across exports.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabby._errors import ConfigurationError
from tabby._types import RENDERER_FAMILIES
from tabby.bundle.module import Module, ModuleList

if TYPE_CHECKING:
    from tabby._types import ModuleRole, RendererFamily
    from tabby.project import Project


# ---------------------------------------------------------------------------
# Runtime catalog
# ---------------------------------------------------------------------------


def _core(path: str) -> Module:
    return Module(path=path, role="runtime-core")


def _lib(path: str, family: RendererFamily | None = None) -> Module:
    return Module(path=path, role="library", family=family)


def _renderer(path: str, family: RendererFamily) -> Module:
    return Module(path=path, role="renderer", family=family)


def _debugger(path: str) -> Module:
    return Module(path=path, role="debugger-client", mergeable=False)


RUNTIME_CATALOG: tuple[Module, ...] = (
    _lib("libs/jshashtable.js"),
    _core("tabby.js"),
    _lib("libs/hshg.js"),
    _lib("libs/rbush.js"),
    _core("inputmanager.js"),
    _core("jsonmanager.js"),
    _core("timemanager.js"),
    _core("runtimeobject.js"),
    _core("profiler.js"),
    _core("runtimescene.js"),
    _core("scenestack.js"),
    _core("polygon.js"),
    _core("force.js"),
    _core("layer.js"),
    _core("timer.js"),
    _core("runtimegame.js"),
    _core("variable.js"),
    _core("variablescontainer.js"),
    _core("oncetriggers.js"),
    _core("runtimebehavior.js"),
    _core("spriteruntimeobject.js"),
    _core("events-tools/commontools.js"),
    _core("events-tools/runtimescenetools.js"),
    _core("events-tools/inputtools.js"),
    _core("events-tools/objecttools.js"),
    _core("events-tools/cameratools.js"),
    _core("events-tools/soundtools.js"),
    _core("events-tools/storagetools.js"),
    _core("events-tools/stringtools.js"),
    _core("events-tools/windowtools.js"),
    _core("events-tools/networktools.js"),
    _debugger("websocket-debugger-client/hot-reloader.js"),
    _debugger("websocket-debugger-client/websocket-debugger-client.js"),
    _lib("pixi-renderers/pixi.js", "pixi"),
    _renderer("pixi-renderers/pixi-filters-tools.js", "pixi"),
    _renderer("pixi-renderers/runtimegame-pixi-renderer.js", "pixi"),
    _renderer("pixi-renderers/runtimescene-pixi-renderer.js", "pixi"),
    _renderer("pixi-renderers/layer-pixi-renderer.js", "pixi"),
    _renderer("pixi-renderers/pixi-image-manager.js", "pixi"),
    _renderer("pixi-renderers/spriteruntimeobject-pixi-renderer.js", "pixi"),
    _renderer("pixi-renderers/loadingscreen-pixi-renderer.js", "pixi"),
    _lib("howler-sound-manager/howler.min.js", "pixi"),
    _renderer("howler-sound-manager/howler-sound-manager.js", "pixi"),
    _lib("fontfaceobserver-font-manager/fontfaceobserver.js", "pixi"),
    _renderer("fontfaceobserver-font-manager/fontfaceobserver-font-manager.js", "pixi"),
    _lib("cocos-renderers/cocos2d-js.js", "cocos"),
    _renderer("cocos-renderers/runtimegame-cocos-renderer.js", "cocos"),
    _renderer("cocos-renderers/runtimescene-cocos-renderer.js", "cocos"),
    _renderer("cocos-renderers/layer-cocos-renderer.js", "cocos"),
    _renderer("cocos-renderers/cocos-image-manager.js", "cocos"),
    _renderer("cocos-renderers/spriteruntimeobject-cocos-renderer.js", "cocos"),
    _renderer("cocos-renderers/loadingscreen-cocos-renderer.js", "cocos"),
    _renderer("cocos-sound-manager/cocos-sound-manager.js", "cocos"),
    _renderer("cocos-font-manager/cocos-font-manager.js", "cocos"),
)

# Directory prefixes and filename fragments that tie a runtime file to a
# renderer family, whatever contributed it.
_FAMILY_MARKERS: dict[str, tuple[str, ...]] = {
    "pixi": (
        "pixi-renderers/",
        "howler-sound-manager/",
        "fontfaceobserver-font-manager/",
        "pixi-renderer",
    ),
    "cocos": (
        "cocos-renderers/",
        "cocos-sound-manager/",
        "cocos-font-manager/",
        "cocos-renderer",
    ),
}


def detect_family(path: str) -> RendererFamily | None:
    """Return the renderer family a runtime path belongs to, if any."""
    for family, markers in _FAMILY_MARKERS.items():
        if any(marker in path for marker in markers):
            return family  # type: ignore[return-value]
    return None


def runtime_module(path: str, role: ModuleRole = "extension-code") -> Module:
    """Build a module for a runtime file, tagging its renderer family."""
    return Module(path=path, role=role, family=detect_family(path))


def scene_module_name(index: int) -> str:
    return f"code{index}.js"


def external_module_name(index: int) -> str:
    return f"ext-code{index}.js"


# ---------------------------------------------------------------------------
# Inclusion
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PlanFlags:
    """Capability flags that select module families.

    Attributes:
        pixi: Include the Pixi renderer family.
        cocos: Include the Cocos renderer family.
        debugger_client: Include the debugger client (a debugger endpoint
            is configured).
        include_generated: Plan scene code and external source modules
            (off for data-only previews).

    """

    pixi: bool = True
    cocos: bool = False
    debugger_client: bool = False
    include_generated: bool = True

    def family_enabled(self, family: str) -> bool:
        return bool(getattr(self, family))

    @property
    def excluded_families(self) -> frozenset[str]:
        return frozenset(f for f in RENDERER_FAMILIES if not self.family_enabled(f))


def include_module(module: Module, flags: PlanFlags) -> bool:
    """Inclusion predicate, evaluated once per candidate module."""
    if module.role == "debugger-client":
        return flags.debugger_client
    if module.role in ("scene-code", "external-source"):
        return flags.include_generated
    if module.family is not None:
        return flags.family_enabled(module.family)
    return True


def exclude_families(modules: ModuleList, families: Iterable[str]) -> int:
    """Remove every module of the given renderer families.

    Matches on the family tag and, for untagged modules, on the path, so
    files that entered the list through any route are caught.  Running it
    twice is a no-op the second time.

    Returns:
        Number of modules removed.

    """
    excluded = frozenset(families)
    if not excluded:
        return 0
    return modules.remove_where(
        lambda m: (m.family or detect_family(m.path)) in excluded
    )


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def plan_modules(project: Project, flags: PlanFlags) -> ModuleList:
    """Compute the ordered module list for ``project``.

    Raises:
        ConfigurationError: If the project or flags cannot produce a
            runnable bundle.

    """
    _validate(project, flags)

    candidates = ModuleList(RUNTIME_CATALOG)

    for extension in project.extensions:
        for include in extension.includes:
            candidates.append(runtime_module(include))

    for index, scene in enumerate(project.scenes):
        for include in scene.includes:
            candidates.append(runtime_module(include))
        candidates.append(
            Module(path=scene_module_name(index), role="scene-code", scene=scene)
        )

    for index, source in enumerate(project.source_files):
        if source.language != "javascript":
            continue
        candidates.append(
            Module(path=external_module_name(index), role="external-source", source=source)
        )

    planned = ModuleList(m for m in candidates if include_module(m, flags))
    # Sweep again by path: includes may name renderer files untagged.
    exclude_families(planned, flags.excluded_families)
    return planned


def _validate(project: Project, flags: PlanFlags) -> None:
    if not project.scenes:
        msg = f"Project {project.name!r} has no scenes to export"
        raise ConfigurationError(msg, stage="plan", artifact=project.name)

    seen: set[str] = set()
    for index, scene in enumerate(project.scenes):
        if not scene.name.strip():
            msg = f"Scene #{index} has an empty name"
            raise ConfigurationError(msg, stage="plan", artifact=f"scene #{index}")
        if scene.name in seen:
            msg = f"Duplicate scene name {scene.name!r}"
            raise ConfigurationError(msg, stage="plan", artifact=scene.name)
        seen.add(scene.name)

    if not any(flags.family_enabled(f) for f in RENDERER_FAMILIES):
        msg = "No renderer family enabled: enable pixi or cocos"
        raise ConfigurationError(msg, stage="plan")

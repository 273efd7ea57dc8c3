"""Project model — the in-memory description of an interactive project.

The editor owns the real project model; tabby only needs the parts that
decide what goes into a bundle: scenes (with their generated-code inputs),
external layouts, external source files, resources, the extensions in use
and the metadata written into target manifests.

Projects are loaded from YAML or JSON files.  All model objects are frozen;
exporting a project never mutates it, the pipeline works on copies built
with :func:`dataclasses.replace`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from tabby._errors import ConfigurationError

_ORIENTATIONS = frozenset({"default", "landscape", "portrait"})


@dataclass(frozen=True, slots=True)
class Scene:
    """A scene (layout) of the project.

    Attributes:
        name: Unique scene name.
        events: Event-sheet code handed to the code generator.
        includes: Runtime files the scene's events need, loaded before
            the scene's generated module.
        data: Opaque scene data (objects, layers, instances) serialized
            into the project data module.

    """

    name: str
    events: str = ""
    includes: tuple[str, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ExternalLayout:
    """Instances that can be injected into a scene at startup."""

    name: str
    scene: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A hand-written source file shipped with the project.

    ``path`` is relative to the project file's directory unless absolute.
    Only ``javascript`` files are bundled; others keep their ordinal slot.
    """

    path: str
    language: str = "javascript"


@dataclass(frozen=True, slots=True)
class Resource:
    """An image, audio, font or data file referenced by the project."""

    name: str
    file: str
    kind: str = "image"


@dataclass(frozen=True, slots=True)
class Extension:
    """An extension used by the project.

    Attributes:
        name: Extension name.
        includes: Runtime files (relative to the runtime directory) the
            extension's objects, behaviors and effects need.
        cordova_plugins: Cordova plugin ids the extension depends on.

    """

    name: str
    includes: tuple[str, ...] = ()
    cordova_plugins: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Project:
    """An interactive project ready to be exported."""

    name: str
    scenes: tuple[Scene, ...]
    package_name: str = ""
    version: str = "1.0.0"
    author: str = ""
    orientation: str = "default"
    width: int = 800
    height: int = 600
    first_scene: str = ""
    external_layouts: tuple[ExternalLayout, ...] = ()
    source_files: tuple[SourceFile, ...] = ()
    resources: tuple[Resource, ...] = ()
    extensions: tuple[Extension, ...] = ()
    platform_assets: dict[str, dict[str, str]] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)
    project_file: Path | None = None

    @property
    def base_dir(self) -> Path:
        """Directory that relative resource and source paths resolve against."""
        if self.project_file is None:
            return Path.cwd()
        return self.project_file.parent

    def has_scene(self, name: str) -> bool:
        return any(scene.name == name for scene in self.scenes)

    def has_external_layout(self, name: str) -> bool:
        return any(layout.name == name for layout in self.external_layouts)

    def get_resource(self, name: str) -> Resource | None:
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None

    def platform_asset_file(self, platform: str, name: str) -> str:
        """Return the file of the resource used as a platform asset, or ``""``."""
        resource_name = self.platform_assets.get(platform, {}).get(name, "")
        resource = self.get_resource(resource_name) if resource_name else None
        return resource.file if resource is not None else ""

    def with_first_scene(self, name: str) -> Project:
        return replace(self, first_scene=name)

    def with_resources(self, resources: tuple[Resource, ...]) -> Project:
        return replace(self, resources=resources)

    def to_data(self) -> dict[str, Any]:
        """Serializable project data (configuration only, never code)."""
        return {
            "properties": {
                "name": self.name,
                "packageName": self.package_name,
                "version": self.version,
                "author": self.author,
                "orientation": self.orientation,
                "windowWidth": self.width,
                "windowHeight": self.height,
                **self.properties,
            },
            "firstLayout": self.first_scene,
            "layouts": [{"name": scene.name, **scene.data} for scene in self.scenes],
            "externalLayouts": [
                {"name": layout.name, "associatedLayout": layout.scene, **layout.data}
                for layout in self.external_layouts
            ],
            "resources": {
                "resources": [
                    {"name": r.name, "file": r.file, "kind": r.kind}
                    for r in self.resources
                ],
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, project_file: Path | None = None) -> Project:
        """Build a project from a loaded YAML/JSON mapping.

        Raises:
            ConfigurationError: If required fields are missing or malformed.

        """
        if not isinstance(data, dict):
            msg = "Project data must be a mapping"
            raise ConfigurationError(msg, stage="load", artifact=str(project_file or ""))

        name = str(data.get("name") or "").strip()
        if not name:
            msg = "Project has no name"
            raise ConfigurationError(msg, stage="load", artifact=str(project_file or ""))

        orientation = str(data.get("orientation", "default"))
        if orientation not in _ORIENTATIONS:
            msg = f"Unknown orientation {orientation!r} (expected one of {sorted(_ORIENTATIONS)})"
            raise ConfigurationError(msg, stage="load", artifact="orientation")

        try:
            return cls(
                name=name,
                package_name=str(data.get("package_name", "")),
                version=str(data.get("version", "1.0.0")),
                author=str(data.get("author", "")),
                orientation=orientation,
                width=int(data.get("width", 800)),
                height=int(data.get("height", 600)),
                first_scene=str(data.get("first_scene", "")),
                scenes=tuple(
                    Scene(
                        name=str(s["name"]),
                        events=str(s.get("events", "")),
                        includes=tuple(s.get("includes", ())),
                        data=dict(s.get("data", {})),
                    )
                    for s in data.get("scenes", ())
                ),
                external_layouts=tuple(
                    ExternalLayout(
                        name=str(e["name"]),
                        scene=str(e["scene"]),
                        data=dict(e.get("data", {})),
                    )
                    for e in data.get("external_layouts", ())
                ),
                source_files=tuple(
                    SourceFile(
                        path=str(f["path"]),
                        language=str(f.get("language", "javascript")).lower(),
                    )
                    for f in data.get("source_files", ())
                ),
                resources=tuple(
                    Resource(
                        name=str(r["name"]),
                        file=str(r["file"]),
                        kind=str(r.get("kind", "image")),
                    )
                    for r in data.get("resources", ())
                ),
                extensions=tuple(
                    Extension(
                        name=str(x["name"]),
                        includes=tuple(x.get("includes", ())),
                        cordova_plugins=tuple(x.get("cordova_plugins", ())),
                    )
                    for x in data.get("extensions", ())
                ),
                platform_assets={
                    str(platform): {str(k): str(v) for k, v in assets.items()}
                    for platform, assets in dict(data.get("platform_assets", {})).items()
                },
                properties=dict(data.get("properties", {})),
                project_file=project_file,
            )
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Malformed project data: {exc!r}"
            raise ConfigurationError(msg, stage="load", artifact=str(project_file or "")) from exc


def load_project(path: Path) -> Project:
    """Load a project from a ``.yaml``, ``.yml`` or ``.json`` file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or malformed.

    """
    path = path.resolve()
    if not path.is_file():
        msg = f"Project file not found: {path}"
        raise ConfigurationError(msg, stage="load", artifact=str(path))

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Cannot parse project file {path}: {exc}"
        raise ConfigurationError(msg, stage="load", artifact=str(path)) from exc

    return Project.from_dict(data, project_file=path)

"""Shared test fixtures for tabby."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from tabby.bundle.planner import RUNTIME_CATALOG
from tabby.config import TabbyConfig
from tabby.project import Project, Scene, load_project

EXTENSION_FILES = (
    "extensions/physics/physicsruntimebehavior.js",
    "extensions/physics/physicstools.js",
)


def sample_project_data() -> dict[str, Any]:
    """A two-scene project using one extension, one JS source and resources.

    The first source file is not JavaScript, so the helpers script keeps
    ordinal 1 (``ext-code1.js``).  Two resources share the base name
    ``player.png``.
    """
    return {
        "name": "Space Cat",
        "package_name": "com.example.spacecat",
        "version": "1.2.0",
        "author": "Tabby Team",
        "orientation": "landscape",
        "width": 1280,
        "height": 720,
        "first_scene": "Menu",
        "scenes": [
            {
                "name": "Menu",
                "events": "runtimeScene.showMenu();",
                "includes": ["events-tools/inputtools.js"],
            },
            {
                "name": "Level 1",
                "events": "runtimeScene.tick();",
                "includes": ["extensions/physics/physicstools.js"],
            },
        ],
        "external_layouts": [{"name": "Hud", "scene": "Level 1"}],
        "source_files": [
            {"path": "scripts/notes.txt", "language": "text"},
            {"path": "scripts/helpers.js"},
        ],
        "resources": [
            {"name": "player", "file": "assets/player.png"},
            {"name": "player-icon", "file": "icons/player.png"},
            {"name": "desktop-icon", "file": "icons/icon-512.png"},
        ],
        "extensions": [
            {
                "name": "Physics",
                "includes": ["extensions/physics/physicsruntimebehavior.js"],
                "cordova_plugins": ["cordova-plugin-vibration"],
            },
        ],
        "platform_assets": {
            "android": {"icon-48": "player-icon"},
            "ios": {"icon-180": "player-icon"},
            "desktop": {"icon-512": "desktop-icon"},
        },
    }


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a workspace with a runtime directory holding every engine file.

    ``tabby.js`` also ships a source map.
    """
    root = tmp_path / "workspace"
    runtime = root / "runtime"
    for path in [m.path for m in RUNTIME_CATALOG] + list(EXTENSION_FILES):
        file = runtime / path
        file.parent.mkdir(parents=True, exist_ok=True)
        file.write_text(f"// {path}\n")
    (runtime / "tabby.js.map").write_text('{"version":3,"file":"tabby.js"}\n')
    return root


@pytest.fixture
def config(workspace: Path) -> TabbyConfig:
    """A TabbyConfig rooted at the workspace."""
    return TabbyConfig(root=workspace)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Write the sample project file and its sources and resources."""
    directory = tmp_path / "project"
    (directory / "scripts").mkdir(parents=True)
    (directory / "scripts" / "helpers.js").write_text("function helper() { return 42; }\n")
    (directory / "scripts" / "notes.txt").write_text("not bundled\n")
    (directory / "assets").mkdir()
    (directory / "assets" / "player.png").write_bytes(b"\x89PNG player sprite")
    (directory / "icons").mkdir()
    (directory / "icons" / "player.png").write_bytes(b"\x89PNG player icon")
    (directory / "icons" / "icon-512.png").write_bytes(b"\x89PNG desktop icon")
    (directory / "game.yaml").write_text(yaml.safe_dump(sample_project_data()))
    return directory


@pytest.fixture
def project(project_dir: Path) -> Project:
    """The sample project, loaded from disk."""
    return load_project(project_dir / "game.yaml")


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """An absolute, not yet existing, output directory."""
    return tmp_path / "out"


@pytest.fixture
def make_project() -> Callable[..., Project]:
    """Factory building an in-memory project with one scene per name."""

    def _make(*scene_names: str, **fields: Any) -> Project:
        scenes = tuple(Scene(name=name, events=f"// {name}") for name in scene_names)
        return Project(name=fields.pop("name", "Test Game"), scenes=scenes, **fields)

    return _make

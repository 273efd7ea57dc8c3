"""Electron (desktop shell) target."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabby.targets.placeholders import Marker
from tabby.targets.spec import TargetSpec, TemplateDocument, json_value, mangled_name

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tabby.project import Project
    from tabby.targets.placeholders import Renderer

GAME_NAME = Marker("TABBY_GAME_NAME", '"TABBY_GAME_NAME"')
GAME_PACKAGE_NAME = Marker("TABBY_GAME_PACKAGE_NAME", '"TABBY_GAME_PACKAGE_NAME"')
GAME_AUTHOR = Marker("TABBY_GAME_AUTHOR", '"TABBY_GAME_AUTHOR"')
GAME_VERSION = Marker("TABBY_GAME_VERSION", '"TABBY_GAME_VERSION"')
GAME_MANGLED_NAME = Marker("TABBY_GAME_MANGLED_NAME", '"TABBY_GAME_MANGLED_NAME"')
WINDOW_WIDTH = Marker("TABBY_WINDOW_WIDTH", "800 /*TABBY_WINDOW_WIDTH*/")
WINDOW_HEIGHT = Marker("TABBY_WINDOW_HEIGHT", "600 /*TABBY_WINDOW_HEIGHT*/")

PACKAGE_MARKERS: frozenset[Marker] = frozenset({
    GAME_NAME, GAME_PACKAGE_NAME, GAME_AUTHOR, GAME_VERSION, GAME_MANGLED_NAME,
})

MAIN_MARKERS: frozenset[Marker] = frozenset({GAME_NAME, WINDOW_WIDTH, WINDOW_HEIGHT})

# Icon used by electron-builder
_ICON_OUTPUT = "buildResources/icon.png"


def _package_renderers(project: Project) -> Mapping[str, Renderer]:
    return {
        GAME_NAME.name: lambda: json_value(project.name),
        GAME_PACKAGE_NAME.name: lambda: json_value(project.package_name),
        GAME_AUTHOR.name: lambda: json_value(project.author),
        GAME_VERSION.name: lambda: json_value(project.version),
        GAME_MANGLED_NAME.name: lambda: json_value(mangled_name(project.name)),
    }


def _main_renderers(project: Project) -> Mapping[str, Renderer]:
    return {
        GAME_NAME.name: lambda: json_value(project.name),
        WINDOW_WIDTH.name: lambda: str(project.width),
        WINDOW_HEIGHT.name: lambda: str(project.height),
    }


def _assets(project: Project) -> tuple[tuple[str, str], ...]:
    icon = project.platform_asset_file("desktop", "icon-512")
    return ((icon, _ICON_OUTPUT),) if icon else ()


ELECTRON = TargetSpec(
    kind="electron",
    index_template="electron/index.html",
    documents=(
        TemplateDocument("electron/package.json", "package.json", PACKAGE_MARKERS, _package_renderers),
        TemplateDocument("electron/main.js", "main.js", MAIN_MARKERS, _main_renderers),
    ),
    assets=_assets,
)

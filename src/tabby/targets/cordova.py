"""Cordova (hybrid-mobile) target.

The bundle goes to ``www/``; ``config.xml`` and ``package.json`` are
rendered at the output root.  Icons are referenced from the project's
platform assets (already copied into ``www/`` with the other resources).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabby.targets.placeholders import Marker
from tabby.targets.spec import TargetSpec, TemplateDocument, json_value, mangled_name, xml_value

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tabby.project import Project
    from tabby.targets.placeholders import Renderer

_ANDROID_ICONS: tuple[tuple[str, str], ...] = (
    ("36", "ldpi"),
    ("48", "mdpi"),
    ("72", "hdpi"),
    ("96", "xhdpi"),
    ("144", "xxhdpi"),
    ("192", "xxxhdpi"),
)

_IOS_ICONS: tuple[str, ...] = (
    "180", "60", "120", "76", "152", "40", "80", "57", "114", "72",
    "144", "167", "29", "58", "87", "50", "20", "100", "1024",
)

# config.xml
PROJECT_NAME = Marker("TABBY_PROJECTNAME", "TABBY_PROJECTNAME")
PACKAGE_NAME = Marker("TABBY_PACKAGENAME", "TABBY_PACKAGENAME")
ORIENTATION = Marker("TABBY_ORIENTATION", "TABBY_ORIENTATION")
PROJECT_VERSION = Marker("TABBY_PROJECTVERSION", "TABBY_PROJECTVERSION")
ICONS_ANDROID = Marker("TABBY_ICONS_ANDROID", "<!-- TABBY_ICONS_ANDROID -->")
ICONS_IOS = Marker("TABBY_ICONS_IOS", "<!-- TABBY_ICONS_IOS -->")
PLUGINS = Marker("TABBY_PLUGINS", "<!-- TABBY_PLUGINS -->")

CONFIG_MARKERS: frozenset[Marker] = frozenset({
    PROJECT_NAME, PACKAGE_NAME, ORIENTATION, PROJECT_VERSION,
    ICONS_ANDROID, ICONS_IOS, PLUGINS,
})

# package.json
GAME_NAME = Marker("TABBY_GAME_NAME", '"TABBY_GAME_NAME"')
GAME_AUTHOR = Marker("TABBY_GAME_AUTHOR", '"TABBY_GAME_AUTHOR"')
GAME_VERSION = Marker("TABBY_GAME_VERSION", '"TABBY_GAME_VERSION"')
GAME_MANGLED_NAME = Marker("TABBY_GAME_MANGLED_NAME", '"TABBY_GAME_MANGLED_NAME"')

PACKAGE_MARKERS: frozenset[Marker] = frozenset({
    GAME_NAME, GAME_AUTHOR, GAME_VERSION, GAME_MANGLED_NAME,
})


def android_icons(project: Project) -> str:
    lines = []
    for size, density in _ANDROID_ICONS:
        file = project.platform_asset_file("android", f"icon-{size}")
        if file:
            lines.append(f'\t\t<icon src="www/{xml_value(file)}" density="{density}" />\n')
    return "".join(lines)


def ios_icons(project: Project) -> str:
    lines = []
    for size in _IOS_ICONS:
        file = project.platform_asset_file("ios", f"icon-{size}")
        if file:
            lines.append(f'\t\t<icon src="www/{xml_value(file)}" width="{size}" height="{size}" />\n')
    return "".join(lines)


def plugins(project: Project) -> str:
    seen: list[str] = []
    for extension in project.extensions:
        for plugin in extension.cordova_plugins:
            if plugin not in seen:
                seen.append(plugin)
    return "".join(f'\t<plugin name="{xml_value(p)}" />\n' for p in seen)


def _config_renderers(project: Project) -> Mapping[str, Renderer]:
    return {
        PROJECT_NAME.name: lambda: xml_value(project.name),
        PACKAGE_NAME.name: lambda: xml_value(project.package_name),
        ORIENTATION.name: lambda: project.orientation,
        PROJECT_VERSION.name: lambda: xml_value(project.version),
        ICONS_ANDROID.name: lambda: android_icons(project),
        ICONS_IOS.name: lambda: ios_icons(project),
        PLUGINS.name: lambda: plugins(project),
    }


def _package_renderers(project: Project) -> Mapping[str, Renderer]:
    return {
        GAME_NAME.name: lambda: json_value(project.name),
        GAME_AUTHOR.name: lambda: json_value(project.author),
        GAME_VERSION.name: lambda: json_value(project.version),
        GAME_MANGLED_NAME.name: lambda: json_value(mangled_name(project.name)),
    }


CORDOVA = TargetSpec(
    kind="cordova",
    index_template="cordova/www/index.html",
    web_dir="www",
    documents=(
        TemplateDocument("cordova/config.xml", "config.xml", CONFIG_MARKERS, _config_renderers),
        TemplateDocument("cordova/package.json", "package.json", PACKAGE_MARKERS, _package_renderers),
    ),
)

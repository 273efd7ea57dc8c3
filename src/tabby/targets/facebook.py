"""Facebook Instant Games (social-platform shell) target."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabby.targets.placeholders import Marker
from tabby.targets.spec import TargetSpec, TemplateDocument

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tabby.project import Project
    from tabby.targets.placeholders import Renderer

ORIENTATION = Marker("TABBY_ORIENTATION", '"TABBY_ORIENTATION"')

CONFIG_MARKERS: frozenset[Marker] = frozenset({ORIENTATION})


def _config_renderers(project: Project) -> Mapping[str, Renderer]:
    return {
        ORIENTATION.name: lambda: '"PORTRAIT"' if project.orientation == "portrait" else '"LANDSCAPE"',
    }


FACEBOOK = TargetSpec(
    kind="facebook",
    index_template="facebook/index.html",
    documents=(
        TemplateDocument("facebook/fbapp-config.json", "fbapp-config.json", CONFIG_MARKERS, _config_renderers),
    ),
)

"""Target descriptions — what each deployment shell needs besides the bundle.

A :class:`TargetSpec` names the HTML shell template, the directory the
bundle lives in (``www/`` for Cordova), the templated supporting documents
and the project assets copied verbatim.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

if TYPE_CHECKING:
    from tabby._types import TargetKind
    from tabby.project import Project
    from tabby.targets.placeholders import Marker, Renderer


@dataclass(frozen=True, slots=True)
class TemplateDocument:
    """A supporting document rendered from a template.

    Attributes:
        template: Template path relative to the templates root.
        output: Output path relative to the export output root.
        markers: Markers the template may contain.
        renderers: Builds the marker renderers for a project.

    """

    template: str
    output: str
    markers: frozenset[Marker]
    renderers: Callable[[Project], Mapping[str, Renderer]]


@dataclass(frozen=True, slots=True)
class TargetSpec:
    """Everything a target adds around the module bundle.

    Attributes:
        kind: Target kind.
        index_template: HTML shell template, relative to the templates root.
        web_dir: Directory (relative to the output root) holding the bundle
            and ``index.html``; empty for the output root itself.
        documents: Templated supporting documents.
        assets: Builds ``(project file, output path)`` pairs of project
            resources copied verbatim (icons and the like).

    """

    kind: TargetKind
    index_template: str
    web_dir: str = ""
    documents: tuple[TemplateDocument, ...] = ()
    assets: Callable[[Project], tuple[tuple[str, str], ...]] | None = None


# ---------------------------------------------------------------------------
# Value helpers shared by the target renderers
# ---------------------------------------------------------------------------


def xml_value(value: str) -> str | None:
    """XML-escaped ``value``; ``None`` (missing) when blank."""
    if not value.strip():
        return None
    return escape(value, {'"': "&quot;"})


def json_value(value: str | int) -> str | None:
    """JSON-encoded ``value``; ``None`` (missing) when a blank string."""
    if isinstance(value, str) and not value.strip():
        return None
    return json.dumps(value, ensure_ascii=False)


def mangled_name(name: str) -> str:
    """Lower-case, dash-separated package-safe form of a project name."""
    mangled = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return mangled or "game"

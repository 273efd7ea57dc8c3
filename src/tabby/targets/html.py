"""HTML shell — the ``index.html`` every target loads the bundle from.

The shell template carries four markers:

- ``<!-- TABBY_CODE_FILES -->``: one ``<script>`` tag per module, in load
  order.
- ``{}/*TABBY_ADDITIONAL_SPEC*/``: JSON handed to the runtime game object
  (initial scene, external layout, debugger address...).  Opaque here; it
  only has to parse.
- ``/* TABBY_CUSTOM_STYLE */`` and ``<!-- TABBY_CUSTOM_HTML -->``: optional
  extra CSS and markup, empty by default.
"""

from __future__ import annotations

import html
import json
from collections.abc import Iterable

from tabby._errors import TemplateError
from tabby.bundle.module import Module
from tabby.targets.placeholders import Marker, RenderedDocument, SubstitutionContext

CODE_FILES = Marker("TABBY_CODE_FILES", "<!-- TABBY_CODE_FILES -->", required=True)
ADDITIONAL_SPEC = Marker("TABBY_ADDITIONAL_SPEC", "{}/*TABBY_ADDITIONAL_SPEC*/")
CUSTOM_STYLE = Marker("TABBY_CUSTOM_STYLE", "/* TABBY_CUSTOM_STYLE */")
CUSTOM_HTML = Marker("TABBY_CUSTOM_HTML", "<!-- TABBY_CUSTOM_HTML -->")

INDEX_MARKERS: frozenset[Marker] = frozenset({CODE_FILES, ADDITIONAL_SPEC, CUSTOM_STYLE, CUSTOM_HTML})


def script_tags(modules: Iterable[Module]) -> str:
    """One inclusion statement per module, in list order."""
    return "".join(
        f'\t<script src="{html.escape(module.path, quote=True)}" crossorigin="anonymous"></script>\n'
        for module in modules
    )


def validate_additional_spec(spec: str | None) -> str:
    """Check that ``spec`` is well-formed JSON and return it verbatim.

    An empty spec becomes ``{}``.
    """
    if spec is None or not spec.strip():
        return "{}"
    try:
        json.loads(spec)
    except json.JSONDecodeError as exc:
        msg = f"Additional spec is not valid JSON: {exc}"
        raise TemplateError(msg, marker=ADDITIONAL_SPEC.name) from exc
    return spec


def render_index(
    template: str,
    modules: Iterable[Module],
    additional_spec: str | None = None,
    *,
    custom_style: str = "",
    custom_html: str = "",
    template_name: str = "index.html",
) -> RenderedDocument:
    """Render the HTML shell for ``modules``."""
    modules = tuple(modules)
    spec = validate_additional_spec(additional_spec)
    context = SubstitutionContext(
        INDEX_MARKERS,
        {
            CODE_FILES.name: lambda: script_tags(modules),
            ADDITIONAL_SPEC.name: lambda: spec,
            CUSTOM_STYLE.name: lambda: custom_style,
            CUSTOM_HTML.name: lambda: custom_html,
        },
    )
    return context.render(template, template_name=template_name)

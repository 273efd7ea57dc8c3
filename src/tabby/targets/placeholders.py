"""Placeholder substitution — markers in template documents.

A template declares a fixed set of :class:`Marker` objects.  A
:class:`SubstitutionContext` binds every declared marker to a render
function; binding too few or too many markers fails when the context is
built, before any template is read.  Rendering then:

1. rejects marker-shaped tokens (``TABBY_*``) the template contains but
   the context does not declare,
2. calls the render function of each declared marker present in the
   template (``None`` means the option it needs is missing),
3. substitutes all markers in a single pass, so rendered values are never
   scanned for markers themselves.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TypeAlias

from tabby._errors import TemplateError

# Any marker-shaped token, declared or not
MARKER_PATTERN = re.compile(r"TABBY_[A-Z0-9_]*[A-Z0-9]")

Renderer: TypeAlias = Callable[[], str | None]


@dataclass(frozen=True, slots=True)
class Marker:
    """A named substitution point.

    Attributes:
        name: Marker name (``TABBY_CODE_FILES``); reported in errors.
        token: Exact text replaced in the template, including any comment
            or quote decoration (``<!-- TABBY_CODE_FILES -->``).
        required: The template is invalid without this marker.

    """

    name: str
    token: str
    required: bool = False


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    """A template with every marker substituted."""

    text: str
    substituted: tuple[str, ...]


class SubstitutionContext:
    """Binds each declared marker to a render function.

    Args:
        markers: The template's declared markers.
        renderers: Marker name -> render function.

    Raises:
        TemplateError: If a declared marker has no renderer, or a renderer
            names an undeclared marker.

    """

    __slots__ = ("_markers", "_renderers")

    def __init__(self, markers: Iterable[Marker], renderers: Mapping[str, Renderer]) -> None:
        self._markers = tuple(sorted(markers, key=lambda m: m.name))
        declared = {m.name for m in self._markers}

        for name in sorted(declared - set(renderers)):
            msg = f"Marker {name} has no renderer"
            raise TemplateError(msg, marker=name)
        for name in sorted(set(renderers) - declared):
            msg = f"Renderer given for undeclared marker {name}"
            raise TemplateError(msg, marker=name)

        self._renderers = dict(renderers)

    @property
    def markers(self) -> tuple[Marker, ...]:
        return self._markers

    def render(self, template: str, *, template_name: str = "<template>") -> RenderedDocument:
        """Substitute every marker of ``template``.

        Raises:
            TemplateError: Naming the first marker that cannot be resolved.

        """
        present = [m for m in self._markers if m.token in template]
        for marker in self._markers:
            if marker.required and marker not in present:
                msg = f"Required marker {marker.name} missing from {template_name}"
                raise TemplateError(msg, marker=marker.name, template=template_name)

        stripped = template
        for marker in present:
            stripped = stripped.replace(marker.token, "")
        leftover = MARKER_PATTERN.search(stripped)
        if leftover is not None:
            name = leftover.group(0)
            msg = f"Unknown marker {name} in {template_name}"
            raise TemplateError(msg, marker=name, template=template_name)

        if not present:
            return RenderedDocument(text=template, substituted=())

        values: dict[str, str] = {}
        for marker in present:
            value = self._renderers[marker.name]()
            if value is None:
                msg = f"No value for marker {marker.name} in {template_name}"
                raise TemplateError(msg, marker=marker.name, template=template_name)
            values[marker.token] = value

        # Longest tokens first so a token that prefixes another never wins.
        tokens = sorted(values, key=len, reverse=True)
        pattern = re.compile("|".join(re.escape(t) for t in tokens))
        text = pattern.sub(lambda match: values[match.group(0)], template)

        return RenderedDocument(text=text, substituted=tuple(m.name for m in present))


def render_template(
    template: str,
    markers: Iterable[Marker],
    renderers: Mapping[str, Renderer],
    *,
    template_name: str = "<template>",
) -> str:
    """Shortcut: build a context and render ``template`` with it."""
    return SubstitutionContext(markers, renderers).render(template, template_name=template_name).text

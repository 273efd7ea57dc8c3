"""Target manifests — the documents each deployment shell needs.

Every target renders an ``index.html`` shell that loads the bundle's
modules in order; packaged targets add their own supporting documents
(``config.xml``, ``package.json``, ``main.js``, ``fbapp-config.json``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabby._errors import ConfigurationError
from tabby.targets.cordova import CORDOVA
from tabby.targets.electron import ELECTRON
from tabby.targets.facebook import FACEBOOK
from tabby.targets.generator import ManifestGenerator, TemplateLocator, bundled_templates_path
from tabby.targets.placeholders import Marker, RenderedDocument, SubstitutionContext, render_template
from tabby.targets.preview import PREVIEW
from tabby.targets.spec import TargetSpec, TemplateDocument

if TYPE_CHECKING:
    from tabby._types import TargetKind

TARGETS: dict[str, TargetSpec] = {
    spec.kind: spec for spec in (PREVIEW, CORDOVA, ELECTRON, FACEBOOK)
}


def get_target(kind: TargetKind | str) -> TargetSpec:
    """Return the description of target ``kind``.

    Raises:
        ConfigurationError: If ``kind`` is not a known target.

    """
    try:
        return TARGETS[kind]
    except KeyError:
        msg = f"Unknown target {kind!r} (expected one of {sorted(TARGETS)})"
        raise ConfigurationError(msg, stage="validate", artifact=str(kind)) from None


__all__ = [
    "CORDOVA",
    "ELECTRON",
    "FACEBOOK",
    "PREVIEW",
    "TARGETS",
    "ManifestGenerator",
    "Marker",
    "RenderedDocument",
    "SubstitutionContext",
    "TargetSpec",
    "TemplateDocument",
    "TemplateLocator",
    "bundled_templates_path",
    "get_target",
    "render_template",
]

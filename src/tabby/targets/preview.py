"""Browser preview target: the HTML shell only."""

from __future__ import annotations

from tabby.targets.spec import TargetSpec

PREVIEW = TargetSpec(kind="preview", index_template="preview/index.html")

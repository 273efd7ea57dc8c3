"""Tabby error hierarchy.

All tabby-specific errors inherit from TabbyError for easy catching.  Each
error remembers the pipeline stage it was raised in and the artifact (module,
template, path) it concerns, so the exporter can report a single readable
failure.
"""

from __future__ import annotations

from pathlib import Path


class TabbyError(Exception):
    """Base error for all tabby operations.

    Args:
        message: Human-readable description.
        stage: Pipeline stage that failed (``plan``, ``materialize``, ...).
        artifact: The module, template or path the failure concerns.

    """

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        artifact: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.artifact = artifact


class ConfigurationError(TabbyError):
    """Malformed or incomplete export request or configuration."""

    kind = "configuration"


class ExportIOError(TabbyError):
    """A file system operation failed."""

    kind = "io"

    def __init__(self, message: str, *, path: Path | str, stage: str | None = None) -> None:
        super().__init__(message, stage=stage, artifact=str(path))
        self.path = Path(path)


class GenerationError(TabbyError):
    """The code generator failed to produce a module."""

    kind = "generation"

    def __init__(self, message: str, *, module_id: str, stage: str | None = None) -> None:
        super().__init__(message, stage=stage, artifact=module_id)
        self.module_id = module_id


class TemplateError(TabbyError):
    """A template marker is unresolved or malformed."""

    kind = "template"

    def __init__(
        self,
        message: str,
        *,
        marker: str,
        template: str | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, stage=stage, artifact=template or marker)
        self.marker = marker
        self.template = template


class ToolError(TabbyError):
    """An external tool (minifier, packager) failed."""

    kind = "tool"

    def __init__(self, message: str, *, tool: str, stage: str | None = None) -> None:
        super().__init__(message, stage=stage, artifact=tool)
        self.tool = tool

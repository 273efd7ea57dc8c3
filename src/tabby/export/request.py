"""Export requests — what to export, where, and with which options."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import ConfigurationError
from tabby._types import ALL_TARGETS
from tabby.bundle.fingerprints import FingerprintStore

if TYPE_CHECKING:
    from tabby._types import TargetKind
    from tabby.project import Project


@dataclass(frozen=True, slots=True)
class DebuggerEndpoint:
    """Address of the debugger server a preview connects back to."""

    address: str
    port: int

    @classmethod
    def parse(cls, value: str) -> DebuggerEndpoint:
        """Parse ``HOST:PORT``.

        Raises:
            ConfigurationError: If ``value`` is not ``HOST:PORT``.

        """
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit():
            msg = f"Debugger endpoint must be HOST:PORT, got {value!r}"
            raise ConfigurationError(msg, stage="validate", artifact="debugger")
        return cls(address=host, port=int(port))

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass(frozen=True, slots=True)
class ExportRequest:
    """A single export.

    Attributes:
        target: Target kind.
        output_root: Absolute directory the export is written to.
        project: Project to export.
        debugger: Debugger server the preview connects to, if any.
        initial_scene: Scene to start on instead of the project's first.
        initial_external_layout: External layout injected at startup.
        minify: Merge and minify contiguous runs (packaged targets only).
        data_only: Rewrite only the project data (preview only).
        prior_fingerprints: Fingerprints returned by the previous export.
        force_regenerate: Ignore ``prior_fingerprints``.
        additional_spec: JSON handed to the runtime game object.

    """

    target: TargetKind
    output_root: Path
    project: Project
    debugger: DebuggerEndpoint | None = None
    initial_scene: str = ""
    initial_external_layout: str = ""
    minify: bool = False
    data_only: bool = False
    prior_fingerprints: FingerprintStore = field(default_factory=FingerprintStore)
    force_regenerate: bool = False
    additional_spec: str | None = None

    @property
    def is_preview(self) -> bool:
        return self.target == "preview"

    def validate(self) -> None:
        """Check the request before any file is written.

        Raises:
            ConfigurationError: Naming the offending option.

        """
        if self.target not in ALL_TARGETS:
            msg = f"Unknown target {self.target!r} (expected one of {sorted(ALL_TARGETS)})"
            raise ConfigurationError(msg, stage="validate", artifact="target")

        if not self.output_root.is_absolute():
            msg = f"Output root must be an absolute path, got {self.output_root}"
            raise ConfigurationError(msg, stage="validate", artifact=str(self.output_root))

        if self.is_preview and self.minify:
            msg = "Minification is not available for previews"
            raise ConfigurationError(msg, stage="validate", artifact="minify")

        if not self.is_preview:
            for option, value in (
                ("debugger", self.debugger),
                ("data_only", self.data_only),
                ("initial_external_layout", self.initial_external_layout),
            ):
                if value:
                    msg = f"Option {option!r} only applies to previews"
                    raise ConfigurationError(msg, stage="validate", artifact=option)

        if self.debugger is not None and not 0 < self.debugger.port < 65536:
            msg = f"Debugger port out of range: {self.debugger.port}"
            raise ConfigurationError(msg, stage="validate", artifact="debugger")

        if self.initial_scene and not self.project.has_scene(self.initial_scene):
            msg = f"Initial scene {self.initial_scene!r} does not exist"
            raise ConfigurationError(msg, stage="validate", artifact=self.initial_scene)

        if self.initial_external_layout and not self.project.has_external_layout(
            self.initial_external_layout,
        ):
            msg = f"External layout {self.initial_external_layout!r} does not exist"
            raise ConfigurationError(msg, stage="validate", artifact=self.initial_external_layout)

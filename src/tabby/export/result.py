"""Export results — the outcome of one export, successful or not."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import TabbyError
from tabby.bundle.fingerprints import FingerprintStore

if TYPE_CHECKING:
    from tabby.bundle.module import Module
    from tabby.bundle.records import ExportedFile


@dataclass(frozen=True, slots=True)
class ExportFailure:
    """The first failure of an export.

    Attributes:
        stage: Pipeline stage that failed.
        artifact: Module, template, marker or path concerned.
        message: Human-readable description.
        kind: Error kind (``configuration``, ``io``, ``generation``,
            ``template``, ``tool``).

    """

    stage: str
    artifact: str
    message: str
    kind: str

    @classmethod
    def from_error(cls, exc: TabbyError) -> ExportFailure:
        return cls(
            stage=exc.stage or "export",
            artifact=exc.artifact or "",
            message=exc.message,
            kind=exc.kind,
        )

    def __str__(self) -> str:
        where = f" ({self.artifact})" if self.artifact else ""
        return f"[{self.stage}] {self.message}{where}"


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Aggregate result of an export.

    Attributes:
        output_root: Directory the export was written to.
        target: Target kind.
        modules: Final module list, in load order, relative to the
            directory holding ``index.html``.
        fingerprints: Updated fingerprint store; pass it to the next
            export of the same project.
        regenerated: Module ids the code generator produced.
        reused: Module ids kept from the previous export.
        entry_point: The written ``index.html``.
        files: Every file written.
        duration_ms: Total wall-clock time of the export.
        error: The failure that stopped the export, if any.

    """

    output_root: Path
    target: str
    modules: tuple[Module, ...] = ()
    fingerprints: FingerprintStore = field(default_factory=FingerprintStore)
    regenerated: tuple[str, ...] = ()
    reused: tuple[str, ...] = ()
    entry_point: Path | None = None
    files: tuple[ExportedFile, ...] = ()
    duration_ms: float = 0.0
    error: ExportFailure | None = None
    cause: TabbyError | None = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def module_paths(self) -> tuple[str, ...]:
        return tuple(m.path for m in self.modules)

    def raise_for_error(self) -> None:
        """Re-raise the failure that stopped the export, if any."""
        if self.cause is not None:
            raise self.cause
        if self.error is not None:
            raise TabbyError(self.error.message, stage=self.error.stage, artifact=self.error.artifact)

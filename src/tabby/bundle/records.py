"""Records of files written during an export."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Record of a single file written during export.

    Attributes:
        source_path: Logical source (module id, resource name, template).
        output_path: Absolute filesystem path to the written file.
        source_type: Category of the exported file.
        size_bytes: Size of the written file in bytes.
        duration_ms: Time taken to produce and write this file.

    """

    source_path: str
    output_path: Path
    source_type: Literal["module", "source_map", "resource", "data", "manifest"]
    size_bytes: int
    duration_ms: float

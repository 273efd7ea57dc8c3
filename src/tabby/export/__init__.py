"""Export orchestration — requests in, bundles and results out."""

from __future__ import annotations

from tabby.export.exporter import Exporter, export_project_data, project_data_module
from tabby.export.request import DebuggerEndpoint, ExportRequest
from tabby.export.result import ExportFailure, ExportResult

__all__ = [
    "DebuggerEndpoint",
    "ExportFailure",
    "ExportRequest",
    "ExportResult",
    "Exporter",
    "export_project_data",
    "project_data_module",
]

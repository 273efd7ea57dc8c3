"""Bundle assembly — plan, track and materialize the modules of an export."""

from __future__ import annotations

from tabby.bundle.fingerprints import FingerprintStore, scene_fingerprint, should_regenerate
from tabby.bundle.materializer import MaterializedModules, Materializer
from tabby.bundle.merge import collapse_runs, find_runs
from tabby.bundle.module import Module, ModuleList
from tabby.bundle.planner import PlanFlags, exclude_families, plan_modules
from tabby.bundle.records import ExportedFile
from tabby.bundle.resources import export_resources, resolve_resource_names

__all__ = [
    "ExportedFile",
    "FingerprintStore",
    "MaterializedModules",
    "Materializer",
    "Module",
    "ModuleList",
    "PlanFlags",
    "collapse_runs",
    "exclude_families",
    "export_resources",
    "find_runs",
    "plan_modules",
    "resolve_resource_names",
    "scene_fingerprint",
    "should_regenerate",
]

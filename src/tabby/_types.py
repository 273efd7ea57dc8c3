"""Shared type definitions for tabby."""

from collections.abc import Callable
from typing import Literal, TypeAlias

# Deployment shell an export targets
TargetKind: TypeAlias = Literal["preview", "cordova", "electron", "facebook"]

# Targets built by export_for_packaged_target
PACKAGED_TARGETS: frozenset[str] = frozenset({"cordova", "electron", "facebook"})

ALL_TARGETS: frozenset[str] = PACKAGED_TARGETS | {"preview"}

# Logical role of a module in the load order
ModuleRole: TypeAlias = Literal[
    "runtime-core",
    "library",
    "renderer",
    "extension-code",
    "scene-code",
    "external-source",
    "debugger-client",
    "project-data",
    "merged",
]

# Roles whose bytes come from the code generator
GENERATED_ROLES: frozenset[str] = frozenset({"scene-code"})

# Roles copied verbatim from the runtime directory
RUNTIME_ROLES: frozenset[str] = frozenset({
    "runtime-core",
    "library",
    "renderer",
    "extension-code",
    "debugger-client",
})

# Renderer backend a module belongs to
RendererFamily: TypeAlias = Literal["pixi", "cocos"]

RENDERER_FAMILIES: tuple[str, ...] = ("pixi", "cocos")

# Module identifier (output-root relative path once materialized)
ModuleId: TypeAlias = str

# Content fingerprint of a generated module's source
Fingerprint: TypeAlias = str

# Optional progress sink: called with (modules done, modules total)
ProgressSink: TypeAlias = Callable[[int, int], None]

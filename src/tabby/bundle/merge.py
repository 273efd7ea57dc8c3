"""Minification runs — which modules may be merged into one artifact.

Only contiguous runs of mergeable modules are merged; a module marked
non-mergeable (debugger client, project data) splits the list, so every
module keeps its load position relative to the modules that were not
merged.  A run must hold at least two modules; single modules and lists
without any eligible run are left untouched.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import TYPE_CHECKING

from tabby.bundle.module import Module

if TYPE_CHECKING:
    from tabby.bundle.module import ModuleList

# Roles that can ever take part in a merge
MERGEABLE_ROLES: frozenset[str] = frozenset({
    "runtime-core",
    "library",
    "renderer",
    "extension-code",
    "scene-code",
    "external-source",
})

MIN_RUN_LENGTH = 2


def is_mergeable(module: Module) -> bool:
    return module.mergeable and module.role in MERGEABLE_ROLES


def find_runs(modules: Sequence[Module], min_length: int = MIN_RUN_LENGTH) -> list[tuple[int, int]]:
    """Return ``[start, stop)`` index pairs of contiguous mergeable runs.

    Example:
        ``[A(lib), B(scene), C(non-mergeable), D(lib)]`` -> ``[(0, 2)]``

    """
    runs: list[tuple[int, int]] = []
    start: int | None = None

    for index, module in enumerate(modules):
        if is_mergeable(module):
            if start is None:
                start = index
            continue
        if start is not None and index - start >= min_length:
            runs.append((start, index))
        start = None

    if start is not None and len(modules) - start >= min_length:
        runs.append((start, len(modules)))

    return runs


def merged_module_name(ordinal: int, taken: Collection[str]) -> str:
    """Name of the ``ordinal``-th merged module, distinct from ``taken``."""
    name = f"bundle{ordinal}.min.js"
    suffix = 0
    while name in taken:
        suffix += 1
        name = f"bundle{ordinal}-{suffix}.min.js"
    return name


def merged_module(path: str, originals: Sequence[Module]) -> Module:
    return Module(
        path=path,
        role="merged",
        mergeable=False,
        merged_from=tuple(m.path for m in originals),
    )


def collapse_runs(modules: ModuleList, runs: Sequence[tuple[int, int]]) -> ModuleList:
    """Collapse each run into one merged module placed at the run's start.

    Runs are collapsed back to front so earlier indices stay valid.
    """
    result = modules.copy()
    taken = set(modules.paths())
    names = []
    for ordinal, _run in enumerate(runs):
        name = merged_module_name(ordinal, taken)
        taken.add(name)
        names.append(name)

    for (start, stop), name in reversed(list(zip(runs, names, strict=True))):
        result.collapse(start, stop, merged_module(name, modules[start:stop]))
    return result

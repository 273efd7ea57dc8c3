"""Modules — ordered units of bundle output.

A module is one file the bundle loads: an engine runtime file, a generated
scene module, an external source file, the project data module, or a merged
replacement for several of those.  Order is load order: later modules may
depend on earlier ones, so a :class:`ModuleList` only ever appends (skipping
duplicates), replaces a module in place, or collapses a contiguous run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from tabby._types import GENERATED_ROLES, RUNTIME_ROLES

if TYPE_CHECKING:
    from tabby._types import ModuleRole, RendererFamily
    from tabby.project import Scene, SourceFile


@dataclass(frozen=True, slots=True)
class Module:
    """One entry of the module list.

    Attributes:
        path: Relative runtime path (``pixi-renderers/pixi.js``), planned
            output name (``code0.js``), or output-root relative path after
            materialization.  Always POSIX separators.
        role: Logical role tag.
        family: Renderer family, for renderer-specific files.
        mergeable: Whether minification may merge this module with its
            neighbours.
        scene: Scene a ``scene-code`` module is generated from.
        source: Source file an ``external-source`` module is copied from.
        merged_from: Paths replaced by a ``merged`` module.

    """

    path: str
    role: ModuleRole
    family: RendererFamily | None = None
    mergeable: bool = True
    scene: Scene | None = None
    source: SourceFile | None = None
    merged_from: tuple[str, ...] = ()

    @property
    def is_generated(self) -> bool:
        return self.role in GENERATED_ROLES

    @property
    def is_runtime(self) -> bool:
        return self.role in RUNTIME_ROLES

    def with_path(self, path: str) -> Module:
        return replace(self, path=path)


class ModuleList(Sequence[Module]):
    """Ordered, duplicate-free (by path) list of modules.

    Appending a module whose path is already present is a no-op, so the
    first occurrence decides the load position.
    """

    __slots__ = ("_modules",)

    def __init__(self, modules: Iterable[Module] = ()) -> None:
        self._modules: list[Module] = []
        for module in modules:
            self.append(module)

    def append(self, module: Module) -> bool:
        """Append ``module`` unless its path is already listed.

        Returns:
            True if the module was added.

        """
        if module.path in self:
            return False
        self._modules.append(module)
        return True

    def extend(self, modules: Iterable[Module]) -> None:
        for module in modules:
            self.append(module)

    def replace(self, index: int, module: Module) -> None:
        """Replace the module at ``index`` keeping its load position."""
        self._modules[index] = module

    def collapse(self, start: int, stop: int, module: Module) -> None:
        """Replace the contiguous run ``[start, stop)`` with ``module``."""
        if not 0 <= start < stop <= len(self._modules):
            msg = f"Invalid run [{start}, {stop}) for {len(self._modules)} modules"
            raise IndexError(msg)
        self._modules[start:stop] = [module]

    def remove_where(self, predicate: Callable[[Module], bool]) -> int:
        """Drop every module matching ``predicate``; return how many went."""
        before = len(self._modules)
        self._modules = [m for m in self._modules if not predicate(m)]
        return before - len(self._modules)

    def paths(self) -> tuple[str, ...]:
        return tuple(m.path for m in self._modules)

    def copy(self) -> ModuleList:
        return ModuleList(self._modules)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Module):
            item = item.path
        return any(m.path == item for m in self._modules)

    def __getitem__(self, index):  # type: ignore[override]
        return self._modules[index]

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ModuleList):
            return self._modules == other._modules
        return NotImplemented

    def __repr__(self) -> str:
        return f"ModuleList({list(self.paths())!r})"

"""Tabby configuration.

TabbyConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class TabbyConfig:
    """Configuration for the export pipeline.

    Attributes:
        root: Workspace root (contains runtime/, templates/, etc.).
              Always resolved to an absolute path on construction.
        runtime_dir: Directory holding the engine runtime files that are
            copied into every bundle (``tabby.js`` core, renderers, libs).
        templates_dir: Directory holding user overrides of the target
            templates.  Missing templates fall back to the bundled ones.
        output: Default output directory for exports.
        minifier: Command line of the external minifier, e.g.
            ``["terser", "--compress"]``.  Empty means plain concatenation.
        pixi: Include the Pixi renderer family.
        cocos: Include the Cocos renderer family.

    """

    root: Path = field(default_factory=Path.cwd)
    runtime_dir: str = "runtime"
    templates_dir: str = "templates"
    output: Path = field(default_factory=lambda: Path("dist"))
    minifier: tuple[str, ...] = ()
    pixi: bool = True
    cocos: bool = False

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if not isinstance(self.minifier, tuple):
            object.__setattr__(self, "minifier", tuple(self.minifier))

    @property
    def runtime_path(self) -> Path:
        """Absolute path to the engine runtime directory."""
        runtime = Path(self.runtime_dir)
        if runtime.is_absolute():
            return runtime
        return self.root / runtime

    @property
    def templates_path(self) -> Path:
        """Absolute path to the user templates directory."""
        return self.root / self.templates_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

"""Manifest generation — render a target's documents around a bundle.

Templates are looked up in the user's template directory first and fall
back to the defaults shipped in ``tabby/runtime/templates``, so a project
can override a single document (say ``cordova/config.xml``) and keep the
rest.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import ExportIOError
from tabby.bundle.records import ExportedFile
from tabby.targets.html import render_index
from tabby.targets.placeholders import SubstitutionContext

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabby.bundle.module import Module
    from tabby.collaborators import FileSystem
    from tabby.config import TabbyConfig
    from tabby.observability.collector import ExportCollector
    from tabby.project import Project
    from tabby.targets.spec import TargetSpec


def bundled_templates_path() -> Path:
    """Return the absolute path to the bundled default templates."""
    return Path(__file__).parent.parent / "runtime" / "templates"


class TemplateLocator:
    """Resolves template names against a fallback chain of directories.

    Args:
        fs: File system the templates are read from.
        dirs: Directories in priority order.

    """

    __slots__ = ("_dirs", "_fs")

    def __init__(self, fs: FileSystem, dirs: Iterable[Path]) -> None:
        self._fs = fs
        self._dirs = tuple(dirs)

    @classmethod
    def for_config(cls, fs: FileSystem, config: TabbyConfig) -> TemplateLocator:
        """User templates first (even if the directory does not exist yet)."""
        bundled = bundled_templates_path()
        user_dir = config.templates_path
        dirs = [user_dir] if user_dir != bundled else []
        dirs.append(bundled)
        return cls(fs, dirs)

    @property
    def dirs(self) -> tuple[Path, ...]:
        return self._dirs

    def find(self, name: str) -> Path:
        """Return the first existing file called ``name``.

        Raises:
            ExportIOError: If no directory holds the template.

        """
        for directory in self._dirs:
            candidate = directory / name
            if self._fs.exists(candidate):
                return candidate
        msg = f"Template {name!r} not found in {', '.join(str(d) for d in self._dirs)}"
        raise ExportIOError(msg, path=Path(name), stage="manifest")

    def read(self, name: str) -> str:
        return self._fs.read_text(self.find(name))


class ManifestGenerator:
    """Writes the HTML shell and supporting documents of a target.

    Args:
        fs: File system to write to.
        locator: Template lookup.
        collector: Optional event collector.

    """

    def __init__(
        self,
        fs: FileSystem,
        locator: TemplateLocator,
        *,
        collector: ExportCollector | None = None,
    ) -> None:
        self._fs = fs
        self._locator = locator
        self._collector = collector

    def generate(
        self,
        target: TargetSpec,
        project: Project,
        modules: Iterable[Module],
        output_root: Path,
        additional_spec: str | None = None,
        *,
        custom_style: str = "",
        custom_html: str = "",
    ) -> tuple[ExportedFile, ...]:
        """Render every document of ``target``.

        ``modules`` must already be relative to the target's web root, in
        load order.

        Raises:
            TemplateError: A marker could not be resolved.
            ExportIOError: A template is missing or a write failed.

        """
        files = [self.write_index(
            target, modules, output_root, additional_spec,
            custom_style=custom_style, custom_html=custom_html,
        )]

        for document in target.documents:
            t0 = time.perf_counter()
            template = self._locator.read(document.template)
            context = SubstitutionContext(document.markers, document.renderers(project))
            rendered = context.render(template, template_name=document.template)
            destination = output_root / document.output
            size = self._fs.write_text(destination, rendered.text)
            files.append(self._record(
                target, document.template, destination, size, len(rendered.substituted), t0,
            ))

        if target.assets is not None:
            web_root = output_root / target.web_dir if target.web_dir else output_root
            for file, output in target.assets(project):
                t0 = time.perf_counter()
                destination = output_root / output
                size = self._fs.copy(web_root / file, destination)
                files.append(ExportedFile(
                    source_path=file,
                    output_path=destination,
                    source_type="resource",
                    size_bytes=size,
                    duration_ms=(time.perf_counter() - t0) * 1000,
                ))

        return tuple(files)

    def write_index(
        self,
        target: TargetSpec,
        modules: Iterable[Module],
        output_root: Path,
        additional_spec: str | None = None,
        *,
        custom_style: str = "",
        custom_html: str = "",
    ) -> ExportedFile:
        """Render ``index.html`` into the target's web root."""
        t0 = time.perf_counter()
        template = self._locator.read(target.index_template)
        rendered = render_index(
            template,
            modules,
            additional_spec,
            custom_style=custom_style,
            custom_html=custom_html,
            template_name=target.index_template,
        )
        web_root = output_root / target.web_dir if target.web_dir else output_root
        destination = web_root / "index.html"
        size = self._fs.write_text(destination, rendered.text)
        return self._record(target, target.index_template, destination, size, len(rendered.substituted), t0)

    def _record(
        self,
        target: TargetSpec,
        template: str,
        destination: Path,
        size: int,
        markers: int,
        t0: float,
    ) -> ExportedFile:
        if self._collector is not None:
            self._collector.record_manifest(target.kind, template, str(destination), markers=markers)
        return ExportedFile(
            source_path=template,
            output_path=destination,
            source_type="manifest",
            size_bytes=size,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

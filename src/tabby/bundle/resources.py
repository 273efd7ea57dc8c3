"""Resource export — copy project resources next to the bundle.

Resources (images, audio, fonts, data files) may live anywhere relative to
the project file.  They are copied flat into the output root under their
base file name.  When two different source files share a base name, the
later one (in project order) is renamed ``{stem}-{n}{suffix}`` with the
smallest free ``n``; the returned project references the new names.
Names the bundle itself writes next to the resources (``code0.js``,
``data.js``, ``index.html``...) are passed in as reserved and are never
handed out.
"""

from __future__ import annotations

import time
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from tabby.bundle.records import ExportedFile
from tabby.project import Resource

if TYPE_CHECKING:
    from collections.abc import Collection

    from tabby.collaborators import FileSystem
    from tabby.project import Project


def resolve_resource_names(project: Project, reserved: Collection[str] = ()) -> dict[Path, str]:
    """Map each resource source file to its de-duplicated output name.

    Deterministic: depends only on the order of ``project.resources`` and on
    ``reserved``.  Resources pointing at the same source file share one
    output name.
    """
    names: dict[Path, str] = {}
    taken: set[str] = set(reserved)

    for resource in project.resources:
        if not resource.file:
            continue
        source = _absolute(project, resource.file)
        if source in names:
            continue

        base = PurePosixPath(resource.file.replace("\\", "/")).name
        candidate = base
        n = 1
        while candidate in taken:
            stem, suffix = PurePosixPath(base).stem, PurePosixPath(base).suffix
            candidate = f"{stem}-{n}{suffix}"
            n += 1

        names[source] = candidate
        taken.add(candidate)

    return names


def export_resources(
    fs: FileSystem,
    project: Project,
    output_root: Path,
    *,
    reserved: Collection[str] = (),
) -> tuple[Project, tuple[ExportedFile, ...]]:
    """Copy project resources into ``output_root``.

    ``reserved`` holds the output names other files of the export use in
    ``output_root``; no resource is renamed onto one of them.

    Returns:
        The project with resource files renamed to their output names,
        and one :class:`ExportedFile` per copied file.

    Raises:
        ExportIOError: If a resource file is missing or cannot be copied.

    """
    names = resolve_resource_names(project, reserved)
    results: list[ExportedFile] = []

    for source, name in names.items():
        t0 = time.perf_counter()
        destination = output_root / name
        size = fs.copy(source, destination)
        results.append(ExportedFile(
            source_path=str(source),
            output_path=destination,
            source_type="resource",
            size_bytes=size,
            duration_ms=(time.perf_counter() - t0) * 1000,
        ))

    renamed = tuple(
        Resource(
            name=r.name,
            file=names[_absolute(project, r.file)] if r.file else r.file,
            kind=r.kind,
        )
        for r in project.resources
    )
    return project.with_resources(renamed), tuple(results)


def _absolute(project: Project, file: str) -> Path:
    path = Path(file)
    if not path.is_absolute():
        path = project.base_dir / path
    return path.resolve()

"""External collaborators — file system, code generator, minifier.

The export pipeline never touches the disk, the code generator or the
minifier directly.  It talks to them through the protocols below, so
callers (an editor, the CLI, tests) can swap implementations.  Each protocol
ships one concrete default.

Error model:
    ``LocalFileSystem`` wraps every ``OSError`` into :class:`ExportIOError`
    carrying the offending path.  Generators raise :class:`GenerationError`,
    minifiers raise :class:`ToolError`.

"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tabby._errors import ExportIOError, GenerationError, ToolError

if TYPE_CHECKING:
    from tabby.project import Project, Scene


# ---------------------------------------------------------------------------
# File system
# ---------------------------------------------------------------------------


@runtime_checkable
class FileSystem(Protocol):
    """File operations used by the materializer and the manifest generator."""

    def exists(self, path: Path) -> bool: ...

    def read_text(self, path: Path) -> str: ...

    def read_bytes(self, path: Path) -> bytes: ...

    def write_text(self, path: Path, text: str) -> int: ...

    def write_bytes(self, path: Path, data: bytes) -> int: ...

    def copy(self, source: Path, destination: Path) -> int: ...

    def list_directory(self, path: Path) -> list[Path]: ...

    def mkdir(self, path: Path) -> None: ...


class LocalFileSystem:
    """FileSystem over the local disk.

    Writes create parent directories as needed and return the number of
    bytes written.
    """

    def exists(self, path: Path) -> bool:
        return path.exists()

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ExportIOError(f"Unable to read {path}: {exc.strerror or exc}", path=path) from exc

    def read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ExportIOError(f"Unable to read {path}: {exc.strerror or exc}", path=path) from exc

    def write_text(self, path: Path, text: str) -> int:
        return self.write_bytes(path, text.encode("utf-8"))

    def write_bytes(self, path: Path, data: bytes) -> int:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise ExportIOError(f"Unable to write {path}: {exc.strerror or exc}", path=path) from exc
        return len(data)

    def copy(self, source: Path, destination: Path) -> int:
        if not source.is_file():
            raise ExportIOError(f"Source file not found: {source}", path=source)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if source.resolve() != destination.resolve():
                shutil.copy2(source, destination)
            return destination.stat().st_size
        except OSError as exc:
            msg = f"Unable to copy {source} to {destination}: {exc.strerror or exc}"
            raise ExportIOError(msg, path=destination) from exc

    def list_directory(self, path: Path) -> list[Path]:
        try:
            return sorted(path.iterdir())
        except OSError as exc:
            raise ExportIOError(f"Unable to list {path}: {exc.strerror or exc}", path=path) from exc

    def mkdir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExportIOError(f"Unable to create {path}: {exc.strerror or exc}", path=path) from exc


# ---------------------------------------------------------------------------
# Code generator
# ---------------------------------------------------------------------------


@runtime_checkable
class CodeGenerator(Protocol):
    """Turns a scene's events into executable module text."""

    def generate_module_code(self, project: Project, scene: Scene) -> str: ...


class SceneCodeGenerator:
    """Default generator: wraps a scene's event code in a registration call.

    The editor's real generator compiles visual events; projects loaded from
    files carry the already-compiled event code in ``Scene.events``.
    """

    def __init__(self, namespace: str = "tabby") -> None:
        self._namespace = namespace

    def generate_module_code(self, project: Project, scene: Scene) -> str:
        if not scene.name:
            msg = "Cannot generate code for a scene without a name"
            raise GenerationError(msg, module_id="<unnamed scene>")
        function_name = _mangle(scene.name)
        body = "\n".join(f"  {line}" if line else "" for line in scene.events.splitlines())
        return (
            f"{self._namespace}.{function_name}Code = {{}};\n"
            f"{self._namespace}.{function_name}Code.func = function(runtimeScene) {{\n"
            f"{body}\n"
            "};\n"
        )


def _mangle(name: str) -> str:
    """Mangle a scene name into a JavaScript identifier fragment."""
    out: list[str] = []
    for ch in name:
        if ch.isascii() and (ch.isalnum() or ch == "_"):
            out.append(ch)
        else:
            out.append(f"_{ord(ch)}")
    return "".join(out)


# ---------------------------------------------------------------------------
# Minifier
# ---------------------------------------------------------------------------


@runtime_checkable
class Minifier(Protocol):
    """Merges several module sources into one minified artifact."""

    def merge(self, sources: list[bytes]) -> bytes: ...


class ConcatMinifier:
    """Concatenates sources with statement separators, no compression."""

    def merge(self, sources: list[bytes]) -> bytes:
        return b";\n".join(source.rstrip() for source in sources) + b"\n"


class CommandMinifier:
    """Pipes the concatenated sources through an external command.

    The command reads JavaScript on stdin and writes the minified result to
    stdout (``terser``, ``esbuild --minify``, ``uglifyjs`` all work).

    Args:
        argv: Command line of the minifier.

    """

    def __init__(self, argv: tuple[str, ...] | list[str]) -> None:
        if not argv:
            msg = "Minifier command is empty"
            raise ToolError(msg, tool="minifier")
        self._argv = tuple(argv)

    @property
    def tool(self) -> str:
        return self._argv[0]

    def merge(self, sources: list[bytes]) -> bytes:
        joined = ConcatMinifier().merge(sources)
        try:
            completed = subprocess.run(
                self._argv,
                input=joined,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            msg = f"Unable to launch {self.tool}: {exc.strerror or exc}"
            raise ToolError(msg, tool=self.tool) from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            msg = f"{self.tool} exited with status {completed.returncode}: {stderr}"
            raise ToolError(msg, tool=self.tool)
        return completed.stdout

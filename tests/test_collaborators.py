"""Tests for tabby.collaborators — file system, generator and minifiers."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from tabby._errors import ExportIOError, GenerationError, ToolError
from tabby.collaborators import (
    CodeGenerator,
    CommandMinifier,
    ConcatMinifier,
    FileSystem,
    LocalFileSystem,
    Minifier,
    SceneCodeGenerator,
)
from tabby.project import Project, Scene


class TestLocalFileSystem:
    """LocalFileSystem — pathlib/shutil wrapper raising ExportIOError."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(LocalFileSystem(), FileSystem)

    def test_write_creates_parents(self, tmp_path: Path) -> None:
        fs = LocalFileSystem()
        target = tmp_path / "a" / "b" / "code0.js"
        assert fs.write_text(target, "x = 1;") == 6
        assert target.read_text() == "x = 1;"

    def test_write_bytes(self, tmp_path: Path) -> None:
        fs = LocalFileSystem()
        assert fs.write_bytes(tmp_path / "data.bin", b"\x00\x01") == 2

    def test_read_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ExportIOError) as exc_info:
            LocalFileSystem().read_text(tmp_path / "missing.js")
        assert exc_info.value.path == tmp_path / "missing.js"

    def test_copy(self, tmp_path: Path) -> None:
        source = tmp_path / "src.js"
        source.write_text("abc")
        fs = LocalFileSystem()
        assert fs.copy(source, tmp_path / "out" / "dst.js") == 3
        assert (tmp_path / "out" / "dst.js").read_text() == "abc"

    def test_copy_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(ExportIOError, match="not found") as exc_info:
            LocalFileSystem().copy(tmp_path / "nope.js", tmp_path / "dst.js")
        assert exc_info.value.path == tmp_path / "nope.js"

    def test_copy_onto_itself(self, tmp_path: Path) -> None:
        source = tmp_path / "same.js"
        source.write_text("abc")
        assert LocalFileSystem().copy(source, source) == 3

    def test_list_directory_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "b.js").write_text("")
        (tmp_path / "a.js").write_text("")
        assert [p.name for p in LocalFileSystem().list_directory(tmp_path)] == ["a.js", "b.js"]

    def test_mkdir_and_exists(self, tmp_path: Path) -> None:
        fs = LocalFileSystem()
        fs.mkdir(tmp_path / "x" / "y")
        assert fs.exists(tmp_path / "x" / "y")


class TestSceneCodeGenerator:
    """SceneCodeGenerator — wraps pre-compiled scene events."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(SceneCodeGenerator(), CodeGenerator)

    def test_wraps_events(self) -> None:
        scene = Scene(name="Menu", events="runtimeScene.start();")
        code = SceneCodeGenerator().generate_module_code(Project(name="G", scenes=(scene,)), scene)
        assert code.startswith("tabby.MenuCode = {};\n")
        assert "tabby.MenuCode.func = function(runtimeScene) {" in code
        assert "  runtimeScene.start();" in code

    def test_mangles_scene_name(self) -> None:
        scene = Scene(name="Level 1")
        code = SceneCodeGenerator().generate_module_code(Project(name="G", scenes=(scene,)), scene)
        assert "tabby.Level_321Code" in code

    def test_custom_namespace(self) -> None:
        scene = Scene(name="Menu")
        code = SceneCodeGenerator("game").generate_module_code(Project(name="G", scenes=(scene,)), scene)
        assert code.startswith("game.MenuCode")

    def test_unnamed_scene(self) -> None:
        scene = Scene(name="")
        with pytest.raises(GenerationError):
            SceneCodeGenerator().generate_module_code(Project(name="G", scenes=(scene,)), scene)


class TestMinifiers:
    """ConcatMinifier and CommandMinifier."""

    def test_concat_satisfies_protocol(self) -> None:
        assert isinstance(ConcatMinifier(), Minifier)

    def test_concat_joins_with_separators(self) -> None:
        assert ConcatMinifier().merge([b"a = 1\n", b"b = 2"]) == b"a = 1;\nb = 2\n"

    def test_command_requires_argv(self) -> None:
        with pytest.raises(ToolError):
            CommandMinifier([])

    def test_command_pipes_sources(self) -> None:
        completed = subprocess.CompletedProcess(["terser"], 0, stdout=b"min", stderr=b"")
        with patch("tabby.collaborators.subprocess.run", return_value=completed) as run:
            assert CommandMinifier(["terser", "-c"]).merge([b"a", b"b"]) == b"min"
        args, kwargs = run.call_args
        assert args[0] == ("terser", "-c")
        assert kwargs["input"] == b"a;\nb\n"

    def test_command_nonzero_exit(self) -> None:
        completed = subprocess.CompletedProcess(["terser"], 2, stdout=b"", stderr=b"syntax error")
        with patch("tabby.collaborators.subprocess.run", return_value=completed):
            with pytest.raises(ToolError, match="syntax error") as exc_info:
                CommandMinifier(["terser"]).merge([b"a"])
        assert exc_info.value.tool == "terser"

    def test_command_not_found(self) -> None:
        with patch("tabby.collaborators.subprocess.run", side_effect=FileNotFoundError(2, "No such file")):
            with pytest.raises(ToolError, match="Unable to launch"):
                CommandMinifier(["no-such-minifier"]).merge([b"a"])

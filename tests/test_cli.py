"""Tests for the tabby CLI."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from tabby._cli import _build_parser, _get_version, main


class TestParser:
    """Argument parsing."""

    def test_preview_defaults(self) -> None:
        args = _build_parser().parse_args(["preview", "game.yaml"])
        assert args.command == "preview"
        assert args.project == "game.yaml"
        assert args.output is None
        assert args.root == "."
        assert args.debugger is None
        assert not args.force
        assert not args.watch
        assert not args.data_only

    def test_preview_flags(self) -> None:
        args = _build_parser().parse_args([
            "preview", "game.yaml",
            "--output", "/tmp/out",
            "--debugger", "127.0.0.1:3030",
            "--scene", "Level 1",
            "--external-layout", "Hud",
            "--hashes", "hashes.json",
            "--data-only",
            "--force",
        ])
        assert args.output == "/tmp/out"
        assert args.debugger == "127.0.0.1:3030"
        assert args.scene == "Level 1"
        assert args.external_layout == "Hud"
        assert args.hashes == "hashes.json"
        assert args.data_only
        assert args.force

    def test_package_targets(self) -> None:
        args = _build_parser().parse_args(["package", "cordova", "game.yaml", "--minify"])
        assert args.target == "cordova"
        assert args.minify

    def test_package_rejects_preview(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["package", "preview", "game.yaml"])

    def test_data(self) -> None:
        args = _build_parser().parse_args(["data", "game.yaml", "out/data.js"])
        assert args.destination == "out/data.js"

    def test_version(self) -> None:
        assert _get_version()


class TestMain:
    """main() dispatch and exit codes."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "preview" in capsys.readouterr().out

    def test_failed_export_exits_1(self) -> None:
        result = MagicMock(ok=False)
        with patch("tabby.app.package", return_value=result) as package, pytest.raises(SystemExit) as exc_info:
            main(["package", "electron", "game.yaml", "--minify"])
        assert exc_info.value.code == 1
        package.assert_called_once_with("electron", "game.yaml", None, root=".", minify=True)

    def test_missing_project_exits_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["preview", str(tmp_path / "missing.yaml"), "--root", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "error:" in capsys.readouterr().err

    def test_watch_data_only_exits_1(
        self, workspace: Path, project_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([
                "preview", str(project_dir / "game.yaml"),
                "--root", str(workspace),
                "--output", str(tmp_path / "preview"),
                "--watch", "--data-only",
            ])
        assert exc_info.value.code == 1
        assert "cannot be watched" in capsys.readouterr().err
        assert not (tmp_path / "preview").exists()

    def test_end_to_end_preview(self, workspace: Path, project_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "preview"
        hashes = tmp_path / "hashes.json"
        main([
            "preview", str(project_dir / "game.yaml"),
            "--root", str(workspace),
            "--output", str(output),
            "--hashes", str(hashes),
        ])
        assert (output / "index.html").is_file()
        assert (output / "code1.js").is_file()
        assert "code0.js" in hashes.read_text()

    def test_data_command(self, project_dir: Path, tmp_path: Path) -> None:
        destination = tmp_path / "data.js"
        main(["data", str(project_dir / "game.yaml"), str(destination)])
        assert destination.read_text().startswith("tabby.projectData = ")

"""Tests for tabby._errors."""

from pathlib import Path

from tabby._errors import (
    ConfigurationError,
    ExportIOError,
    GenerationError,
    TabbyError,
    TemplateError,
    ToolError,
)


class TestErrorHierarchy:
    """All tabby errors inherit from TabbyError."""

    def test_tabby_error_is_exception(self) -> None:
        assert issubclass(TabbyError, Exception)

    def test_catch_all_tabby_errors(self) -> None:
        """All specific errors are catchable via TabbyError."""
        errors = (
            ConfigurationError("bad"),
            ExportIOError("io", path="/tmp/x"),
            GenerationError("gen", module_id="code0.js"),
            TemplateError("tpl", marker="TABBY_CODE_FILES"),
            ToolError("tool", tool="terser"),
        )
        for error in errors:
            try:
                raise error
            except TabbyError:
                pass  # caught by the base class

    def test_kinds_are_distinct(self) -> None:
        kinds = {cls.kind for cls in (ConfigurationError, ExportIOError, GenerationError, TemplateError, ToolError)}
        assert kinds == {"configuration", "io", "generation", "template", "tool"}


class TestErrorAttributes:
    """Each error names the artifact it concerns."""

    def test_message_and_stage(self) -> None:
        error = ConfigurationError("no scenes", stage="plan", artifact="Game")
        assert str(error) == "no scenes"
        assert error.message == "no scenes"
        assert error.stage == "plan"
        assert error.artifact == "Game"

    def test_stage_defaults_to_none(self) -> None:
        assert TabbyError("x").stage is None

    def test_io_error_path(self) -> None:
        error = ExportIOError("missing", path="/runtime/tabby.js")
        assert error.path == Path("/runtime/tabby.js")
        assert error.artifact == "/runtime/tabby.js"

    def test_generation_error_module(self) -> None:
        error = GenerationError("boom", module_id="code1.js")
        assert error.module_id == "code1.js"
        assert error.artifact == "code1.js"

    def test_template_error_prefers_template_as_artifact(self) -> None:
        error = TemplateError("missing", marker="TABBY_PACKAGENAME", template="cordova/config.xml")
        assert error.marker == "TABBY_PACKAGENAME"
        assert error.artifact == "cordova/config.xml"

    def test_template_error_falls_back_to_marker(self) -> None:
        error = TemplateError("missing", marker="TABBY_PACKAGENAME")
        assert error.artifact == "TABBY_PACKAGENAME"

    def test_tool_error(self) -> None:
        error = ToolError("exit 2", tool="terser")
        assert error.tool == "terser"

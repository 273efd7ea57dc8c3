"""Tests for tabby.targets.placeholders and tabby.targets.html."""

from __future__ import annotations

import pytest

from tabby._errors import TemplateError
from tabby.bundle.module import Module
from tabby.targets.html import render_index, script_tags, validate_additional_spec
from tabby.targets.placeholders import Marker, SubstitutionContext, render_template

TITLE = Marker("TABBY_TITLE", "TABBY_TITLE")
BODY = Marker("TABBY_BODY", "<!-- TABBY_BODY -->", required=True)


class TestSubstitutionContext:
    """Binding markers to renderers."""

    def test_missing_renderer(self) -> None:
        with pytest.raises(TemplateError) as exc_info:
            SubstitutionContext({TITLE, BODY}, {"TABBY_TITLE": lambda: "x"})
        assert exc_info.value.marker == "TABBY_BODY"

    def test_undeclared_renderer(self) -> None:
        with pytest.raises(TemplateError, match="undeclared marker TABBY_EXTRA"):
            SubstitutionContext({TITLE}, {"TABBY_TITLE": lambda: "x", "TABBY_EXTRA": lambda: "y"})

    def test_markers_sorted(self) -> None:
        context = SubstitutionContext({TITLE, BODY}, {"TABBY_TITLE": str, "TABBY_BODY": str})
        assert [m.name for m in context.markers] == ["TABBY_BODY", "TABBY_TITLE"]


class TestRender:
    """Rendering a template."""

    def test_substitutes_every_occurrence(self) -> None:
        context = SubstitutionContext({TITLE, BODY}, {"TABBY_TITLE": lambda: "Cat", "TABBY_BODY": lambda: "<p/>"})
        rendered = context.render("<h1>TABBY_TITLE</h1><!-- TABBY_BODY --><i>TABBY_TITLE</i>")
        assert rendered.text == "<h1>Cat</h1><p/><i>Cat</i>"
        assert rendered.substituted == ("TABBY_BODY", "TABBY_TITLE")

    def test_rendered_values_not_rescanned(self) -> None:
        text = render_template(
            "TABBY_TITLE <!-- TABBY_BODY -->",
            {TITLE, BODY},
            {"TABBY_TITLE": lambda: "<!-- TABBY_BODY -->", "TABBY_BODY": lambda: "body"},
        )
        assert text == "<!-- TABBY_BODY --> body"

    def test_absent_optional_marker_not_rendered(self) -> None:
        calls: list[str] = []

        def title() -> str:
            calls.append("title")
            return "never"

        text = render_template("<!-- TABBY_BODY -->", {TITLE, BODY}, {"TABBY_TITLE": title, "TABBY_BODY": lambda: "b"})
        assert text == "b"
        assert calls == []

    def test_missing_required_marker(self) -> None:
        with pytest.raises(TemplateError) as exc_info:
            render_template("no markers", {BODY}, {"TABBY_BODY": lambda: ""}, template_name="page.html")
        assert exc_info.value.marker == "TABBY_BODY"
        assert exc_info.value.template == "page.html"

    def test_unknown_marker(self) -> None:
        with pytest.raises(TemplateError, match="Unknown marker TABBY_MYSTERY"):
            render_template("TABBY_TITLE TABBY_MYSTERY", {TITLE}, {"TABBY_TITLE": lambda: "x"})

    def test_missing_value(self) -> None:
        with pytest.raises(TemplateError, match="No value for marker TABBY_TITLE"):
            render_template("TABBY_TITLE", {TITLE}, {"TABBY_TITLE": lambda: None})

    def test_no_markers_present(self) -> None:
        context = SubstitutionContext({TITLE}, {"TABBY_TITLE": lambda: "x"})
        rendered = context.render("plain")
        assert rendered.text == "plain"
        assert rendered.substituted == ()


INDEX = (
    "<style>/* TABBY_CUSTOM_STYLE */</style>\n"
    "<!-- TABBY_CODE_FILES -->"
    "<!-- TABBY_CUSTOM_HTML -->\n"
    "<script>start({}/*TABBY_ADDITIONAL_SPEC*/);</script>\n"
)


class TestHtml:
    """The HTML shell."""

    def test_script_tags_in_order(self) -> None:
        tags = script_tags([Module(path="tabby.js", role="runtime-core"), Module(path="code0.js", role="scene-code")])
        assert tags == (
            '\t<script src="tabby.js" crossorigin="anonymous"></script>\n'
            '\t<script src="code0.js" crossorigin="anonymous"></script>\n'
        )

    def test_script_tags_escape_paths(self) -> None:
        assert 'src="a&quot;b.js"' in script_tags([Module(path='a"b.js', role="extension-code")])

    def test_render_index(self) -> None:
        rendered = render_index(
            INDEX,
            [Module(path="tabby.js", role="runtime-core")],
            '{"initialScene": "Menu"}',
            custom_style="body{}",
        )
        assert "<style>body{}</style>" in rendered.text
        assert '<script src="tabby.js"' in rendered.text
        assert 'start({"initialScene": "Menu"});' in rendered.text
        assert "TABBY_" not in rendered.text

    def test_render_index_defaults(self) -> None:
        rendered = render_index(INDEX, [])
        assert "start({});" in rendered.text
        assert "<style></style>" in rendered.text

    def test_index_needs_code_files_marker(self) -> None:
        with pytest.raises(TemplateError) as exc_info:
            render_index("<html></html>", [])
        assert exc_info.value.marker == "TABBY_CODE_FILES"

    def test_additional_spec_validation(self) -> None:
        assert validate_additional_spec(None) == "{}"
        assert validate_additional_spec("  ") == "{}"
        assert validate_additional_spec('{"a": 1}') == '{"a": 1}'
        with pytest.raises(TemplateError, match="not valid JSON"):
            validate_additional_spec("{oops")

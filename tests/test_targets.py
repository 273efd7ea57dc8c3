"""Tests for tabby.targets — target descriptions and manifest generation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from tabby._errors import ConfigurationError, ExportIOError, TemplateError
from tabby.bundle.module import Module
from tabby.collaborators import LocalFileSystem
from tabby.config import TabbyConfig
from tabby.observability.collector import ExportCollector
from tabby.project import Extension
from tabby.targets import (
    CORDOVA,
    ELECTRON,
    FACEBOOK,
    PREVIEW,
    ManifestGenerator,
    TemplateLocator,
    bundled_templates_path,
    get_target,
)
from tabby.targets.cordova import plugins
from tabby.targets.spec import json_value, mangled_name, xml_value

if TYPE_CHECKING:
    from collections.abc import Callable

    from tabby.project import Project

MODULES = [
    Module(path="tabby.js", role="runtime-core"),
    Module(path="code0.js", role="scene-code"),
    Module(path="data.js", role="project-data", mergeable=False),
]


@pytest.fixture
def generator(config: TabbyConfig) -> ManifestGenerator:
    fs = LocalFileSystem()
    return ManifestGenerator(fs, TemplateLocator.for_config(fs, config))


class TestGetTarget:
    """Target lookup."""

    def test_known_targets(self) -> None:
        assert get_target("preview") is PREVIEW
        assert get_target("cordova") is CORDOVA
        assert get_target("electron") is ELECTRON
        assert get_target("facebook") is FACEBOOK

    def test_unknown_target(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            get_target("playstation")
        assert exc_info.value.stage == "validate"

    def test_only_cordova_has_web_dir(self) -> None:
        assert CORDOVA.web_dir == "www"
        assert PREVIEW.web_dir == ELECTRON.web_dir == FACEBOOK.web_dir == ""


class TestValueHelpers:
    """Escaping helpers used by the renderers."""

    def test_xml_value(self) -> None:
        assert xml_value('Cat & "Dog"') == "Cat &amp; &quot;Dog&quot;"
        assert xml_value("  ") is None

    def test_json_value(self) -> None:
        assert json_value('Say "hi"') == '"Say \\"hi\\""'
        assert json_value("") is None
        assert json_value(0) == "0"

    def test_mangled_name(self) -> None:
        assert mangled_name("Space Cat: Returns!") == "space-cat-returns"
        assert mangled_name("!!!") == "game"


class TestTemplateLocator:
    """Template lookup with user overrides."""

    def test_falls_back_to_bundled(self, config: TabbyConfig) -> None:
        locator = TemplateLocator.for_config(LocalFileSystem(), config)
        assert locator.dirs == (config.templates_path, bundled_templates_path())
        assert locator.find("preview/index.html") == bundled_templates_path() / "preview" / "index.html"

    def test_user_override(self, config: TabbyConfig) -> None:
        override = config.templates_path / "preview" / "index.html"
        override.parent.mkdir(parents=True)
        override.write_text("<!-- TABBY_CODE_FILES -->")
        locator = TemplateLocator.for_config(LocalFileSystem(), config)
        assert locator.read("preview/index.html") == "<!-- TABBY_CODE_FILES -->"

    def test_missing_template(self, config: TabbyConfig) -> None:
        locator = TemplateLocator.for_config(LocalFileSystem(), config)
        with pytest.raises(ExportIOError) as exc_info:
            locator.find("switch/index.html")
        assert exc_info.value.stage == "manifest"


class TestIndex:
    """The HTML shell of each target."""

    def test_preview_index(self, generator: ManifestGenerator, output_root: Path) -> None:
        record = generator.write_index(PREVIEW, MODULES, output_root)
        html = (output_root / "index.html").read_text()
        assert record.output_path == output_root / "index.html"
        assert html.index('src="tabby.js"') < html.index('src="code0.js"') < html.index('src="data.js"')
        assert "TABBY_" not in html

    def test_cordova_index_in_www(self, generator: ManifestGenerator, output_root: Path) -> None:
        generator.write_index(CORDOVA, MODULES, output_root)
        html = (output_root / "www" / "index.html").read_text()
        assert 'src="cordova.js"' in html
        assert html.index('src="cordova.js"') < html.index('src="tabby.js"')

    def test_invalid_additional_spec(self, generator: ManifestGenerator, output_root: Path) -> None:
        with pytest.raises(TemplateError):
            generator.write_index(PREVIEW, MODULES, output_root, "{not json")


class TestCordova:
    """config.xml and package.json."""

    def test_config_xml(self, generator: ManifestGenerator, project: Project, output_root: Path) -> None:
        generator.generate(CORDOVA, project, MODULES, output_root)
        config_xml = (output_root / "config.xml").read_text()
        assert '<widget id="com.example.spacecat" version="1.2.0"' in config_xml
        assert "<name>Space Cat</name>" in config_xml
        assert '<preference name="Orientation" value="landscape" />' in config_xml
        assert '<icon src="www/icons/player.png" density="mdpi" />' in config_xml
        assert '<icon src="www/icons/player.png" width="180" height="180" />' in config_xml
        assert '<plugin name="cordova-plugin-vibration" />' in config_xml
        assert "TABBY_" not in config_xml

    def test_package_json(self, generator: ManifestGenerator, project: Project, output_root: Path) -> None:
        generator.generate(CORDOVA, project, MODULES, output_root)
        package = json.loads((output_root / "package.json").read_text())
        assert package["name"] == "space-cat"
        assert package["displayName"] == "Space Cat"
        assert package["version"] == "1.2.0"
        assert package["author"] == "Tabby Team"

    def test_escapes_project_name(
        self, generator: ManifestGenerator, make_project: Callable[..., Project], output_root: Path,
    ) -> None:
        project = make_project("Main", name="Cats & <Dogs>", package_name="com.example.cd", author="Me")
        generator.generate(CORDOVA, project, MODULES, output_root)
        assert "<name>Cats &amp; &lt;Dogs&gt;</name>" in (output_root / "config.xml").read_text()

    def test_empty_package_name(
        self, generator: ManifestGenerator, make_project: Callable[..., Project], output_root: Path,
    ) -> None:
        project = make_project("Main", author="Me")
        with pytest.raises(TemplateError) as exc_info:
            generator.generate(CORDOVA, project, MODULES, output_root)
        assert exc_info.value.marker == "TABBY_PACKAGENAME"
        assert exc_info.value.template == "cordova/config.xml"

    def test_plugins_deduplicated(self, make_project: Callable[..., Project]) -> None:
        project = make_project("Main", extensions=(
            Extension(name="A", cordova_plugins=("p1", "p2")),
            Extension(name="B", cordova_plugins=("p2", "p3")),
        ))
        assert plugins(project) == '\t<plugin name="p1" />\n\t<plugin name="p2" />\n\t<plugin name="p3" />\n'


class TestElectron:
    """main.js, package.json and the desktop icon."""

    def test_main_js(self, generator: ManifestGenerator, project: Project, output_root: Path) -> None:
        (output_root / "icons").mkdir(parents=True)
        (output_root / "icons" / "icon-512.png").write_bytes(b"icon")
        generator.generate(ELECTRON, project, MODULES, output_root)
        main_js = (output_root / "main.js").read_text()
        assert "width: 1280," in main_js
        assert "height: 720," in main_js
        assert 'title: "Space Cat",' in main_js

    def test_package_json(self, generator: ManifestGenerator, project: Project, output_root: Path) -> None:
        (output_root / "icons").mkdir(parents=True)
        (output_root / "icons" / "icon-512.png").write_bytes(b"icon")
        generator.generate(ELECTRON, project, MODULES, output_root)
        package = json.loads((output_root / "package.json").read_text())
        assert package["name"] == "space-cat"
        assert package["build"]["appId"] == "com.example.spacecat"

    def test_icon_copied(self, generator: ManifestGenerator, project: Project, output_root: Path) -> None:
        (output_root / "icons").mkdir(parents=True)
        (output_root / "icons" / "icon-512.png").write_bytes(b"icon")
        files = generator.generate(ELECTRON, project, MODULES, output_root)
        assert (output_root / "buildResources" / "icon.png").read_bytes() == b"icon"
        assert files[0].output_path == output_root / "index.html"

    def test_no_icon(
        self, generator: ManifestGenerator, make_project: Callable[..., Project], output_root: Path,
    ) -> None:
        project = make_project("Main", package_name="com.example.x", author="Me")
        generator.generate(ELECTRON, project, MODULES, output_root)
        assert not (output_root / "buildResources").exists()


class TestFacebook:
    """fbapp-config.json orientation."""

    @pytest.mark.parametrize(
        ("orientation", "expected"),
        [("portrait", "PORTRAIT"), ("landscape", "LANDSCAPE"), ("default", "LANDSCAPE")],
    )
    def test_orientation(
        self,
        generator: ManifestGenerator,
        make_project: Callable[..., Project],
        output_root: Path,
        orientation: str,
        expected: str,
    ) -> None:
        generator.generate(FACEBOOK, make_project("Main", orientation=orientation), MODULES, output_root)
        config = json.loads((output_root / "fbapp-config.json").read_text())
        assert config["instant_games"]["orientation"] == expected

    def test_collector_records_documents(
        self, config: TabbyConfig, make_project: Callable[..., Project], output_root: Path,
    ) -> None:
        fs = LocalFileSystem()
        collector = ExportCollector()
        ManifestGenerator(fs, TemplateLocator.for_config(fs, config), collector=collector).generate(
            FACEBOOK, make_project("Main"), MODULES, output_root,
        )
        assert len(collector.log) == 2

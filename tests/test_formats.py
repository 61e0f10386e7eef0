"""Tests for bumpkit.formats."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from ruamel.yaml import YAML

from bumpkit.errors import (
    InvalidUpdaterError,
    MalformedContentError,
    UpdaterFailedError,
    VersionFieldNotFoundError,
)
from bumpkit.formats import (
    CsprojUpdater,
    CustomUpdater,
    GradleUpdater,
    JsonUpdater,
    MavenUpdater,
    OpenApiUpdater,
    PlainTextUpdater,
    PyprojectUpdater,
    PythonUpdater,
    YamlUpdater,
    detect_indent,
    detect_newline,
)


class TestDetection:
    """Tests for detect_newline() and detect_indent()."""

    def test_newline_majority(self) -> None:
        assert detect_newline("a\r\nb\r\nc\n") == "\r\n"
        assert detect_newline("a\nb\r\n") == "\n"
        assert detect_newline("single line") == "\n"

    def test_indent(self) -> None:
        assert detect_indent('{\n    "a": 1\n}') == "    "
        assert detect_indent('{\n\t"a": 1\n}') == "\t"
        assert detect_indent('{"a": 1}') == "  "


class TestJsonUpdater:
    """Tests for JsonUpdater."""

    updater = JsonUpdater()

    def test_reads_version(self, package_json: str) -> None:
        assert self.updater.read_version(package_json) == "1.0.0"

    def test_writes_only_version(self, package_json: str) -> None:
        result = self.updater.write_version(package_json, "1.1.0")
        assert result == package_json.replace('"1.0.0"', '"1.1.0"')

    @pytest.mark.parametrize("indent", ["  ", "    ", "\t"])
    def test_preserves_indent(self, indent: str) -> None:
        content = f'{{\n{indent}"name": "demo",\n{indent}"version": "1.0.0"\n}}\n'
        result = self.updater.write_version(content, "2.0.0")
        assert result == content.replace("1.0.0", "2.0.0")

    def test_preserves_crlf(self) -> None:
        content = '{\r\n  "version": "1.0.0"\r\n}\r\n'
        result = self.updater.write_version(content, "1.0.1")
        assert result == '{\r\n  "version": "1.0.1"\r\n}\r\n'

    def test_updates_lockfile_root_package(self) -> None:
        content = (
            '{\n  "name": "demo",\n  "version": "1.0.0",\n  "lockfileVersion": 3,\n'
            '  "packages": {\n    "": {\n'
            '      "name": "demo",\n      "version": "1.0.0"\n    }\n  }\n}\n'
        )
        result = self.updater.write_version(content, "1.1.0")
        assert result.count('"version": "1.1.0"') == 2
        assert "1.0.0" not in result

    def test_keeps_unicode(self) -> None:
        content = '{\n  "author": "Zoë",\n  "version": "1.0.0"\n}\n'
        assert '"Zoë"' in self.updater.write_version(content, "1.0.1")

    def test_missing_version(self) -> None:
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.read_version('{"name": "demo"}')

    def test_malformed(self) -> None:
        with pytest.raises(MalformedContentError):
            self.updater.read_version("{not json")
        with pytest.raises(MalformedContentError):
            self.updater.read_version('["1.0.0"]')


class TestPlainTextUpdater:
    """Tests for PlainTextUpdater."""

    def test_round_trip(self) -> None:
        updater = PlainTextUpdater()
        assert updater.read_version("1.0.0\n") == "1.0.0"
        assert updater.write_version("1.0.0\n", "1.1.0") == "1.1.0"


class TestMavenUpdater:
    """Tests for MavenUpdater."""

    updater = MavenUpdater()

    def test_reads_project_version(self, pom_xml: str) -> None:
        assert self.updater.read_version(pom_xml) == "1.0.0"

    def test_writes_only_project_version(self, pom_xml: str) -> None:
        result = self.updater.write_version(pom_xml, "1.1.0")
        assert result == pom_xml.replace(
            "<version>1.0.0</version>", "<version>1.1.0</version>"
        )
        assert "<version>9.9.9</version>" in result
        assert "<version>2.0.0</version>" in result

    def test_preserves_crlf(self, pom_xml: str) -> None:
        content = pom_xml.replace("\n", "\r\n")
        result = self.updater.write_version(content, "1.1.0")
        assert result == content.replace(
            "<version>1.0.0</version>", "<version>1.1.0</version>"
        )

    def test_parent_version_is_not_project_version(self) -> None:
        content = "<project><parent><version>9.9.9</version></parent></project>"
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.read_version(content)

    def test_malformed(self) -> None:
        with pytest.raises(MalformedContentError):
            self.updater.read_version("<project><version>1.0.0</project>")


class TestGradleUpdater:
    """Tests for GradleUpdater."""

    updater = GradleUpdater()

    def test_kotlin_dsl(self) -> None:
        content = (
            'plugins {\n    id("java")\n}\n\ngroup = "org.example"\nversion = "1.0.0"\n'
        )
        assert self.updater.read_version(content) == "1.0.0"
        result = self.updater.write_version(content, "1.1.0")
        assert result == content.replace("1.0.0", "1.1.0")

    def test_groovy_single_quotes(self) -> None:
        content = "apply plugin: 'java'\nversion '1.0.0'\nsourceCompatibility = '11'\n"
        result = self.updater.write_version(content, "2.0.0")
        assert result == content.replace("1.0.0", "2.0.0")

    def test_ignores_other_versions(self) -> None:
        content = 'ext {\n    springVersion = "5.0.0"\n}\nversion = "1.0.0"\n'
        assert self.updater.read_version(content) == "1.0.0"

    def test_missing_version(self) -> None:
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.read_version('group = "org.example"\n')


class TestCsprojUpdater:
    """Tests for CsprojUpdater."""

    def test_round_trip(self) -> None:
        updater = CsprojUpdater()
        content = (
            '<Project Sdk="Microsoft.NET.Sdk">\n  <PropertyGroup>\n'
            "    <Version>1.0.0</Version>\n  </PropertyGroup>\n</Project>\n"
        )
        assert updater.read_version(content) == "1.0.0"
        result = updater.write_version(content, "1.0.1")
        assert result == content.replace("1.0.0", "1.0.1")


class TestYamlUpdater:
    """Tests for YamlUpdater."""

    updater = YamlUpdater()

    def test_keeps_comments(self) -> None:
        content = (
            "name: app\n# release version\nversion: 1.0.0 # bumped by CI\n"
            "description: demo\n"
        )
        assert self.updater.read_version(content) == "1.0.0"
        result = self.updater.write_version(content, "1.1.0")
        assert result == content.replace("1.0.0", "1.1.0")

    def test_keeps_quotes(self) -> None:
        content = "name: app\nversion: '1.0.0'\n"
        result = self.updater.write_version(content, "1.1.0")
        assert result == "name: app\nversion: '1.1.0'\n"

    def test_crlf(self) -> None:
        content = "name: app\r\nversion: 1.0.0\r\n"
        result = self.updater.write_version(content, "1.1.0")
        assert result == "name: app\r\nversion: 1.1.0\r\n"

    def test_anchored_version_is_redumped(self) -> None:
        content = "name: app\nversion: &v 1.0.0\nother: *v\n"
        result = self.updater.write_version(content, "2.0.0")
        assert self.updater.read_version(result) == "2.0.0"
        assert YAML(typ="safe").load(result)["other"] == "1.0.0"
        assert result.startswith("name: app\n")

    def test_null_version_is_redumped(self) -> None:
        content = "name: app\nversion:\n"
        result = self.updater.write_version(content, "2.0.0")
        assert self.updater.read_version(result) == "2.0.0"
        assert YAML(typ="safe").load(result) == {"name": "app", "version": "2.0.0"}

    def test_null_version_keeps_crlf(self) -> None:
        result = self.updater.write_version("name: app\r\nversion:\r\n", "2.0.0")
        assert "\r\n" in result
        assert "\n" not in result.replace("\r\n", "")

    def test_adds_missing_version(self) -> None:
        result = self.updater.write_version("name: app\n", "1.0.0")
        assert self.updater.read_version(result) == "1.0.0"
        assert result.startswith("name: app\n")

    def test_missing_version(self) -> None:
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.read_version("name: app\n")


class TestOpenApiUpdater:
    """Tests for OpenApiUpdater."""

    updater = OpenApiUpdater()
    content = (
        "openapi: 3.0.0\n"
        "info:\n"
        "  title: Demo API\n"
        "  version: 1.0.0\n"
        "paths: {}\n"
    )

    def test_round_trip(self) -> None:
        assert self.updater.read_version(self.content) == "1.0.0"
        result = self.updater.write_version(self.content, "1.1.0")
        assert result == self.content.replace("1.0.0", "1.1.0")
        assert result.startswith("openapi: 3.0.0\n")

    def test_missing_info(self) -> None:
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.read_version("openapi: 3.0.0\n")


class TestPythonUpdater:
    """Tests for PythonUpdater."""

    updater = PythonUpdater()

    def test_setup_py(self) -> None:
        content = (
            "from setuptools import setup\n\n"
            'setup(\n    name="demo",\n    version="1.0.0",\n)\n'
        )
        assert self.updater.read_version(content) == "1.0.0"
        result = self.updater.write_version(content, "1.1.0")
        assert result == content.replace("1.0.0", "1.1.0")

    def test_dunder_version(self) -> None:
        content = "__version__ = '1.0.0'\n"
        assert self.updater.read_version(content) == "1.0.0"
        assert self.updater.write_version(content, "2.0.0") == "__version__ = '2.0.0'\n"

    def test_first_match_only(self) -> None:
        content = 'VERSION = "1.0.0"\nother_version = "1.0.0"\n'
        result = self.updater.write_version(content, "1.0.1")
        assert result == 'VERSION = "1.0.1"\nother_version = "1.0.0"\n'

    def test_no_version_line(self) -> None:
        assert self.updater.read_version("print('hi')\n") is None
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.write_version("print('hi')\n", "1.0.0")


class TestPyprojectUpdater:
    """Tests for PyprojectUpdater."""

    updater = PyprojectUpdater()

    def test_project_table(self) -> None:
        content = (
            '[project]\nname = "demo"\nversion = "1.0.0"\n\n'
            '[tool.other]\nversion = "9.9.9"\n'
        )
        assert self.updater.read_version(content) == "1.0.0"
        result = self.updater.write_version(content, "1.1.0")
        assert result == content.replace('"1.0.0"', '"1.1.0"')

    def test_poetry_table(self) -> None:
        content = '[tool.poetry]\nname = "demo"\nversion = "0.3.0"\n'
        result = self.updater.write_version(content, "0.4.0")
        assert result == content.replace("0.3.0", "0.4.0")

    def test_dynamic_version(self) -> None:
        with pytest.raises(VersionFieldNotFoundError):
            self.updater.read_version(
                '[project]\nname = "demo"\ndynamic = ["version"]\n'
            )


class TestCustomUpdater:
    """Tests for CustomUpdater."""

    def test_wraps_object(self) -> None:
        obj = SimpleNamespace(
            read_version=lambda content: content.split("=")[1].strip(),
            write_version=lambda content, version: f"VERSION={version}",
        )
        updater = CustomUpdater.from_object(obj, source="inline")
        assert updater.read_version("VERSION=1.0.0") == "1.0.0"
        assert updater.write_version("VERSION=1.0.0", "1.0.1") == "VERSION=1.0.1"

    def test_rejects_incomplete_object(self) -> None:
        with pytest.raises(InvalidUpdaterError):
            CustomUpdater.from_object(SimpleNamespace(read_version=lambda c: c))

    def test_wraps_read_failure(self) -> None:
        def read(content: str) -> str:
            raise KeyError("version")

        updater = CustomUpdater(read, lambda content, version: version, "broken")
        with pytest.raises(UpdaterFailedError) as excinfo:
            updater.read_version("anything")
        assert isinstance(excinfo.value.__cause__, KeyError)
        assert "broken" in str(excinfo.value)

    def test_wraps_write_failure(self) -> None:
        def write(content: str, version: str) -> str:
            raise RuntimeError("disk on fire")

        updater = CustomUpdater(lambda content: content, write, "broken")
        with pytest.raises(UpdaterFailedError) as excinfo:
            updater.write_version("1.0.0", "1.0.1")
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert "disk on fire" in str(excinfo.value)

    def test_rejects_non_text_result(self) -> None:
        updater = CustomUpdater(lambda content: content, lambda c, v: None, "lazy")
        with pytest.raises(UpdaterFailedError, match="NoneType"):
            updater.write_version("1.0.0", "1.0.1")

    def test_version_read_errors_pass_through(self) -> None:
        def read(content: str) -> str:
            raise VersionFieldNotFoundError("no version here")

        updater = CustomUpdater(read, lambda content, version: version, "strict")
        with pytest.raises(VersionFieldNotFoundError):
            updater.read_version("")

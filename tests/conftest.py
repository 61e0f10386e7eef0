"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import tomlkit


def write(root: Path, name: str, content: str) -> Path:
    """Write content to root/name byte for byte (no newline translation)."""
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
    return path


def read(path: Path) -> str:
    return path.read_bytes().decode("utf-8")


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory that is also the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def not_ignored() -> Iterator[MagicMock]:
    """Treat every file as tracked by git."""
    with patch("bumpkit.bump.git_succeeds", return_value=False) as mock:
        yield mock


@pytest.fixture
def package_json() -> str:
    return '{\n  "name": "demo",\n  "version": "1.0.0",\n  "private": true\n}\n'


@pytest.fixture
def pom_xml() -> str:
    return """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <!-- inherited settings -->
  <parent>
    <groupId>org.example</groupId>
    <artifactId>parent</artifactId>
    <version>9.9.9</version>
  </parent>
  <modelVersion>4.0.0</modelVersion>
  <artifactId>demo</artifactId>
  <version>1.0.0</version>
  <dependencies>
    <dependency>
      <groupId>org.example</groupId>
      <artifactId>lib</artifactId>
      <version>2.0.0</version>
    </dependency>
  </dependencies>
</project>
"""


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[tool.bumpkit]
tag-prefix = "release-"
skip = { tag = true }
"""
    return tomlkit.parse(content)

"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from ripple.models import PackageInfo
from ripple.scopes import ScopeRegistry


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
[project]
name = "test-package"
version = "1.0.0"
dependencies = [
    "requests>=2.0",
    "internal-dep>=1.0",
]

[project.optional-dependencies]
dev = ["pytest>=8.0", "another-internal>=0.5"]

[dependency-groups]
test = ["pytest>=8.0", "group-internal>=0.1"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[project.optional-dependencies]
dev = ["pytest>=8.0"]
docs = ["sphinx>=7.0"]

[dependency-groups]
test = ["hypothesis>=6.0"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
"""
    return tomlkit.parse(content)


@pytest.fixture
def registry() -> ScopeRegistry:
    """Root scope plus two member packages."""
    scopes = ScopeRegistry()
    scopes.register(".", "root")
    scopes.register("pkg-a", "pkg-a")
    scopes.register("pkg-b", "pkg-b")
    return scopes


@pytest.fixture
def two_packages() -> list[PackageInfo]:
    """Workspace root, pkg-a, and pkg-b depending on pkg-a."""
    return [
        PackageInfo(path="."),
        PackageInfo(path="pkg-a", name="pkg-a", version="0.3.1", deps=["requests"]),
        PackageInfo(path="pkg-b", name="pkg-b", version="1.2.0", deps=["pkg-a"]),
    ]


@pytest.fixture
def uv_workspace(tmp_path: Path) -> Path:
    """A uv workspace: pkg-a, pkg-b depending on pkg-a, pkg-c standalone."""
    (tmp_path / "pyproject.toml").write_text(
        '[tool.uv.workspace]\nmembers = ["packages/*"]\n'
    )
    packages = {
        "pkg-a": ("0.3.1", ["requests>=2.0"]),
        "pkg-b": ("1.2.0", ["pkg-a>=0.3.1"]),
        "pkg-c": ("2.0.0", []),
    }
    for name, (version, deps) in packages.items():
        package_dir = tmp_path / "packages" / name
        package_dir.mkdir(parents=True)
        dep_list = ", ".join(f'"{d}"' for d in deps)
        (package_dir / "pyproject.toml").write_text(
            f'[project]\nname = "{name}"\nversion = "{version}"\n'
            f"dependencies = [{dep_list}]\n"
        )
    return tmp_path

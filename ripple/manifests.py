"""Workspace manifests for the supported ecosystems.

Each ecosystem has an adapter that knows how to read a manifest (name,
version, dependency names, workspace members) and how to rewrite it with
new versions. The rest of ripple never looks at manifest syntax; the
adapter is chosen once per run and passed through the pipeline.
"""

from __future__ import annotations

import glob
import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import tomlkit
from pydantic import BaseModel, Field

from .deps import dep_canonical_name, rewrite_pyproject
from .errors import ManifestError
from .models import PackageInfo
from .toml import (
    get_all_dependency_strings,
    get_project_name,
    get_project_version,
    get_workspace_member_globs,
    load_toml,
    save_toml,
)


class ManifestData(BaseModel):
    """What ripple needs to know about a single manifest."""

    name: str | None = None
    version: str | None = None
    deps: list[str] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)


class ManifestAdapter(Protocol):
    """Reads and rewrites manifests of one ecosystem."""

    filename: str

    def read(self, path: Path) -> ManifestData: ...

    def rewrite(self, path: Path, versions: Mapping[str, str]) -> bool: ...


class UvManifest:
    """pyproject.toml in a uv workspace."""

    filename = "pyproject.toml"

    def read(self, path: Path) -> ManifestData:
        doc = load_toml(path)
        deps: list[str] = []
        for dep_str in get_all_dependency_strings(doc):
            name = dep_canonical_name(dep_str)
            if name not in deps:
                deps.append(name)
        return ManifestData(
            name=get_project_name(doc),
            version=get_project_version(doc),
            deps=deps,
            members=get_workspace_member_globs(doc),
        )

    def rewrite(self, path: Path, versions: Mapping[str, str]) -> bool:
        return rewrite_pyproject(path, versions)


class CargoManifest:
    """Cargo.toml of a crate or Cargo workspace."""

    filename = "Cargo.toml"
    dependency_tables = ("dependencies", "dev-dependencies", "build-dependencies")

    def read(self, path: Path) -> ManifestData:
        doc = load_toml(path)
        package = doc.get("package", {})
        version = package.get("version")
        deps: list[str] = []
        for section in self.dependency_tables:
            for name in doc.get(section, {}):
                if name not in deps:
                    deps.append(name)
        members = doc.get("workspace", {}).get("members", [])
        return ManifestData(
            name=str(package["name"]) if "name" in package else None,
            # Versions inherited via `version.workspace = true` are not tracked
            version=str(version) if isinstance(version, str) else None,
            deps=deps,
            members=[str(m) for m in members],
        )

    def rewrite(self, path: Path, versions: Mapping[str, str]) -> bool:
        doc = load_toml(path)
        before = doc.as_string()

        package = doc.get("package")
        if package is not None:
            name = package.get("name")
            if name in versions and isinstance(package.get("version"), str):
                package["version"] = versions[name]

        for section in self.dependency_tables:
            self._update_table(doc.get(section), versions)
        self._update_table(doc.get("workspace", {}).get("dependencies"), versions)

        if doc.as_string() == before:
            return False
        save_toml(path, doc)
        return True

    @staticmethod
    def _update_table(table: Any, versions: Mapping[str, str]) -> None:
        if table is None:
            return
        for name in list(table.keys()):
            if name not in versions:
                continue
            item = table[name]
            if isinstance(item, str):
                table[name] = versions[name]
            elif isinstance(item, dict):
                # Inherited from [workspace.dependencies], updated there
                if item.get("workspace"):
                    continue
                item["version"] = versions[name]


class NpmManifest:
    """package.json of an npm workspace."""

    filename = "package.json"
    dependency_tables = ("dependencies", "devDependencies")

    # Range operator kept when a dependency version is rewritten
    _RANGE_PREFIX = re.compile(r"^(\^|~|>=|<=|>|<|=)?\s*\d")

    def read(self, path: Path) -> ManifestData:
        data = self._load(path)
        deps: list[str] = []
        for section in self.dependency_tables:
            for name in data.get(section, {}):
                if name not in deps:
                    deps.append(name)
        members = data.get("workspaces", [])
        if isinstance(members, dict):
            members = members.get("packages", [])
        return ManifestData(
            name=data.get("name"),
            version=data.get("version"),
            deps=deps,
            members=list(members),
        )

    def rewrite(self, path: Path, versions: Mapping[str, str]) -> bool:
        data = self._load(path)
        changed = False

        if data.get("name") in versions and data.get("version"):
            data["version"] = versions[data["name"]]
            changed = True

        for section in self.dependency_tables:
            table = data.get(section, {})
            for name, spec in table.items():
                if name not in versions:
                    continue
                # Protocols like "workspace:*" or "file:../a" are left alone
                match = self._RANGE_PREFIX.match(spec)
                if match:
                    table[name] = f"{match.group(1) or ''}{versions[name]}"
                    changed = True

        if changed:
            path.write_text(json.dumps(data, indent=2) + "\n")
        return changed

    @staticmethod
    def _load(path: Path) -> dict:
        return json.loads(path.read_text())


ADAPTERS: dict[str, ManifestAdapter] = {
    "uv": UvManifest(),
    "cargo": CargoManifest(),
    "npm": NpmManifest(),
}


def detect_ecosystem(root: Path) -> str:
    """Guess the ecosystem from the manifest at the workspace root.

    Raises:
        ManifestError: If no supported root manifest is found.
    """
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        doc = tomlkit.parse(pyproject.read_text())
        if get_workspace_member_globs(doc):
            return "uv"
    if (root / "Cargo.toml").exists():
        return "cargo"
    if (root / "package.json").exists():
        return "npm"
    if pyproject.exists():
        return "uv"
    raise ManifestError(f"No pyproject.toml, Cargo.toml or package.json in {root}")


def get_adapter(ecosystem: str) -> ManifestAdapter:
    try:
        return ADAPTERS[ecosystem]
    except KeyError:
        raise ManifestError(f"Unsupported ecosystem: {ecosystem}") from None


def discover_workspace(root: Path, adapter: ManifestAdapter) -> list[PackageInfo]:
    """Read the root manifest and every workspace member below it.

    Member globs are expanded relative to the manifest declaring them, and
    members may declare workspaces of their own. Directories matching a
    glob but lacking a manifest are skipped.

    Args:
        root: Workspace root directory.
        adapter: Manifest adapter of the workspace's ecosystem.

    Returns:
        One PackageInfo per manifest, root first, then in discovery order.

    Raises:
        ManifestError: If the root manifest does not exist.
    """
    root = root.resolve()
    if not (root / adapter.filename).exists():
        raise ManifestError(f"No {adapter.filename} found in {root}")

    packages: list[PackageInfo] = []
    seen: set[Path] = set()
    stack = [root]
    while stack:
        directory = stack.pop(0)
        if directory in seen:
            continue
        seen.add(directory)

        data = adapter.read(directory / adapter.filename)
        rel = directory.relative_to(root).as_posix()
        packages.append(
            PackageInfo(path=rel, name=data.name, version=data.version, deps=data.deps)
        )

        # Expand globs to find member package directories
        for pattern in data.members:
            for match in sorted(glob.glob(str(directory / pattern))):
                member = Path(match).resolve()
                if (member / adapter.filename).exists() and member not in seen:
                    stack.append(member)

    return packages


def rewrite_workspace(
    root: Path,
    adapter: ManifestAdapter,
    packages: list[PackageInfo],
    versions: Mapping[str, str],
) -> list[Path]:
    """Apply new versions to every manifest; returns the files changed."""
    changed: list[Path] = []
    for info in packages:
        path = root / info.path / adapter.filename
        if adapter.rewrite(path, versions):
            changed.append(path)
    return changed

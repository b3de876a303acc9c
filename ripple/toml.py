"""pyproject.toml access on top of tomlkit.

Documents are kept as tomlkit objects so that rewriting a version leaves
comments, ordering and quoting of the rest of the file intact.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from packaging.utils import canonicalize_name


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    return tomlkit.parse(path.read_text())


def save_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    path.write_text(tomlkit.dumps(doc))


def _table(doc: Any, *keys: str) -> Any:
    """Walk nested tables, yielding {} for any missing level."""
    for key in keys:
        doc = doc.get(key, {})
    return doc


def get_project_name(doc: tomlkit.TOMLDocument) -> str | None:
    """PEP 503 name of the package, None for a bare workspace root."""
    name = _table(doc, "project").get("name")
    return canonicalize_name(name) if name else None


def get_project_version(doc: tomlkit.TOMLDocument) -> str | None:
    version = _table(doc, "project").get("version")
    return str(version) if version else None


def get_all_dependency_strings(doc: tomlkit.TOMLDocument) -> list[str]:
    """Every PEP 508 requirement the manifest declares.

    Runtime dependencies come first, then each extra, then each PEP 735
    group. `{include-group = ...}` entries are not requirements and are
    dropped.
    """
    project = _table(doc, "project")
    groups = [
        project.get("dependencies", []),
        *project.get("optional-dependencies", {}).values(),
        *_table(doc, "dependency-groups").values(),
    ]
    return [str(dep) for group in groups for dep in group if isinstance(dep, str)]


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Member patterns of [tool.uv.workspace]; empty outside a workspace."""
    return [str(m) for m in _table(doc, "tool", "uv", "workspace").get("members", [])]


def get_tool_table(doc: tomlkit.TOMLDocument, name: str) -> dict:
    """[tool.<name>] unwrapped into plain Python values."""
    table = _table(doc, "tool", name)
    return table.unwrap() if hasattr(table, "unwrap") else dict(table)

"""Release pipeline: discover → changeset → propagate → rewrite → commit.

This module orchestrates the ripple release process:
1. Discover all packages in the workspace
2. Register each package directory as a scope
3. Collect the changeset of unreleased (or a given version's) commits
4. Propagate increments through the dependency graph, asking for a
   decision wherever a package has a choice
5. Rewrite manifests with the new versions
6. Commit the version bumps with the changelog as message body

Nothing is written until every package has been resolved, so aborting a
decision leaves the workspace untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from .changelog import render_changelog
from .changeset import Changeset, ChangesetBuilder
from .config import RippleConfig, load_config
from .errors import RippleError
from .graph import DependencyGraph, build_dependency_graph
from .manifests import (
    ManifestAdapter,
    detect_ecosystem,
    discover_workspace,
    get_adapter,
    rewrite_workspace,
)
from .models import PackageInfo, VersionBump
from .propagate import DecideFn, propagate
from .repository import commits_for_version, unreleased_commits
from .scopes import ScopeRegistry
from .shell import git, info, step


class Workspace:
    """A discovered workspace: root, settings, manifest adapter, packages."""

    def __init__(
        self,
        root: Path,
        config: RippleConfig,
        adapter: ManifestAdapter,
        packages: list[PackageInfo],
    ) -> None:
        self.root = root
        self.config = config
        self.adapter = adapter
        self.packages = packages
        self._graph: DependencyGraph | None = None

    @property
    def graph(self) -> DependencyGraph:
        if self._graph is None:
            self._graph = build_dependency_graph(self.packages)
        return self._graph

    def package(self, name: str) -> PackageInfo:
        for pkg in self.packages:
            if pkg.name == name:
                return pkg
        raise RippleError(f"Unknown package: {name}")


def discover_packages(root: Path, adapter: ManifestAdapter) -> list[PackageInfo]:
    """Scan the workspace and discover all packages.

    Returns:
        PackageInfo for the root manifest and every member, in discovery order.
    """
    step("Discovering workspace packages")

    packages = discover_workspace(root, adapter)
    names = {p.name for p in packages if p.name}

    # Print discovered packages for user feedback
    for p in packages:
        internal = [d for d in p.deps if d in names and d != p.name]
        deps = f" → [{', '.join(internal)}]" if internal else ""
        label = p.name or "<workspace>"
        info(f"{label} {p.version or '-'} ({p.path}){deps}")

    return packages


def open_workspace(root: Path) -> Workspace:
    """Load configuration and discover the workspace at root."""
    root = root.resolve()
    config = load_config(root)
    ecosystem = config.ecosystem or detect_ecosystem(root)
    adapter = get_adapter(ecosystem)
    return Workspace(root, config, adapter, discover_packages(root, adapter))


def build_scopes(packages: list[PackageInfo], root: Path) -> ScopeRegistry:
    """Register every package directory as a scope.

    Unnamed manifests (workspace roots) are registered under their
    directory name so their files are still attributed somewhere, but as
    non-package scopes that never show up by name.
    """
    scopes = ScopeRegistry()
    for p in packages:
        fallback = root.name if p.path == "." else Path(p.path).name
        scopes.register(p.path, p.name or fallback, is_package=p.name is not None)
    return scopes


def collect_changeset(workspace: Workspace, version: str | None = None) -> Changeset:
    """Build the changeset of a released version, or of unreleased commits."""
    prefix = workspace.config.tag_prefix
    if version:
        commits = commits_for_version(version, prefix, cwd=workspace.root)
    else:
        commits = unreleased_commits(prefix, cwd=workspace.root)

    builder = ChangesetBuilder(
        build_scopes(workspace.packages, workspace.root),
        workspace.config.commit_policy,
    )
    builder.extend(commits)
    return builder.finish()


def changed_packages(workspace: Workspace, changeset: Changeset) -> list[str]:
    """Names of packages with changes of their own, in topological order."""
    graph = workspace.graph
    increments = changeset.named_increments()
    return [
        graph[n].name
        for n in graph.topological_order()
        if increments.get(graph[n].name) is not None
    ]


def plan_versions(
    workspace: Workspace, changeset: Changeset, decide: DecideFn
) -> dict[str, str]:
    """Compute the next version of every package affected by the changeset."""
    return propagate(workspace.graph, changeset.named_increments(), decide)


def apply_versions(
    workspace: Workspace, versions: Mapping[str, str]
) -> dict[str, VersionBump]:
    """Rewrite all manifests with the new versions.

    Internal dependency requirements on bumped packages are updated in every
    manifest, including manifests of packages that were not bumped.
    """
    step("Bumping versions")

    bumped: dict[str, VersionBump] = {}
    for name, new in versions.items():
        old = workspace.package(name).version or ""
        bumped[name] = VersionBump(old=old, new=new)
        info(f"{name}: {old} → {new}")

    rewrite_workspace(workspace.root, workspace.adapter, workspace.packages, versions)
    return bumped


def commit_release(
    workspace: Workspace, bumped: Mapping[str, VersionBump], changelog: str
) -> None:
    """Commit the version bump changes, with the changelog as body."""
    step("Committing release")

    for p in workspace.packages:
        git("add", str(Path(p.path) / workspace.adapter.filename), cwd=workspace.root)

    # Check if there are actually changes to commit
    staged = git("diff", "--cached", "--name-only", check=False, cwd=workspace.root)
    if not staged:
        raise RippleError("No changes to commit")

    # Create commit with summary of version bumps
    summary = "\n".join(f"{n}: {b.old} → {b.new}" for n, b in bumped.items())
    message = ["-m", "chore: release", "-m", summary]
    if changelog:
        message.extend(["-m", changelog])
    git("commit", *message, cwd=workspace.root)
    info("Committed")


def run_bump(
    root: Path,
    decide: DecideFn,
    *,
    dry_run: bool = False,
    commit: bool = False,
) -> dict[str, VersionBump]:
    """Execute the full version bump pipeline.

    Args:
        root: Workspace root directory.
        decide: Decision callback used during propagation.
        dry_run: Compute and report versions without writing anything.
        commit: Commit the rewritten manifests.

    Returns:
        The version bumps, empty if nothing needs a release.
    """
    workspace = open_workspace(root)

    step("Collecting changes")
    changeset = collect_changeset(workspace)
    info(f"{len(changeset.revisions)} conventional commits")
    if changeset.is_empty:
        info("Nothing to release")
        return {}

    step("Resolving versions")
    versions = plan_versions(workspace, changeset, decide)
    # Changes to unversioned scopes (e.g. the workspace root) bump nothing
    if not versions:
        info("Nothing to release")
        return {}

    if dry_run:
        return {
            name: VersionBump(old=workspace.package(name).version or "", new=new)
            for name, new in versions.items()
        }

    bumped = apply_versions(workspace, versions)
    if commit:
        commit_release(workspace, bumped, render_changelog(changeset))
    return bumped

"""CLI entry point for ripple."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

import click

from ripple.changelog import render_changelog
from ripple.changes import parse_change
from ripple.config import load_config
from ripple.errors import ChangeParseError, RippleError
from ripple.models import Increment
from ripple.pipeline import changed_packages, collect_changeset, open_workspace, run_bump
from ripple.propagate import POLICIES, Candidates
from ripple.versions import bump_version

path_option = click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root directory.",
)


@contextmanager
def _reporting() -> Iterator[None]:
    """Turn ripple errors into clean CLI errors."""
    try:
        yield
    except RippleError as exc:
        raise click.ClickException(str(exc)) from exc


def prompt_decision(name: str, version: str, candidates: Candidates) -> Increment | None:
    """Ask which increment to apply when a package has a choice."""
    if len(candidates) == 1:
        choice = candidates[0]
        target = bump_version(version, choice) if choice is not None else version
        click.echo(f"{name}: {version} → {target}", err=True)
        return choice

    click.echo(f"{name} {version}", err=True)
    for i, candidate in enumerate(candidates, start=1):
        if candidate is None:
            click.echo(f"  {i}) {version} (current)", err=True)
        else:
            click.echo(f"  {i}) {bump_version(version, candidate)} ({candidate})", err=True)
    index = click.prompt(
        "Select version",
        type=click.IntRange(1, len(candidates)),
        default=len(candidates),
        err=True,
    )
    return candidates[index - 1]


@click.group()
@click.version_option(package_name="ripple-release")
def cli() -> None:
    """Conventional-commit releases for multi-package workspaces."""


@cli.command("list")
@path_option
def list_packages(directory: Path) -> None:
    """List all packages in topological order."""
    with _reporting():
        workspace = open_workspace(directory)
        graph = workspace.graph
        for node in graph.topological_order():
            click.echo(graph[node].name)


@cli.command()
@click.argument("version", required=False)
@path_option
def changed(version: str | None, directory: Path) -> None:
    """List changed packages in topological order.

    Without VERSION, considers commits since the latest release.
    """
    with _reporting():
        workspace = open_workspace(directory)
        changeset = collect_changeset(workspace, version)
        for name in changed_packages(workspace, changeset):
            click.echo(name)


@cli.command()
@click.argument("version", required=False)
@click.option("-s", "--summary", is_flag=True, help="Prefix the required increments.")
@path_option
def changelog(version: str | None, summary: bool, directory: Path) -> None:
    """Print the changelog of VERSION, or of unreleased changes."""
    with _reporting():
        workspace = open_workspace(directory)
        changeset = collect_changeset(workspace, version)

    parts: list[str] = []
    text = render_changelog(changeset)
    # An empty changelog means no release is necessary
    if text:
        if summary:
            parts.append(changeset.summary())
        parts.append(text)
        click.echo("\n\n".join(parts))


@cli.command()
@click.option(
    "--policy",
    type=click.Choice(sorted(POLICIES)),
    default=None,
    help="Decide automatically instead of prompting.",
)
@click.option("-y", "--yes", is_flag=True, help="Shorthand for --policy highest.")
@click.option("--dry-run", is_flag=True, help="Show new versions without writing.")
@click.option("--commit", is_flag=True, help="Commit the rewritten manifests.")
@path_option
def bump(
    policy: str | None, yes: bool, dry_run: bool, commit: bool, directory: Path
) -> None:
    """Bump versions of changed packages and their dependents."""
    if yes and policy is None:
        policy = "highest"
    decide = POLICIES[policy] if policy else prompt_decision

    with _reporting():
        bumped = run_bump(directory, decide, dry_run=dry_run, commit=commit)

    for name, b in bumped.items():
        click.echo(f"{name} {b.old} → {b.new}")


@cli.command()
@click.argument("file", type=click.File("r"), default="-")
@path_option
def validate(file: TextIO, directory: Path) -> None:
    """Validate the first line of a commit message (commit-msg hook).

    Reads FILE, or standard input when omitted.
    """
    lines = [line for line in file.read().splitlines() if not line.startswith("#")]
    summary = lines[0] if lines else ""

    with _reporting():
        policy = load_config(directory).commit_policy
        try:
            change = parse_change(summary, policy)
        except ChangeParseError as exc:
            raise click.ClickException(f"Invalid commit message: {exc}") from exc

    click.echo(f"✓ {change}")

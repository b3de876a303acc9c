"""Changelog rendering.

Groups the revisions of a changeset by category and renders them as
Markdown. Only release-relevant changes are included: breaking changes,
features, fixes, performance improvements and refactorings. A changeset
without such changes renders as an empty string, meaning no release is
necessary.
"""

from __future__ import annotations

from enum import Enum

from .changeset import Changeset
from .models import ChangeKind, Revision
from .scopes import ScopeRegistry


class Category(Enum):
    """Changelog section, in the order sections are rendered."""

    BREAKING = "Breaking changes"
    FEATURE = "Features"
    FIX = "Bugfixes"
    PERFORMANCE = "Performance improvements"
    REFACTOR = "Refactorings"


_CATEGORIES: dict[ChangeKind, Category] = {
    ChangeKind.FEATURE: Category.FEATURE,
    ChangeKind.FIX: Category.FIX,
    ChangeKind.PERFORMANCE: Category.PERFORMANCE,
    ChangeKind.REFACTOR: Category.REFACTOR,
}


def categorize(revision: Revision) -> Category | None:
    """Section a revision belongs to, or None if it is not listed."""
    if revision.change.is_breaking:
        return Category.BREAKING
    return _CATEGORIES.get(revision.change.kind)


def group_revisions(revisions: list[Revision]) -> dict[Category, list[Revision]]:
    """Group revisions by category, in severity order, keeping input order."""
    groups: dict[Category, list[Revision]] = {c: [] for c in Category}
    for revision in revisions:
        category = categorize(revision)
        if category is not None:
            groups[category].append(revision)
    return {c: items for c, items in groups.items() if items}


def format_item(revision: Revision, scopes: ScopeRegistry) -> str:
    """Render one entry: short id, emphasized scope names, description.

    Example:
        "- 1a2b3c4 __pkg-a__, __pkg-b__ – add widget"
    """
    parts = [revision.short_id]
    names = scopes.names(revision.scopes)
    if names:
        parts.append(", ".join(f"__{name}__" for name in names))
    return f"- {' '.join(parts)} – {revision.change.description}"


def render_changelog(changeset: Changeset) -> str:
    """Render the changelog of a changeset as Markdown."""
    sections: list[str] = []
    for category, revisions in group_revisions(changeset.revisions).items():
        lines = [f"### {category.value}", ""]
        lines.extend(format_item(r, changeset.scopes) for r in revisions)
        sections.append("\n".join(lines))
    return "\n\n".join(sections)

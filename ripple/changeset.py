"""Changesets: commits → revisions → per-scope increments.

A changeset collects every commit in a range that parses as a
conventional commit, records which scopes each one touched, and reduces
them to the minimum increment each scope requires. Transitive effects on
dependent packages are not considered here; see propagate.py.
"""

from __future__ import annotations

from collections.abc import Iterable

from .changes import DEFAULT_POLICY, CommitPolicy, parse_change
from .errors import ChangeParseError
from .models import Change, ChangeKind, Commit, Increment, Revision, max_increment
from .scopes import ScopeRegistry

_BASE_INCREMENTS: dict[ChangeKind, Increment] = {
    ChangeKind.FEATURE: Increment.MINOR,
    ChangeKind.FIX: Increment.PATCH,
    ChangeKind.PERFORMANCE: Increment.PATCH,
    ChangeKind.REFACTOR: Increment.PATCH,
}


def change_increment(change: Change) -> Increment | None:
    """Map a change to the increment it requires.

    Breaking changes always require a major increment, but only if the
    change is release-relevant in the first place: a breaking docs change
    still requires nothing.
    """
    increment = _BASE_INCREMENTS.get(change.kind)
    if increment is not None and change.is_breaking:
        return Increment.MAJOR
    return increment


def reduce_increments(
    revisions: Iterable[Revision], size: int
) -> list[Increment | None]:
    """Reduce revisions to the maximum increment per scope index."""
    increments: list[Increment | None] = [None] * size
    for revision in revisions:
        increment = change_increment(revision.change)
        if increment is None:
            continue
        for index in revision.scopes:
            increments[index] = max_increment(increments[index], increment)
    return increments


class Changeset:
    """Parsed revisions of a commit range and their per-scope increments.

    Attributes:
        scopes: The registry revisions refer to by index.
        revisions: Revisions in the order they were added.
        increments: Required increment per scope index (None = no bump).
    """

    def __init__(self, scopes: ScopeRegistry, revisions: list[Revision]) -> None:
        self.scopes = scopes
        self.revisions = list(revisions)
        self.increments = reduce_increments(self.revisions, len(scopes))

    @property
    def is_empty(self) -> bool:
        """True if no revision requires a release."""
        return all(increment is None for increment in self.increments)

    def changed(self) -> list[int]:
        """Indices of scopes that require an increment."""
        return [i for i, inc in enumerate(self.increments) if inc is not None]

    def increment_of(self, name: str) -> Increment | None:
        """Required increment for the scope registered under name."""
        index = self.scopes.index_of(name)
        return None if index is None else self.increments[index]

    def named_increments(self) -> dict[str, Increment | None]:
        """Required increment keyed by package name."""
        return {
            scope.name: inc
            for scope, inc in zip(self.scopes, self.increments)
            if scope.is_package
        }

    def summary(self) -> str:
        """One "name: increment" line per changed package."""
        return "\n".join(
            f"{self.scopes[i].name}: {self.increments[i]}"
            for i in self.changed()
            if self.scopes[i].is_package
        )

    def __repr__(self) -> str:
        return f"Changeset(revisions={len(self.revisions)}, changed={self.changed()})"


class ChangesetBuilder:
    """Accumulates commits into revisions and builds a Changeset."""

    def __init__(
        self, scopes: ScopeRegistry, policy: CommitPolicy = DEFAULT_POLICY
    ) -> None:
        self.scopes = scopes
        self.policy = policy
        self._revisions: list[Revision] = []

    def add(self, commit_id: str, summary: str, paths: Iterable[str]) -> Revision | None:
        """Add a commit; returns its Revision, or None if it was skipped.

        Commits that are not conventional commits (merges, free-form
        messages) are not an error, they are simply not release-relevant.
        """
        try:
            change = parse_change(summary, self.policy)
        except ChangeParseError:
            return None

        scopes = frozenset(
            index for index in map(self.scopes.match, paths) if index is not None
        )
        revision = Revision(commit_id=commit_id, change=change, scopes=scopes)
        self._revisions.append(revision)
        return revision

    def extend(self, commits: Iterable[Commit]) -> None:
        """Add every commit from an iterable of Commits."""
        for commit in commits:
            self.add(commit.sha, commit.summary, commit.paths)

    def finish(self) -> Changeset:
        return Changeset(self.scopes, self._revisions)

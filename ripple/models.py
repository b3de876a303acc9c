"""Data models for ripple.

These Pydantic models represent the core data structures used throughout
the release pipeline: workspace scopes, parsed changes, revisions and the
packages that take part in version propagation.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    """Kind of a conventional commit, keyed by its canonical token."""

    FIX = "fix"
    FEATURE = "feature"
    PERFORMANCE = "performance"
    REFACTOR = "refactor"
    DOCS = "docs"
    TEST = "test"
    CHORE = "chore"
    BUILD = "build"


class Increment(IntEnum):
    """Size of a version bump. Ordered Patch < Minor < Major.

    The absence of a bump is represented by ``None`` throughout ripple;
    use `increment_key` to sort optional increments with ``None`` lowest.
    """

    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


def increment_key(increment: Increment | None) -> int:
    """Sort key placing ``None`` below every increment."""
    return 0 if increment is None else int(increment)


def max_increment(a: Increment | None, b: Increment | None) -> Increment | None:
    """Return the larger of two optional increments."""
    return a if increment_key(a) >= increment_key(b) else b


class Scope(BaseModel):
    """A registered package directory that commits are attributed to.

    Attributes:
        path: Normalized relative directory, "." for the workspace root.
        name: Package name shown in the changelog.
        is_package: False for workspace directories without a package of
            their own. Their files are attributed to them, but they never
            appear in changelog entries or increments keyed by name.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    is_package: bool = True


class Change(BaseModel):
    """A parsed conventional commit summary."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    description: str
    is_breaking: bool = False

    def __str__(self) -> str:
        bang = "!" if self.is_breaking else ""
        return f"{self.kind.value}{bang}: {self.description}"


class Commit(BaseModel):
    """A commit as read from the version-control backend.

    Attributes:
        sha: Full commit id.
        summary: First line of the commit message.
        paths: Files added, modified, deleted or renamed by the commit.
    """

    model_config = ConfigDict(frozen=True)

    sha: str
    summary: str
    paths: tuple[str, ...] = ()


class Revision(BaseModel):
    """A commit that parsed as a change, with the scopes it touched."""

    model_config = ConfigDict(frozen=True)

    commit_id: str
    change: Change
    scopes: frozenset[int] = frozenset()

    @property
    def short_id(self) -> str:
        return self.commit_id[:7]


class PackageInfo(BaseModel):
    """Metadata for a single manifest in the workspace.

    Attributes:
        path: Relative path from workspace root to the package directory.
        name: Package name, or None for pure workspace containers.
        version: Current version string, or None when unversioned.
        deps: Names of all declared dependencies. External deps are kept
              here and dropped when the dependency graph is built.
    """

    path: str
    name: str | None = None
    version: str | None = None
    deps: list[str] = Field(default_factory=list)


class VersionBump(BaseModel):
    """Records a version change for a package.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
    """

    old: str
    new: str


class Decision(BaseModel):
    """A pending choice during bump propagation.

    Attributes:
        name: Package being resolved.
        version: Its current version.
        candidates: Legal increments in ascending order; None means no bump.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    candidates: tuple[Increment | None, ...]

"""Scope registry: attribute changed files to workspace packages.

Every package directory in the workspace is registered as a scope. A file
belongs to the scope whose directory contains it with the most path
components, so a member package nested under the workspace root wins over
the root scope ".".
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import PurePosixPath

from .errors import DuplicatePathError, InvalidPathError
from .models import Scope


def normalize_path(path: str) -> str:
    """Normalize a relative path: "./pkg-a/" → "pkg-a", "" → "."."""
    parts = [p for p in PurePosixPath(path).parts if p != "."]
    return "/".join(parts) if parts else "."


def _components(path: str) -> tuple[str, ...]:
    return () if path == "." else tuple(path.split("/"))


class ScopeRegistry:
    """Registered scopes, identified by their registration index."""

    def __init__(self) -> None:
        self._scopes: list[Scope] = []
        self._by_path: dict[str, int] = {}

    def register(self, path: str, name: str, is_package: bool = True) -> int:
        """Register a package directory and return its scope index.

        Raises:
            InvalidPathError: If path is absolute or escapes the root.
            DuplicatePathError: If path was registered before.
        """
        pure = PurePosixPath(path)
        if pure.is_absolute() or ".." in pure.parts:
            raise InvalidPathError(path)

        normalized = normalize_path(path)
        if normalized in self._by_path:
            raise DuplicatePathError(normalized)

        index = len(self._scopes)
        self._scopes.append(Scope(path=normalized, name=name, is_package=is_package))
        self._by_path[normalized] = index
        return index

    def match(self, file_path: str) -> int | None:
        """Return the index of the most specific scope containing file_path."""
        parts = _components(normalize_path(file_path))
        best: int | None = None
        best_depth = -1
        for index, scope in enumerate(self._scopes):
            prefix = _components(scope.path)
            # Directory-boundary prefix: "pkg-a" must not match "pkg-ab/x"
            if parts[: len(prefix)] == prefix and len(prefix) > best_depth:
                best, best_depth = index, len(prefix)
        return best

    def names(self, indices: Iterable[int]) -> list[str]:
        """Package names for the given indices, in registration order."""
        return [
            self._scopes[i].name for i in sorted(indices) if self._scopes[i].is_package
        ]

    def index_of(self, name: str) -> int | None:
        """Index of the package scope registered under name."""
        for index, scope in enumerate(self._scopes):
            if scope.is_package and scope.name == name:
                return index
        return None

    def __getitem__(self, index: int) -> Scope:
        return self._scopes[index]

    def __len__(self) -> int:
        return len(self._scopes)

    def __iter__(self) -> Iterator[Scope]:
        return iter(self._scopes)

    def __repr__(self) -> str:
        paths = ", ".join(f"{s.path}={s.name}" for s in self._scopes)
        return f"ScopeRegistry({paths})"

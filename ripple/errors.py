"""Exceptions raised by ripple.

Configuration-level errors abort the current operation and carry the
offending path or package name. Commit parse errors are recoverable: the
changeset builder drops the commit and moves on.
"""

from __future__ import annotations


class RippleError(Exception):
    """Base class for all ripple errors."""


class ConfigError(RippleError):
    """Invalid [tool.ripple] configuration."""


class DuplicatePathError(RippleError):
    """A scope path was registered twice."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Scope path already registered: {path}")
        self.path = path


class InvalidPathError(RippleError):
    """A scope path is not relative to the workspace root."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Scope path must be relative: {path}")
        self.path = path


class CyclicDependencyError(RippleError):
    """The workspace dependency graph contains a cycle."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"Dependency cycle detected involving: {', '.join(names)}")
        self.names = names


class ManifestError(RippleError):
    """A manifest could not be located or interpreted."""


class UnknownVersionError(RippleError):
    """A requested version has no matching tag."""

    def __init__(self, version: str) -> None:
        super().__init__(f"No tag found for version {version}")
        self.version = version


class InvalidDecisionError(RippleError):
    """A decision returned an increment outside the candidate set."""

    def __init__(self, name: str, choice: object, candidates: list) -> None:
        super().__init__(
            f"Invalid increment {choice!r} for {name}, expected one of {candidates!r}"
        )
        self.name = name
        self.choice = choice
        self.candidates = candidates


class ChangeParseError(RippleError):
    """A commit summary is not a conventional commit."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class MalformedFormatError(ChangeParseError):
    """No `: ` separator, or whitespace inside the kind token."""


class UnknownKindError(ChangeParseError):
    """The kind token is not one of the known change kinds."""


class WhitespaceError(ChangeParseError):
    """The description has leading or trailing whitespace."""


class SentenceError(ChangeParseError):
    """The description ends with a period."""


class CasingError(ChangeParseError):
    """The description starts with an uppercase word that is not an acronym."""

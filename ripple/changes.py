"""Conventional commit parsing.

Parses the summary line of a commit into a Change. The core grammar is

    <kind>[!]: <description>

where <kind> is one of the lower-case kind tokens, `!` marks a breaking
change, and exactly one space follows the colon. Stricter checks on the
description are opt-in through CommitPolicy.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .errors import (
    CasingError,
    MalformedFormatError,
    SentenceError,
    UnknownKindError,
    WhitespaceError,
)
from .models import Change, ChangeKind

# Short forms accepted in addition to the canonical tokens
KIND_ALIASES: dict[str, ChangeKind] = {
    "feat": ChangeKind.FEATURE,
    "perf": ChangeKind.PERFORMANCE,
}


class CommitPolicy(BaseModel):
    """Optional strictness rules layered on top of the core grammar.

    Attributes:
        forbid_trailing_whitespace: Reject descriptions with trailing
            whitespace instead of trimming it.
        forbid_trailing_period: Reject descriptions written as a sentence.
        enforce_lowercase: Reject descriptions starting with an uppercase
            word, unless the word is an acronym like README or API.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    forbid_trailing_whitespace: bool = False
    forbid_trailing_period: bool = False
    enforce_lowercase: bool = False


DEFAULT_POLICY = CommitPolicy()


def parse_kind(token: str, line: str = "") -> ChangeKind:
    """Resolve a kind token (case-sensitive) to a ChangeKind.

    Raises:
        UnknownKindError: If the token is not a known kind or alias.
    """
    if token in KIND_ALIASES:
        return KIND_ALIASES[token]
    try:
        return ChangeKind(token)
    except ValueError:
        raise UnknownKindError(line or token, f"Unknown change kind {token!r}") from None


def parse_change(line: str, policy: CommitPolicy = DEFAULT_POLICY) -> Change:
    """Parse a commit summary line into a Change.

    Args:
        line: First line of a commit message.
        policy: Additional checks to apply to the description.

    Raises:
        MalformedFormatError: Missing `: ` separator, whitespace in the
            kind token, or an empty description.
        UnknownKindError: The kind token is not recognized.
        WhitespaceError, SentenceError, CasingError: Policy violations.

    Examples:
        "fix: handle empty input" → Change(FIX, "handle empty input")
        "feat!: drop python 3.9" → Change(FEATURE, "drop python 3.9", breaking)
    """
    token, sep, description = line.partition(": ")
    if not sep:
        raise MalformedFormatError(line, "Missing ': ' separator")
    if token != token.strip() or " " in token:
        raise MalformedFormatError(line, "Whitespace in change kind")

    is_breaking = token.endswith("!")
    kind = parse_kind(token[:-1] if is_breaking else token, line)

    if description[:1].isspace():
        raise MalformedFormatError(line, "Expected exactly one space after ':'")

    if description != description.rstrip():
        if policy.forbid_trailing_whitespace:
            raise WhitespaceError(line, "Trailing whitespace in description")
        description = description.rstrip()

    if not description:
        raise MalformedFormatError(line, "Empty description")

    if policy.forbid_trailing_period and description.endswith("."):
        raise SentenceError(line, "Description ends with a period")

    if policy.enforce_lowercase and description[0].isupper():
        word = description.split()[0]
        # Acronyms like README or API are allowed
        if not all(not c.isalpha() or c.isupper() for c in word):
            raise CasingError(line, "Description must start in lower case")

    return Change(kind=kind, description=description, is_breaking=is_breaking)


def format_change(change: Change) -> str:
    """Render a Change back into a conventional commit summary line."""
    return str(change)

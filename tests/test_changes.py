"""Tests for ripple.changes."""

from __future__ import annotations

import pytest

from ripple.changes import CommitPolicy, format_change, parse_change, parse_kind
from ripple.errors import (
    CasingError,
    ChangeParseError,
    MalformedFormatError,
    SentenceError,
    UnknownKindError,
    WhitespaceError,
)
from ripple.models import ChangeKind

STRICT = CommitPolicy(
    forbid_trailing_whitespace=True,
    forbid_trailing_period=True,
    enforce_lowercase=True,
)


class TestParseKind:
    @pytest.mark.parametrize(
        ("token", "kind"),
        [
            ("fix", ChangeKind.FIX),
            ("feature", ChangeKind.FEATURE),
            ("performance", ChangeKind.PERFORMANCE),
            ("refactor", ChangeKind.REFACTOR),
            ("docs", ChangeKind.DOCS),
            ("test", ChangeKind.TEST),
            ("chore", ChangeKind.CHORE),
            ("build", ChangeKind.BUILD),
        ],
    )
    def test_canonical_tokens(self, token: str, kind: ChangeKind) -> None:
        assert parse_kind(token) == kind

    def test_aliases(self) -> None:
        assert parse_kind("feat") == ChangeKind.FEATURE
        assert parse_kind("perf") == ChangeKind.PERFORMANCE

    @pytest.mark.parametrize("token", ["Fix", "FEATURE", "fxi", "doc", "testing"])
    def test_unknown_tokens(self, token: str) -> None:
        with pytest.raises(UnknownKindError):
            parse_kind(token)


class TestParseChange:
    def test_non_breaking(self) -> None:
        change = parse_change("fix: description")
        assert change.kind == ChangeKind.FIX
        assert change.description == "description"
        assert not change.is_breaking

    def test_breaking(self) -> None:
        change = parse_change("fix!: description")
        assert change.kind == ChangeKind.FIX
        assert change.is_breaking

    def test_alias_feat(self) -> None:
        change = parse_change("feat: add widget")
        assert change.kind == ChangeKind.FEATURE
        assert change.description == "add widget"

    def test_description_may_contain_colons(self) -> None:
        change = parse_change("docs: note: mind the gap")
        assert change.description == "note: mind the gap"

    @pytest.mark.parametrize(
        "line",
        [
            "fix:description",
            "fix :description",
            "fix description",
            "fix : description",
            " fix: description",
            "fix:  description",
            "fix: ",
            "Merge branch 'main' into feature",
        ],
    )
    def test_malformed(self, line: str) -> None:
        with pytest.raises(MalformedFormatError):
            parse_change(line)

    @pytest.mark.parametrize("line", ["fxi: description", "Fix: description", "feat(api): x"])
    def test_unknown_kind(self, line: str) -> None:
        with pytest.raises(UnknownKindError):
            parse_change(line)

    def test_errors_share_base_class(self) -> None:
        with pytest.raises(ChangeParseError):
            parse_change("not a commit")

    def test_trailing_whitespace_trimmed_by_default(self) -> None:
        assert parse_change("fix: description  ").description == "description"


class TestCommitPolicy:
    def test_default_policy_is_lenient(self) -> None:
        change = parse_change("fix: Handle the thing.")
        assert change.description == "Handle the thing."

    def test_trailing_whitespace(self) -> None:
        with pytest.raises(WhitespaceError):
            parse_change("fix: description ", STRICT)

    def test_trailing_period(self) -> None:
        with pytest.raises(SentenceError):
            parse_change("fix: description.", STRICT)

    def test_uppercase_word(self) -> None:
        with pytest.raises(CasingError):
            parse_change("fix: Description", STRICT)

    @pytest.mark.parametrize("line", ["docs: README tweaks", "fix: API v2 handling"])
    def test_acronyms_allowed(self, line: str) -> None:
        assert parse_change(line, STRICT).description == line.split(": ", 1)[1]

    def test_strict_accepts_valid(self) -> None:
        assert parse_change("feature: add widget", STRICT).kind == ChangeKind.FEATURE


class TestFormatChange:
    @pytest.mark.parametrize(
        "line",
        [
            "fix: handle empty input",
            "feature!: drop legacy config",
            "refactor: split parser",
            "chore: bump deps",
        ],
    )
    def test_round_trip(self, line: str) -> None:
        assert format_change(parse_change(line)) == line

    def test_alias_renders_canonical(self) -> None:
        change = parse_change("feat!: add widget")
        assert format_change(change) == "feature!: add widget"
        assert parse_change(format_change(change)) == change

"""Tests for ripple.repository."""

from __future__ import annotations

import shutil
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import semver

from ripple.changeset import ChangesetBuilder
from ripple.errors import UnknownVersionError
from ripple.models import Increment
from ripple.repository import (
    commits_for_version,
    find_versions,
    list_commits,
    unreleased_commits,
)
from ripple.scopes import ScopeRegistry
from ripple.shell import git

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40

TAGS = (
    f"v1.1.0\t{'d' * 40}\t{SHA_B}\n"
    f"v1.0.0\t{SHA_A}\t\n"
    f"vnext\t{SHA_C}\t\n"
    f"v2.0.0-rc.1\t{SHA_C}\t"
)

# `git log -z --name-status` output: entries and paths are NUL-terminated
LOG = (
    f"\x1e{SHA_A}\tfeat: add widget\0"
    "\0M\0pkg-a/widget.py\0A\0pkg-a/new.py\0"
    f"\x1e{SHA_B}\tMerge branch 'x'\0"
    f"\x1e{SHA_C}\trefactor: move module\0"
    "\0R100\0pkg-a/old.py\0pkg-b/old.py\0D\0pkg-a/new.py\0"
)


class TestFindVersions:
    """Tests for find_versions()."""

    @patch("ripple.repository.git")
    def test_parses_and_sorts(self, mock_git: MagicMock) -> None:
        mock_git.return_value = TAGS

        result = find_versions("v")

        assert list(result) == [
            semver.Version.parse("1.0.0"),
            semver.Version.parse("1.1.0"),
            semver.Version.parse("2.0.0-rc.1"),
        ]
        # Annotated tags resolve to the peeled commit
        assert result[semver.Version.parse("1.1.0")] == SHA_B
        assert result[semver.Version.parse("1.0.0")] == SHA_A

    @patch("ripple.repository.git")
    def test_uses_prefix(self, mock_git: MagicMock) -> None:
        mock_git.return_value = f"release-3.0.0\t{SHA_A}\t"

        result = find_versions("release-")

        assert list(result) == [semver.Version.parse("3.0.0")]
        args, kwargs = mock_git.call_args
        assert args[-1] == "refs/tags/release-*"
        assert kwargs["check"] is False

    @patch("ripple.repository.git")
    def test_no_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        assert find_versions() == {}


class TestListCommits:
    """Tests for list_commits()."""

    @patch("ripple.repository.git")
    def test_parses_log(self, mock_git: MagicMock) -> None:
        mock_git.return_value = LOG.strip()

        commits = list_commits()

        assert [c.sha for c in commits] == [SHA_A, SHA_B, SHA_C]
        assert commits[0].summary == "feat: add widget"
        assert commits[0].paths == ("pkg-a/widget.py", "pkg-a/new.py")
        assert commits[1].paths == ()
        assert commits[2].paths == ("pkg-a/old.py", "pkg-b/old.py", "pkg-a/new.py")

    @patch("ripple.repository.git")
    def test_range(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""

        assert list_commits(SHA_A, SHA_C) == []

        args, _ = mock_git.call_args
        assert args[0] == "log"
        assert "-z" in args
        assert "--reverse" in args
        assert args[-1] == f"{SHA_A}..{SHA_C}"

    @patch("ripple.repository.git")
    def test_deduplicates(self, mock_git: MagicMock) -> None:
        mock_git.return_value = f"\x1e{SHA_A}\tfix: one\0\x1e{SHA_A}\tfix: one\0"
        assert len(list_commits()) == 1

    @patch("ripple.repository.git")
    def test_non_ascii_path_kept_verbatim(self, mock_git: MagicMock) -> None:
        mock_git.return_value = (
            f"\x1e{SHA_A}\tfix: accents\0\0M\0pkg-a/café.py\0A\0pkg-b/naïve dir/x.py\0"
        )

        (commit,) = list_commits()

        assert commit.paths == ("pkg-a/café.py", "pkg-b/naïve dir/x.py")

    @patch("ripple.repository.git")
    def test_non_ascii_path_attributed_to_package(
        self, mock_git: MagicMock, registry: ScopeRegistry
    ) -> None:
        mock_git.return_value = f"\x1e{SHA_A}\tfix: accents\0\0M\0pkg-a/café.py\0"

        builder = ChangesetBuilder(registry)
        builder.extend(list_commits())

        assert builder.finish().named_increments() == {
            "root": None,
            "pkg-a": Increment.PATCH,
            "pkg-b": None,
        }

    @patch("ripple.repository.git")
    def test_header_ended_by_newline(self, mock_git: MagicMock) -> None:
        mock_git.return_value = (
            f"\x1e{SHA_A}\tfeat: one\n\nM\0pkg-a/x.py\0C75\0pkg-a/x.py\0pkg-b/x.py\0"
        )

        (commit,) = list_commits()

        assert commit.summary == "feat: one"
        assert commit.paths == ("pkg-a/x.py", "pkg-b/x.py")


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestListCommitsGit:
    """list_commits() against a real repository."""

    @staticmethod
    def _commit(repo: Path, message: str) -> None:
        git("add", "-A", cwd=repo)
        git(
            "-c", "user.name=ripple",
            "-c", "user.email=ripple@example.com",
            "-c", "commit.gpgsign=false",
            "commit", "-q", "-m", message,
            cwd=repo,
        )

    def test_non_ascii_and_renamed_paths(self, tmp_path: Path) -> None:
        git("init", "-q", cwd=tmp_path)
        (tmp_path / "README.md").write_text("# repo\n")
        self._commit(tmp_path, "chore: init")
        (tmp_path / "pkg-a").mkdir()
        (tmp_path / "pkg-a" / "café.py").write_text("x = 1\n")
        self._commit(tmp_path, "feat: add café")
        (tmp_path / "pkg-b").mkdir()
        (tmp_path / "pkg-a" / "café.py").rename(tmp_path / "pkg-b" / "café.py")
        self._commit(tmp_path, "refactor: move café")

        _, first, second = list_commits(cwd=tmp_path)

        assert first.summary == "feat: add café"
        assert first.paths == ("pkg-a/café.py",)
        assert second.summary == "refactor: move café"
        assert set(second.paths) == {"pkg-a/café.py", "pkg-b/café.py"}


class TestCommitsForVersion:
    """Tests for commits_for_version() and unreleased_commits()."""

    @patch("ripple.repository.list_commits")
    @patch("ripple.repository.find_versions")
    def test_range_from_previous_version(
        self, mock_find: MagicMock, mock_list: MagicMock
    ) -> None:
        mock_find.return_value = {
            semver.Version.parse("1.0.0"): SHA_A,
            semver.Version.parse("1.1.0"): SHA_B,
        }
        mock_list.return_value = []

        commits_for_version("1.1.0")

        mock_list.assert_called_once_with(SHA_A, SHA_B, cwd=None)

    @patch("ripple.repository.list_commits")
    @patch("ripple.repository.find_versions")
    def test_first_version_includes_all_history(
        self, mock_find: MagicMock, mock_list: MagicMock
    ) -> None:
        mock_find.return_value = {semver.Version.parse("1.0.0"): SHA_A}
        mock_list.return_value = []

        commits_for_version("v1.0.0")

        mock_list.assert_called_once_with(None, SHA_A, cwd=None)

    @patch("ripple.repository.find_versions")
    def test_unknown_version(self, mock_find: MagicMock) -> None:
        mock_find.return_value = {}
        with pytest.raises(UnknownVersionError):
            commits_for_version("9.9.9")

    @patch("ripple.repository.list_commits")
    @patch("ripple.repository.find_versions")
    def test_unreleased_since_latest(
        self, mock_find: MagicMock, mock_list: MagicMock
    ) -> None:
        mock_find.return_value = {
            semver.Version.parse("1.0.0"): SHA_A,
            semver.Version.parse("1.1.0"): SHA_B,
        }
        mock_list.return_value = []

        unreleased_commits()

        mock_list.assert_called_once_with(SHA_B, "HEAD", cwd=None)

    @patch("ripple.repository.list_commits")
    @patch("ripple.repository.find_versions")
    def test_unreleased_without_tags(
        self, mock_find: MagicMock, mock_list: MagicMock
    ) -> None:
        mock_find.return_value = {}
        mock_list.return_value = []

        unreleased_commits()

        mock_list.assert_called_once_with(None, "HEAD", cwd=None)

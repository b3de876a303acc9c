"""Reading commits and version tags from git.

Versions are tracked with tags of the form {tag_prefix}{semver}, e.g.
v1.4.0. The commits of a version are those after the previous version's
tag, up to and including its own tag; unreleased commits are those after
the latest version tag.
"""

from __future__ import annotations

import re
from pathlib import Path

import semver

from .errors import UnknownVersionError
from .models import Commit
from .shell import git
from .versions import parse_version

# Separates commits in `git log` output, chosen so it can't occur in messages
_RECORD = "\x1e"
# The header line ends at a newline or, depending on git version, a NUL
_HEADER_END = re.compile(r"[\0\n]")


def find_versions(tag_prefix: str = "v", cwd: Path | None = None) -> dict[semver.Version, str]:
    """Map every version tag to the commit it points at.

    Tags that don't parse as a full semantic version are ignored.

    Returns:
        Map of version → commit sha, in ascending version order.
    """
    output = git(
        "for-each-ref",
        "--format=%(refname:short)%09%(objectname)%09%(*objectname)",
        f"refs/tags/{tag_prefix}*",
        check=False,
        cwd=cwd,
    )
    versions: dict[semver.Version, str] = {}
    for line in output.splitlines():
        tag, sha, peeled = (line.split("\t") + ["", ""])[:3]
        try:
            version = semver.Version.parse(tag.removeprefix(tag_prefix))
        except ValueError:
            continue
        # Annotated tags point at a tag object; the peeled sha is the commit
        versions[version] = peeled or sha
    return dict(sorted(versions.items()))


def list_commits(
    since: str | None = None, until: str = "HEAD", cwd: Path | None = None
) -> list[Commit]:
    """List commits in since..until, oldest first, with the paths they touch.

    Renamed and copied files are attributed to both their old and new path.

    Args:
        since: Exclusive lower bound (a sha or ref); None for all history.
        until: Inclusive upper bound.
    """
    rev_range = f"{since}..{until}" if since else until
    # -z keeps paths unquoted, so non-ASCII file names match their scope
    output = git(
        "log",
        "-z",
        "--reverse",
        "--name-status",
        f"--format={_RECORD}%H%x09%s",
        rev_range,
        cwd=cwd,
    )
    commits: list[Commit] = []
    seen: set[str] = set()
    for record in output.split(_RECORD):
        header, raw, *_ = _HEADER_END.split(record.lstrip("\0\n"), maxsplit=1) + [""]
        if not header.strip():
            continue
        sha, _, summary = header.partition("\t")
        if sha in seen:
            continue
        seen.add(sha)
        commits.append(Commit(sha=sha, summary=summary, paths=_parse_name_status(raw)))
    return commits


def _parse_name_status(raw: str) -> tuple[str, ...]:
    """Paths from NUL-separated `--name-status` entries.

    Entries are "M\\0path" or, for renames and copies, "R100\\0old\\0new".
    """
    fields = raw.split("\0")
    paths: list[str] = []
    i = 0
    while i < len(fields):
        status = fields[i].strip()
        i += 1
        if not status:
            continue
        count = 2 if status[0] in "RC" else 1
        for path in fields[i : i + count]:
            if path not in paths:
                paths.append(path)
        i += count
    return tuple(paths)


def commits_for_version(
    version: str, tag_prefix: str = "v", cwd: Path | None = None
) -> list[Commit]:
    """Commits that make up a released version.

    Raises:
        UnknownVersionError: If no tag exists for the version.
    """
    target = parse_version(version)
    versions = find_versions(tag_prefix, cwd=cwd)
    if target not in versions:
        raise UnknownVersionError(str(target))

    earlier = [v for v in versions if v < target]
    since = versions[earlier[-1]] if earlier else None
    return list_commits(since, versions[target], cwd=cwd)


def unreleased_commits(tag_prefix: str = "v", cwd: Path | None = None) -> list[Commit]:
    """Commits after the latest version tag (all commits if there is none)."""
    versions = find_versions(tag_prefix, cwd=cwd)
    since = versions[max(versions)] if versions else None
    return list_commits(since, "HEAD", cwd=cwd)

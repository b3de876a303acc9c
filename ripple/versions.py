"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0")
and the 0.x conventions for bumping pre-1.0 packages.
"""

from __future__ import annotations

import semver

from .models import Increment


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-rc.1" → "1.2.3-rc.1"

    A leading "v" (as used in tags) is ignored.
    """
    return semver.Version.parse(version_str.removeprefix("v"), optional_minor_and_patch=True)


def bump(version: semver.Version, increment: Increment) -> semver.Version:
    """Apply an increment to a version.

    Packages below 1.0 never get a major bump: for 0.0.x every increment
    bumps the patch component, for 0.x.y breaking changes and features bump
    the minor component. Pre-release and build metadata are always cleared.
    """
    major, minor, patch = version.major, version.minor, version.patch
    if major == 0 and minor == 0:
        patch += 1
    elif major == 0:
        if increment >= Increment.MINOR:
            minor, patch = minor + 1, 0
        else:
            patch += 1
    elif increment is Increment.MAJOR:
        major, minor, patch = major + 1, 0, 0
    elif increment is Increment.MINOR:
        minor, patch = minor + 1, 0
    else:
        patch += 1
    return semver.Version(major, minor, patch)


def bump_version(version_str: str, increment: Increment) -> str:
    """Apply an increment to a version string and return as a string.

    Examples:
        "1.2.3", MINOR → "1.3.0"
        "0.3.1", MAJOR → "0.4.0"
        "0.0.4", MINOR → "0.0.5"
    """
    return str(bump(parse_version(version_str), increment))

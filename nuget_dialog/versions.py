"""Version parsing and ordering utilities.

Package versions follow the NuGet shape: one to four numeric parts, an
optional ``-prerelease`` label and optional ``+metadata``. The first three
parts are handled by semver (short versions are padded with zeros, e.g.
"1.0" → "1.0.0"); a fourth "revision" part sorts between patch and the
prerelease label.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable

import semver

_VERSION_RE = re.compile(
    r"^\s*v?(?P<core>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?\s*$"
)


def parse_version(version_str: str) -> semver.Version:
    """Parse the first three numeric parts into a semver.Version.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2-beta" → "1.2.0-beta"

    Raises:
        ValueError: If the string is not a valid package version.
    """
    match = _VERSION_RE.match(version_str)
    if not match:
        raise ValueError(f"Invalid package version: {version_str!r}")
    parts = match.group("core").split(".")
    while len(parts) < 3:
        parts.append("0")
    return semver.Version(
        int(parts[0]),
        int(parts[1]),
        int(parts[2]),
        prerelease=match.group("prerelease"),
        build=match.group("build"),
    )


@functools.total_ordering
class PackageVersion:
    """A comparable package version that keeps its original text for display.

    Equality ignores padding and build metadata, so "1.0" == "1.0.0.0" and
    "1.0.0+abc" == "1.0.0". Prerelease labels compare case-insensitively.
    """

    __slots__ = ("_text", "_semver", "_revision")

    def __init__(self, text: str) -> None:
        match = _VERSION_RE.match(text)
        if not match:
            raise ValueError(f"Invalid package version: {text!r}")
        core = match.group("core").split(".")
        self._text = text.strip()
        self._semver = parse_version(text)
        self._revision = int(core[3]) if len(core) == 4 else 0

    @classmethod
    def parse(cls, value: str | PackageVersion) -> PackageVersion:
        """Return ``value`` as a PackageVersion, parsing strings."""
        if isinstance(value, PackageVersion):
            return value
        return cls(str(value))

    @property
    def major(self) -> int:
        return self._semver.major

    @property
    def minor(self) -> int:
        return self._semver.minor

    @property
    def patch(self) -> int:
        return self._semver.patch

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def prerelease(self) -> str | None:
        return self._semver.prerelease

    @property
    def is_prerelease(self) -> bool:
        return self._semver.prerelease is not None

    def _core(self) -> tuple[int, int, int, int]:
        return (self.major, self.minor, self.patch, self._revision)

    def _label(self) -> semver.Version:
        # Only the prerelease label takes part in ordering past the core parts
        prerelease = self.prerelease.lower() if self.prerelease else None
        return semver.Version(0, 0, 0, prerelease=prerelease)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = PackageVersion(other)
            except ValueError:
                return False
        if not isinstance(other, PackageVersion):
            return NotImplemented
        return self._core() == other._core() and self._label() == other._label()

    def __lt__(self, other: object) -> bool:
        if isinstance(other, str):
            other = PackageVersion(other)
        if not isinstance(other, PackageVersion):
            return NotImplemented
        if self._core() != other._core():
            return self._core() < other._core()
        return self._label() < other._label()

    def __hash__(self) -> int:
        # Numeric identifiers compare as integers, so "01" must hash like "1"
        label = None
        if self.prerelease:
            label = tuple(
                int(part) if part.isdigit() else part.lower()
                for part in self.prerelease.split(".")
            )
        return hash((self._core(), label))

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"PackageVersion({self._text!r})"


def sort_descending(versions: Iterable[str | PackageVersion]) -> list[PackageVersion]:
    """Sort versions from newest to oldest."""
    return sorted((PackageVersion.parse(v) for v in versions), reverse=True)


def latest_stable(versions: Iterable[str | PackageVersion]) -> PackageVersion | None:
    """Return the newest non-prerelease version, or None if there is none."""
    for version in sort_descending(versions):
        if not version.is_prerelease:
            return version
    return None

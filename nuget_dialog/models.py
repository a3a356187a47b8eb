"""Data models for nuget-dialog.

The Pydantic models describe the solution roster (projects and the packages
installed in them); the plain classes hold the per-dialog state that the
detail models derive from it.
"""

from __future__ import annotations

import contextlib
import enum
import functools
from collections.abc import Callable, Iterator
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

from .versions import PackageVersion

Version = Annotated[
    PackageVersion,
    BeforeValidator(PackageVersion.parse),
    PlainSerializer(str, return_type=str),
]


class PackageAction(str, enum.Enum):
    """The operation the user intends to run for the current package."""

    INSTALL = "Install"
    UPDATE = "Update"
    UNINSTALL = "Uninstall"
    CONSOLIDATE = "Consolidate"

    @classmethod
    def coerce(cls, value: PackageAction | str) -> PackageAction:
        """Accept an action or its name/value in any case.

        Raises:
            ValueError: If ``value`` names none of the four actions.
        """
        if isinstance(value, cls):
            return value
        for action in cls:
            if str(value).lower() in (action.value.lower(), action.name.lower()):
                return action
        raise ValueError(f"Unknown package action: {value!r}")


class InstalledPackageRecord(BaseModel):
    """A package id and the version installed in a project or solution.

    Attributes:
        id: Package id. Ids compare case-insensitively.
        version: Installed version.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    id: str
    version: Version


class InstalledPackages(BaseModel):
    """Lookup over the packages installed in one project or the solution."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    packages: list[InstalledPackageRecord] = Field(default_factory=list)

    def get_installed_package(self, package_id: str) -> InstalledPackageRecord | None:
        """Return the record for ``package_id``, or None when not installed."""
        key = package_id.lower()
        for record in self.packages:
            if record.id.lower() == key:
                return record
        return None

    def is_installed(self, package_id: str) -> bool:
        return self.get_installed_package(package_id) is not None

    def exists(self, package_id: str, version: str | PackageVersion) -> bool:
        """True if exactly this id and version is installed."""
        record = self.get_installed_package(package_id)
        return record is not None and record.version == PackageVersion.parse(version)

    def add(self, package_id: str, version: str | PackageVersion) -> InstalledPackageRecord:
        """Install ``package_id`` at ``version``, replacing any other version."""
        self.remove(package_id)
        record = InstalledPackageRecord(id=package_id, version=version)
        self.packages.append(record)
        return record

    def remove(self, package_id: str) -> bool:
        """Remove ``package_id``; returns False if it was not installed."""
        record = self.get_installed_package(package_id)
        if record is None:
            return False
        self.packages.remove(record)
        return True

    def __len__(self) -> int:
        return len(self.packages)


class Project(BaseModel):
    """A project in the solution.

    Attributes:
        name: Display name, unique within the solution.
        kind: Project system kind ("default" or "cloudservice").
        path: Optional project directory, relative to the manifest.
        installed_packages: Packages referenced by this project.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    kind: str = "default"
    path: str | None = None
    installed_packages: InstalledPackages = Field(default_factory=InstalledPackages)


class PackageSource(BaseModel):
    """A named package source. ``source`` is the feed location."""

    name: str
    source: str


class Solution(BaseModel):
    """The roster of projects plus the solution-level installed packages."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = "Solution"
    projects: list[Project] = Field(default_factory=list)
    installed_packages: InstalledPackages = Field(default_factory=InstalledPackages)
    sources: list[PackageSource] = Field(default_factory=list)

    def find_project(self, name: str) -> Project | None:
        for project in self.projects:
            if project.name.lower() == name.lower():
                return project
        return None


class PackageActionRequest(BaseModel):
    """What the executor needs to run an action: package, version, projects."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    package_id: str
    action: PackageAction
    version: Version | None = None
    projects: list[str] = Field(default_factory=list)


class VersionForDisplay:
    """A selectable version plus an optional label such as "Latest stable"."""

    __slots__ = ("version", "label")

    def __init__(self, version: PackageVersion, label: str = "") -> None:
        self.version = version
        self.label = label

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionForDisplay):
            return NotImplemented
        return self.version == other.version and self.label == other.label

    def __hash__(self) -> int:
        return hash((self.version, self.label))

    def __str__(self) -> str:
        if self.label:
            return f"{self.label} {self.version}"
        return str(self.version)

    def __repr__(self) -> str:
        return f"VersionForDisplay({str(self.version)!r}, {self.label!r})"


# Marker placed in a version list between the labelled entry and the rest.
SEPARATOR = None


class NotifyPropertyChanged:
    """Property-change notification for models observed by a view.

    Subscribers are called with ``(sender, property_name)``. Inside
    ``deferred_notifications()`` changes are collected and each name is
    raised once when the outermost block exits.
    """

    def __init__(self) -> None:
        self._property_changed: list[Callable[[Any, str], None]] = []
        self._deferred: list[str] | None = None

    def subscribe(self, callback: Callable[[Any, str], None]) -> None:
        self._property_changed.append(callback)

    def unsubscribe(self, callback: Callable[[Any, str], None]) -> None:
        self._property_changed.remove(callback)

    def on_property_changed(self, name: str) -> None:
        if self._deferred is not None:
            if name not in self._deferred:
                self._deferred.append(name)
            return
        for callback in list(self._property_changed):
            callback(self, name)

    @contextlib.contextmanager
    def deferred_notifications(self) -> Iterator[None]:
        if self._deferred is not None:
            # Nested: the outer block raises everything
            yield
            return
        self._deferred = []
        try:
            yield
        finally:
            pending, self._deferred = self._deferred, None
            for name in pending:
                self.on_property_changed(name)


@functools.total_ordering
class PackageInstallationInfo:
    """Per-project state for the current package and action.

    ``version`` is the installed version of the package (None if absent),
    ``enabled`` tells whether the selected action applies to the project and
    ``selected`` whether the project takes part in the next action. Handlers
    in ``selected_changed`` run whenever ``selected`` flips.
    """

    def __init__(
        self,
        project: Project,
        version: PackageVersion | None = None,
        enabled: bool = True,
    ) -> None:
        self.project = project
        self.version = version
        self.enabled = enabled
        self._selected = False
        self.selected_changed: list[Callable[[PackageInstallationInfo], None]] = []

    @property
    def name(self) -> str:
        return self.project.name

    @property
    def selected(self) -> bool:
        return self._selected

    @selected.setter
    def selected(self, value: bool) -> None:
        if self._selected == value:
            return
        self._selected = value
        for handler in list(self.selected_changed):
            handler(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageInstallationInfo):
            return NotImplemented
        return self is other

    def __lt__(self, other: PackageInstallationInfo) -> bool:
        return self.name.lower() < other.name.lower()

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return (
            f"PackageInstallationInfo({self.name!r}, version={self.version}, "
            f"enabled={self.enabled}, selected={self.selected})"
        )


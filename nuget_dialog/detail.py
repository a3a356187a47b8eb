"""Shared state for the package detail pane.

A detail model holds the package being shown, the actions that apply to it
and the versions offered for the selected action. Subclasses decide which
actions are legal (``can_install`` and friends) and how the version list is
built for a given action.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from .models import (
    SEPARATOR,
    NotifyPropertyChanged,
    PackageAction,
    PackageActionRequest,
    VersionForDisplay,
)
from .versions import PackageVersion, latest_stable, sort_descending

logger = logging.getLogger(__name__)

LATEST_STABLE = "Latest stable"


class PackageMetadataSource(Protocol):
    """Anything that can list the known versions of a package."""

    def find_versions(self, package_id: str) -> list[PackageVersion]: ...


def build_version_list(
    versions: Iterable[str | PackageVersion],
) -> list[VersionForDisplay | None]:
    """Build the Install/Update version list.

    The newest stable version comes first, labelled "Latest stable" and
    followed by a separator. Then every version follows, newest first,
    including the one already shown at the top.

    Example:
        ["1.0", "2.0", "1.5-beta"] →
        [Latest stable 2.0, SEPARATOR, 2.0, 1.5-beta, 1.0]
    """
    ordered = sort_descending(versions)
    result: list[VersionForDisplay | None] = []
    stable = latest_stable(ordered)
    if stable is not None:
        result.append(VersionForDisplay(stable, LATEST_STABLE))
    if result:
        result.append(SEPARATOR)
    result.extend(VersionForDisplay(v) for v in ordered)
    return result


class DetailControlModel(NotifyPropertyChanged):
    """Base detail model: current package, action list and version list.

    ``target`` is whatever the subclass installs into (a Solution or a
    Project). All setters recompute dependent state before returning and
    raise each property-changed notification once, afterwards.
    """

    def __init__(self, target: Any) -> None:
        super().__init__()
        self._target = target
        self._id: str | None = None
        self._all_packages: list[PackageVersion] = []
        self._actions: list[PackageAction] = []
        self._selected_action: PackageAction | None = None
        self._versions: list[VersionForDisplay | None] = []
        self._selected_version: VersionForDisplay | None = None

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def all_packages(self) -> list[PackageVersion]:
        """All known versions of the current package, newest first."""
        return list(self._all_packages)

    @property
    def actions(self) -> list[PackageAction]:
        return list(self._actions)

    @property
    def versions(self) -> list[VersionForDisplay | None]:
        return list(self._versions)

    def set_current_package(
        self, package_id: str, versions: Iterable[str | PackageVersion]
    ) -> None:
        """Show ``package_id`` with its known ``versions``."""
        with self.deferred_notifications():
            self._id = package_id
            self._all_packages = sort_descending(set(PackageVersion.parse(v) for v in versions))
            logger.debug("Package %s has %d known versions", package_id, len(self._all_packages))
            self.on_property_changed("id")
            self.create_actions()

    def load_package(self, source: PackageMetadataSource, package_id: str) -> None:
        """Look up the known versions of ``package_id`` and show it."""
        self.set_current_package(package_id, source.find_versions(package_id))

    def create_actions(self) -> None:
        """Rebuild the action list and select its first entry."""
        checks = {
            PackageAction.INSTALL: self.can_install,
            PackageAction.UPDATE: self.can_update,
            PackageAction.UNINSTALL: self.can_uninstall,
            PackageAction.CONSOLIDATE: self.can_consolidate,
        }
        with self.deferred_notifications():
            self._actions = [action for action, check in checks.items() if check()]
            self.on_property_changed("actions")
            if self._actions:
                self.selected_action = self._actions[0]
            else:
                self._selected_action = None
                self.on_property_changed("selected_action")
                self.create_versions()

    @property
    def selected_action(self) -> PackageAction | None:
        return self._selected_action

    @selected_action.setter
    def selected_action(self, value: PackageAction | str) -> None:
        action = PackageAction.coerce(value)
        with self.deferred_notifications():
            self._selected_action = action
            logger.debug("Selected action %s for %s", action.value, self._id)
            self.create_versions()
            self.on_property_changed("selected_action")

    @property
    def selected_version(self) -> VersionForDisplay | None:
        return self._selected_version

    @selected_version.setter
    def selected_version(self, value: VersionForDisplay | None) -> None:
        if value is SEPARATOR:
            raise ValueError("A separator cannot be selected")
        if value not in self._versions:
            raise ValueError(f"Version {value} is not in the version list")
        value = self._versions[self._versions.index(value)]
        if value is not self._selected_version:
            self._select_version(value)

    @property
    def selected_package_version(self) -> PackageVersion | None:
        """The version behind ``selected_version``, or None."""
        if self._selected_version is None:
            return None
        return self._selected_version.version

    def select_version(self, version: str | PackageVersion) -> None:
        """Select the list entry for ``version``.

        Unlabelled entries win over the "Latest stable" entry for the same
        version.

        Raises:
            ValueError: If ``version`` is not offered.
        """
        wanted = PackageVersion.parse(version)
        matches = [v for v in self._versions if v is not SEPARATOR and v.version == wanted]
        if not matches:
            raise ValueError(f"Version {wanted} is not offered for {self._id}")
        plain = [v for v in matches if not v.label]
        self.selected_version = (plain or matches)[0]

    def _set_versions(self, versions: list[VersionForDisplay | None]) -> None:
        """Replace the version list and select its first concrete entry."""
        with self.deferred_notifications():
            self._versions = versions
            default = next((v for v in versions if v is not SEPARATOR), None)
            self._select_version(default)
            self.on_property_changed("versions")

    def _select_version(self, value: VersionForDisplay | None) -> None:
        with self.deferred_notifications():
            self._selected_version = value
            self.on_selected_version_changed()
            self.on_property_changed("selected_version")

    def on_selected_version_changed(self) -> None:
        """Hook for subclasses; runs after every version selection."""

    def create_versions(self) -> None:
        raise NotImplementedError

    def can_install(self) -> bool:
        raise NotImplementedError

    def can_update(self) -> bool:
        raise NotImplementedError

    def can_uninstall(self) -> bool:
        raise NotImplementedError

    def can_consolidate(self) -> bool:
        raise NotImplementedError

    def action_request(self) -> PackageActionRequest | None:
        raise NotImplementedError

"""Detail model for managing one package in a single project."""

from __future__ import annotations

from .detail import DetailControlModel, build_version_list
from .models import PackageAction, PackageActionRequest, Project, VersionForDisplay
from .versions import PackageVersion


class PackageDetailControlModel(DetailControlModel):
    """Per-project detail model.

    Install is offered when the project lacks the package; Update and
    Uninstall when it has it. Consolidate never applies to one project.
    """

    def __init__(self, project: Project) -> None:
        super().__init__(project)

    @property
    def project(self) -> Project:
        return self._target

    @property
    def installed_version(self) -> PackageVersion | None:
        if self.id is None:
            return None
        record = self.project.installed_packages.get_installed_package(self.id)
        return record.version if record is not None else None

    def can_install(self) -> bool:
        return self.installed_version is None

    def can_update(self) -> bool:
        return self.installed_version is not None and len(self._all_packages) >= 2

    def can_uninstall(self) -> bool:
        return self.installed_version is not None

    def can_consolidate(self) -> bool:
        return False

    def create_versions(self) -> None:
        action = self.selected_action
        installed = self.installed_version
        if action is PackageAction.INSTALL:
            self._set_versions(build_version_list(self._all_packages))
        elif action is PackageAction.UPDATE:
            # The installed version is not an update target
            others = [v for v in self._all_packages if v != installed]
            self._set_versions(build_version_list(others))
        elif action is PackageAction.UNINSTALL and installed is not None:
            self._set_versions([VersionForDisplay(installed)])
        else:
            self._set_versions([])

    def action_request(self) -> PackageActionRequest | None:
        if self.id is None or self.selected_action is None or self.selected_version is None:
            return None
        return PackageActionRequest(
            package_id=self.id,
            action=self.selected_action,
            version=self.selected_package_version,
            projects=[self.project.name],
        )

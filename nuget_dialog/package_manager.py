"""Applies package actions to the projects of a solution.

The dialog models only decide *what* may be done; the package manager does
it, against the in-memory roster. Callers persist the result (see
``manifest.save_solution``).
"""

from __future__ import annotations

import logging

from .models import (
    InstalledPackages,
    PackageAction,
    PackageActionRequest,
    Project,
    Solution,
)
from .repository import DependencyResolver, LocalPackageRepository
from .versions import PackageVersion

logger = logging.getLogger(__name__)


class PackageManager:
    """Installs, updates and removes packages in the projects of a solution.

    Args:
        solution: The roster to modify.
        source_repository: Where dependencies are resolved from. Without one,
            installs never pull in dependencies.
    """

    def __init__(
        self,
        solution: Solution,
        source_repository: LocalPackageRepository | None = None,
    ) -> None:
        self.solution = solution
        self.source_repository = source_repository

    def local_repository(self, project: Project) -> InstalledPackages:
        """The packages installed in ``project``."""
        return project.installed_packages

    def execute(self, request: PackageActionRequest) -> list[Project]:
        """Run ``request`` on each project it names.

        Install, Update and Consolidate set the package to the requested
        version; Uninstall removes it. Returns the projects that changed.

        Raises:
            ValueError: If a named project is not in the solution, or a
                version is required and missing.
        """
        if request.action is not PackageAction.UNINSTALL and request.version is None:
            raise ValueError(f"{request.action.value} of {request.package_id} needs a version")

        touched: list[Project] = []
        for name in request.projects:
            project = self.solution.find_project(name)
            if project is None:
                raise ValueError(f"Project {name!r} is not in solution {self.solution.name!r}")
            if request.action is PackageAction.UNINSTALL:
                changed = project.installed_packages.remove(request.package_id)
            elif request.action is PackageAction.INSTALL:
                self.install_package(project, request.package_id, request.version)
                changed = True
            else:
                changed = not project.installed_packages.exists(request.package_id, request.version)
                project.installed_packages.add(request.package_id, request.version)
            if changed:
                logger.debug(
                    "%s %s %s in %s",
                    request.action.value,
                    request.package_id,
                    request.version,
                    project.name,
                )
                touched.append(project)
        return touched

    def install_package(
        self,
        project: Project,
        package_id: str,
        version: str | PackageVersion,
        ignore_dependencies: bool = False,
        repository: LocalPackageRepository | None = None,
    ) -> None:
        """Install ``package_id`` at ``version`` into ``project``.

        Unless ``ignore_dependencies`` is set, the dependencies found in the
        source repository (or ``repository`` when given) are installed too,
        skipping ones already present.
        """
        project.installed_packages.add(package_id, version)
        repository = repository or self.source_repository
        if ignore_dependencies or repository is None:
            return
        package = repository.find_package(package_id, version)
        if package is None:
            return
        resolver = DependencyResolver(repository)
        for dep in resolver.get_dependencies(package)[1:]:
            if not project.installed_packages.is_installed(dep.id):
                project.installed_packages.add(dep.id, dep.version)
                logger.debug("Installed dependency %s %s in %s", dep.id, dep.version, project.name)

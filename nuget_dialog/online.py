"""Online provider: browse package sources and install from them.

Each configured package source becomes one root node. A source that cannot
be opened still gets a node, an empty one, so the user sees that it exists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from .models import PackageSource, Project
from .package_manager import PackageManager
from .repository import (
    DependencyResolver,
    LocalPackageRepository,
    PackageManifest,
    RepositoryError,
)

logger = logging.getLogger(__name__)

INSTALL_COMMAND = "Install"

LicenseAcceptor = Callable[[list[PackageManifest]], bool]


class RepositoryFactory(Protocol):
    def create_repository(self, source: str) -> LocalPackageRepository: ...


class PackagesTreeNode:
    """A browse node listing the packages of one source."""

    def __init__(self, provider: OnlineProvider, name: str) -> None:
        self.provider = provider
        self.name = name

    @property
    def extensions(self) -> list[PackageItem]:
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class SimpleTreeNode(PackagesTreeNode):
    """Node backed by a repository; lists the latest version of each package."""

    def __init__(
        self, provider: OnlineProvider, name: str, repository: LocalPackageRepository
    ) -> None:
        super().__init__(provider, name)
        self.repository = repository

    @property
    def extensions(self) -> list[PackageItem]:
        return [
            self.provider.create_extension(package, self.repository)
            for package in self.repository.search()
        ]


class EmptyTreeNode(PackagesTreeNode):
    """Placeholder node for a source that could not be opened."""


class PackageItem:
    """A package row in the browse list together with its command."""

    def __init__(
        self,
        provider: OnlineProvider,
        package: PackageManifest,
        repository: LocalPackageRepository | None = None,
    ) -> None:
        self.provider = provider
        self.package = package
        self.repository = repository
        self.command_name = ""
        self.is_enabled = True
        self.update_enabled_status()

    @property
    def id(self) -> str:
        return self.package.id

    @property
    def version(self) -> str:
        return str(self.package.version)

    def update_enabled_status(self) -> None:
        self.is_enabled = self.provider.can_execute(self)


class OnlineProvider:
    """Lists packages from every package source for one project.

    Args:
        package_manager: Performs the install.
        project: The project packages are installed into.
        repository_factory: Opens a repository for a source string.
        sources: Package sources, one root node each, in order.
    """

    name = "Online"

    def __init__(
        self,
        package_manager: PackageManager,
        project: Project,
        repository_factory: RepositoryFactory,
        sources: list[PackageSource],
    ) -> None:
        self.package_manager = package_manager
        self.project = project
        self._repository_factory = repository_factory
        self._sources = list(sources)
        self.root_nodes: list[PackagesTreeNode] = []
        self.selected_node: PackagesTreeNode | None = None

    @property
    def refresh_on_node_selection(self) -> bool:
        # only refresh if the current node doesn't have any packages
        return self.selected_node is None or not self.selected_node.extensions

    def fill_root_nodes(self) -> list[PackagesTreeNode]:
        self.root_nodes = []
        for source in self._sources:
            node: PackagesTreeNode
            try:
                repository = self._repository_factory.create_repository(source.source)
                node = SimpleTreeNode(self, source.name, repository)
            except RepositoryError as exc:
                logger.warning("Package source %s is unavailable: %s", source.name, exc)
                node = EmptyTreeNode(self, source.name)
            self.root_nodes.append(node)
        return self.root_nodes

    def create_extension(
        self, package: PackageManifest, repository: LocalPackageRepository | None = None
    ) -> PackageItem:
        item = PackageItem(self, package, repository)
        item.command_name = INSTALL_COMMAND
        return item

    def can_execute(self, item: PackageItem) -> bool:
        """Only packages not yet installed in the project can be installed."""
        return not self.package_manager.local_repository(self.project).exists(
            item.id, item.package.version
        )

    def execute(self, item: PackageItem, license_acceptor: LicenseAcceptor) -> bool:
        """Install ``item`` after any required license acceptance.

        ``license_acceptor`` receives the packages (the item and its
        dependencies) that require acceptance and are not installed yet.
        Returns False, installing nothing, if the licenses are declined.
        """
        repository = item.repository or self.package_manager.source_repository
        if repository is not None:
            packages = DependencyResolver(repository).get_dependencies(item.package)
        else:
            packages = [item.package]
        local = self.package_manager.local_repository(self.project)
        license_packages = [
            p for p in packages
            if p.require_license_acceptance and not local.exists(p.id, p.version)
        ]
        if license_packages and not license_acceptor(license_packages):
            logger.info("License declined for %s", ", ".join(p.id for p in license_packages))
            return False

        self.package_manager.install_package(
            self.project, item.id, item.package.version, repository=repository
        )
        self.on_execute_completed(item)
        return True

    def on_execute_completed(self, item: PackageItem) -> None:
        item.update_enabled_status()

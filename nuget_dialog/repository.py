"""Local package repositories.

A package source points at a TOML feed file listing package manifests.
Repositories answer the lookups the dialog needs: which versions of a
package exist, whether an exact version exists, and which packages a
package pulls in.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import Version
from .toml import ManifestError, get_array_of_tables, load_document, plain, require_str
from .versions import PackageVersion, sort_descending

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A package source could not be opened."""


class PackageManifest(BaseModel):
    """One package version published in a feed.

    Attributes:
        id: Package id.
        version: Published version.
        require_license_acceptance: The user must accept the license before
            this package is installed.
        dependencies: Ids of packages this package depends on.
        summary: Short description shown in the browse list.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    version: Version
    require_license_acceptance: bool = False
    dependencies: list[str] = Field(default_factory=list)
    summary: str = ""


class LocalPackageRepository:
    """In-memory repository over a list of package manifests."""

    def __init__(self, packages: list[PackageManifest] | None = None, source: str = "") -> None:
        self.source = source
        self._packages = list(packages or [])

    def search(self, term: str = "") -> list[PackageManifest]:
        """Latest version of every package whose id contains ``term``."""
        latest: dict[str, PackageManifest] = {}
        for package in self._packages:
            if term.lower() not in package.id.lower():
                continue
            key = package.id.lower()
            if key not in latest or latest[key].version < package.version:
                latest[key] = package
        return sorted(latest.values(), key=lambda p: p.id.lower())

    def find_versions(self, package_id: str) -> list[PackageVersion]:
        """All versions of ``package_id``, newest first."""
        return sort_descending(
            p.version for p in self._packages if p.id.lower() == package_id.lower()
        )

    def find_package(
        self, package_id: str, version: str | PackageVersion | None = None
    ) -> PackageManifest | None:
        """The manifest for ``package_id`` at ``version`` (latest if None)."""
        candidates = [p for p in self._packages if p.id.lower() == package_id.lower()]
        if version is None:
            return max(candidates, key=lambda p: p.version, default=None)
        wanted = PackageVersion.parse(version)
        for package in candidates:
            if package.version == wanted:
                return package
        return None

    def exists(self, package_id: str, version: str | PackageVersion) -> bool:
        return self.find_package(package_id, version) is not None


def load_feed(path: Path) -> LocalPackageRepository:
    """Read a TOML feed file into a repository.

    Raises:
        ManifestError: If the feed is missing or malformed.
    """
    doc = load_document(path)
    packages: list[PackageManifest] = []
    for i, entry in enumerate(get_array_of_tables(doc, "package", path)):
        where = f"package #{i + 1}"
        require_str(entry, "id", path, where)
        try:
            packages.append(PackageManifest.model_validate(plain(entry)))
        except ValidationError as exc:
            raise ManifestError(f"{path}: {where}: {exc}") from exc
    return LocalPackageRepository(packages, source=str(path))


class LocalRepositoryFactory:
    """Creates repositories for package sources that name feed files.

    Relative sources are resolved against ``base_dir``.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = base_dir or Path.cwd()

    def create_repository(self, source: str) -> LocalPackageRepository:
        """Open the feed at ``source``.

        Raises:
            RepositoryError: If the feed cannot be read.
        """
        path = Path(source)
        if not path.is_absolute():
            path = self.base_dir / path
        try:
            return load_feed(path)
        except ManifestError as exc:
            raise RepositoryError(f"Cannot open package source {source!r}: {exc}") from exc


class DependencyResolver:
    """Walks dependencies through a repository."""

    def __init__(self, repository: LocalPackageRepository) -> None:
        self.repository = repository

    def get_dependencies(self, package: PackageManifest) -> list[PackageManifest]:
        """Return ``package`` and everything it depends on, each once.

        Dependencies resolve to the latest version in the repository;
        dependency ids the repository does not know are skipped.
        """
        seen: set[str] = set()
        order: list[PackageManifest] = []
        stack = [package]
        while stack:
            current = stack.pop()
            key = current.id.lower()
            if key in seen:
                continue
            seen.add(key)
            order.append(current)
            for dep_id in reversed(current.dependencies):
                dep = self.repository.find_package(dep_id)
                if dep is None:
                    logger.debug(
                        "Dependency %s of %s not found in %s",
                        dep_id,
                        current.id,
                        self.repository.source,
                    )
                    continue
                stack.append(dep)
        return order


class AggregateRepository:
    """Answers lookups from several repositories, in order."""

    def __init__(self, repositories: list[LocalPackageRepository]) -> None:
        self.repositories = list(repositories)
        self.source = ", ".join(r.source for r in self.repositories)

    def search(self, term: str = "") -> list[PackageManifest]:
        return LocalPackageRepository(
            [p for r in self.repositories for p in r.search(term)]
        ).search(term)

    def find_versions(self, package_id: str) -> list[PackageVersion]:
        return sort_descending(
            {v for r in self.repositories for v in r.find_versions(package_id)}
        )

    def find_package(
        self, package_id: str, version: str | PackageVersion | None = None
    ) -> PackageManifest | None:
        found = [
            p
            for p in (r.find_package(package_id, version) for r in self.repositories)
            if p is not None
        ]
        return max(found, key=lambda p: p.version, default=None)

    def exists(self, package_id: str, version: str | PackageVersion) -> bool:
        return self.find_package(package_id, version) is not None

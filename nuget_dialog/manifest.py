"""Solution manifest reading and writing.

A solution manifest is a TOML file describing the projects of a solution,
the packages installed in each, the packages installed at solution level
and the package sources to browse:

    [solution]
    name = "Contoso"

    [solution.packages]
    "Tools.Pack" = "1.0.0"

    [[project]]
    name = "Web"
    kind = "default"

    [project.packages]
    "Newtonsoft.Json" = "6.0.1"

    [[source]]
    name = "local"
    source = "feeds/local.toml"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError

from .models import InstalledPackages, PackageSource, Project, Solution
from .project_systems import PROJECT_SYSTEMS
from .toml import (
    ManifestError,
    get_array_of_tables,
    get_table,
    load_document,
    plain,
    require_str,
    save_document,
)


def _read_packages(table: dict[str, Any], path: Path, where: str) -> InstalledPackages:
    installed = InstalledPackages()
    for package_id, version in get_table(table, "packages", path).items():
        try:
            installed.add(str(package_id), str(plain(version)))
        except ValueError as exc:
            raise ManifestError(f"{path}: {where}: package {package_id!r}: {exc}") from exc
    return installed


def load_solution(path: Path) -> Solution:
    """Load a solution manifest.

    Raises:
        ManifestError: If the file is missing or malformed, or two projects
            share a name.
    """
    doc = load_document(path)
    solution_table = get_table(doc, "solution", path)

    projects: list[Project] = []
    seen: set[str] = set()
    for i, entry in enumerate(get_array_of_tables(doc, "project", path)):
        where = f"project #{i + 1}"
        name = require_str(entry, "name", path, where)
        if name.lower() in seen:
            raise ManifestError(f"{path}: duplicate project name {name!r}")
        seen.add(name.lower())
        kind = str(plain(entry.get("kind", "default")))
        if kind.lower() not in PROJECT_SYSTEMS:
            raise ManifestError(f"{path}: project {name!r} has unknown kind {kind!r}")
        try:
            projects.append(
                Project(
                    name=name,
                    kind=kind,
                    path=plain(entry.get("path")),
                    installed_packages=_read_packages(entry, path, f"project {name!r}"),
                )
            )
        except ValidationError as exc:
            raise ManifestError(f"{path}: {where}: {exc}") from exc

    sources: list[PackageSource] = []
    for i, entry in enumerate(get_array_of_tables(doc, "source", path)):
        where = f"source #{i + 1}"
        sources.append(
            PackageSource(
                name=require_str(entry, "name", path, where),
                source=require_str(entry, "source", path, where),
            )
        )

    return Solution(
        name=str(plain(solution_table.get("name", path.stem))),
        projects=projects,
        installed_packages=_read_packages(solution_table, path, "solution"),
        sources=sources,
    )


def _packages_table(installed: InstalledPackages) -> tomlkit.items.Table:
    table = tomlkit.table()
    for record in installed.packages:
        table.add(record.id, str(record.version))
    return table


def save_solution(path: Path, solution: Solution) -> None:
    """Write the installed packages of ``solution`` back to ``path``.

    Existing files keep their layout and comments; only the ``packages``
    tables are replaced and missing projects are appended.
    """
    doc = load_document(path) if path.exists() else tomlkit.document()

    if "solution" not in doc:
        doc.add("solution", tomlkit.table())
    doc["solution"]["name"] = solution.name
    doc["solution"]["packages"] = _packages_table(solution.installed_packages)

    if "project" not in doc:
        doc.add("project", tomlkit.aot())
    entries = {str(entry["name"]).lower(): entry for entry in doc["project"]}
    for project in solution.projects:
        entry = entries.get(project.name.lower())
        if entry is None:
            entry = tomlkit.table()
            entry.add("name", project.name)
            if project.kind != "default":
                entry.add("kind", project.kind)
            if project.path:
                entry.add("path", project.path)
            doc["project"].append(entry)
        entry["packages"] = _packages_table(project.installed_packages)

    save_document(path, doc)

"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from nuget_dialog.models import InstalledPackages, Project, Solution

SolutionFactory = Callable[..., Solution]


def _installed(packages: dict[str, str] | None) -> InstalledPackages:
    installed = InstalledPackages()
    for package_id, version in (packages or {}).items():
        installed.add(package_id, version)
    return installed


@pytest.fixture
def make_solution() -> SolutionFactory:
    """Build a solution from {project name: {package id: version}}."""

    def factory(
        projects: dict[str, dict[str, str]],
        solution_packages: dict[str, str] | None = None,
    ) -> Solution:
        return Solution(
            name="Test",
            projects=[
                Project(name=name, installed_packages=_installed(packages))
                for name, packages in projects.items()
            ],
            installed_packages=_installed(solution_packages),
        )

    return factory


@pytest.fixture
def mixed_solution(make_solution: SolutionFactory) -> Solution:
    """Foo 1.0 in Alpha, Foo 2.0 in Beta, nothing in Gamma and Delta."""
    return make_solution(
        {
            "Gamma": {},
            "Alpha": {"Foo": "1.0"},
            "Delta": {"Bar": "3.0"},
            "Beta": {"Foo": "2.0"},
        }
    )


FOO_VERSIONS = ["1.0", "1.5-beta", "2.0"]


@pytest.fixture
def feed_file(tmp_path: Path) -> Path:
    """A local feed with Foo, its dependency Bar and a licensed package."""
    feeds = tmp_path / "feeds"
    feeds.mkdir()
    feed = feeds / "local.toml"
    feed.write_text(
        """\
[[package]]
id = "Foo"
version = "1.0"
dependencies = ["Bar"]

[[package]]
id = "Foo"
version = "1.5-beta"
dependencies = ["Bar"]

[[package]]
id = "Foo"
version = "2.0"
dependencies = ["Bar"]
summary = "The Foo library"

[[package]]
id = "Bar"
version = "3.0"
require_license_acceptance = true

[[package]]
id = "Baz"
version = "0.1"
"""
    )
    return feed


@pytest.fixture
def manifest_file(tmp_path: Path, feed_file: Path) -> Path:
    """A solution manifest that uses the local feed."""
    manifest = tmp_path / "solution.toml"
    manifest.write_text(
        """\
# Contoso solution
[solution]
name = "Contoso"

[solution.packages]

[[project]]
name = "Web"
[project.packages]
"Foo" = "1.0"

[[project]]
name = "Api"
[project.packages]
"Foo" = "2.0"

[[project]]
name = "Worker"

[[project]]
name = "Deploy"
kind = "cloudservice"

[[source]]
name = "local"
source = "feeds/local.toml"

[[source]]
name = "broken"
source = "feeds/missing.toml"
"""
    )
    return manifest

"""Tests for nuget_dialog.project_systems."""

from __future__ import annotations

from pathlib import Path

import pytest

from nuget_dialog.models import Project
from nuget_dialog.project_systems import (
    CloudServiceProjectSystem,
    ProjectSystem,
    create_project_system,
)


class TestProjectSystem:
    @pytest.fixture
    def system(self, tmp_path: Path) -> ProjectSystem:
        return ProjectSystem(tmp_path / "Web", {"RootNamespace": "Contoso.Web"})

    def test_add_file_writes_and_adds_item(self, system: ProjectSystem) -> None:
        system.add_file("content/site.css", "body {}")
        assert (system.root / "content" / "site.css").read_text() == "body {}"
        assert system.items == ["content/site.css"]

    def test_bin_files_are_written_but_excluded(self, system: ProjectSystem) -> None:
        system.add_file("bin/Foo.dll", b"\x00")
        assert (system.root / "bin" / "Foo.dll").exists()
        assert system.items == []

    def test_delete_file(self, system: ProjectSystem) -> None:
        system.add_file("readme.txt", "hi")
        system.delete_file("readme.txt")
        assert not (system.root / "readme.txt").exists()
        assert system.items == []

    def test_delete_directory(self, system: ProjectSystem) -> None:
        system.add_file("content/a.txt", "a")
        system.add_file("content/b.txt", "b")
        with pytest.raises(OSError):
            system.delete_directory("content")
        system.delete_directory("content", recursive=True)
        assert not (system.root / "content").exists()
        assert system.items == []

    def test_references(self, system: ProjectSystem) -> None:
        system.add_reference("lib/net45/Foo.dll")
        system.add_gac_reference("System.Web")
        assert system.reference_exists("Foo")
        assert system.reference_exists("System.Web")
        system.remove_reference("Foo")
        assert not system.reference_exists("Foo")

    def test_web_config_files_not_supported(self, system: ProjectSystem) -> None:
        assert not system.is_supported_file("web.config")
        assert not system.is_supported_file("content/Web.Debug.config")
        assert system.is_supported_file("app.config")

    def test_property_lookup(self, system: ProjectSystem) -> None:
        assert system.get_property_value("rootnamespace") == "Contoso.Web"
        with pytest.raises(KeyError):
            system.get_property_value("OutputName")

    def test_binding_redirects_supported(self, system: ProjectSystem) -> None:
        assert system.is_binding_redirect_supported is True


class TestCloudServiceProjectSystem:
    @pytest.fixture
    def system(self, tmp_path: Path) -> CloudServiceProjectSystem:
        return CloudServiceProjectSystem(tmp_path / "Deploy", {"OutputName": "Contoso.Deploy"})

    def test_files_reach_disk_but_not_project(self, system: CloudServiceProjectSystem) -> None:
        system.add_file("content/site.css", "body {}")
        assert (system.root / "content" / "site.css").exists()
        assert system.items == []

    def test_deletes_are_ignored(self, system: CloudServiceProjectSystem) -> None:
        system.add_file("content/site.css", "body {}")
        system.delete_file("content/site.css")
        system.delete_directory("content", recursive=True)
        assert (system.root / "content" / "site.css").exists()

    def test_references_are_ignored(self, system: CloudServiceProjectSystem) -> None:
        system.add_reference("lib/Foo.dll")
        system.add_gac_reference("System.Web")
        system.remove_reference("Anything")
        assert system.references == {}
        assert system.reference_exists("Anything") is True

    def test_everything_supported_nothing_excluded(self, system: CloudServiceProjectSystem) -> None:
        assert system.is_supported_file("web.config")
        assert system.exclude_file("bin/Foo.dll") is False
        assert system.is_binding_redirect_supported is False

    def test_root_namespace_uses_output_name(self, system: CloudServiceProjectSystem) -> None:
        assert system.get_property_value("RootNamespace") == "Contoso.Deploy"
        assert system.get_property_value("ROOTNAMESPACE") == "Contoso.Deploy"

    def test_root_namespace_falls_back_to_default(self, tmp_path: Path) -> None:
        system = CloudServiceProjectSystem(tmp_path)
        assert system.get_property_value("RootNamespace") == "Azure"

    def test_other_properties_pass_through(self, system: CloudServiceProjectSystem) -> None:
        assert system.get_property_value("OutputName") == "Contoso.Deploy"
        with pytest.raises(KeyError):
            system.get_property_value("Missing")


class TestCreateProjectSystem:
    def test_picks_class_by_kind(self, tmp_path: Path) -> None:
        default = create_project_system(Project(name="Web"), tmp_path)
        cloud = create_project_system(Project(name="Deploy", kind="CloudService"), tmp_path)
        assert type(default) is ProjectSystem
        assert isinstance(cloud, CloudServiceProjectSystem)
        assert default.root == tmp_path / "Web"

    def test_uses_project_path(self, tmp_path: Path) -> None:
        system = create_project_system(Project(name="Web", path="src/Web"), tmp_path)
        assert system.root == tmp_path / "src/Web"

    def test_unknown_kind(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown project kind"):
            create_project_system(Project(name="X", kind="database"), tmp_path)

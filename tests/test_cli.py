"""Tests for nuget_dialog.cli."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner, Result

from nuget_dialog.cli import cli
from nuget_dialog.manifest import load_solution


def _run(*args: str) -> Result:
    return CliRunner().invoke(cli, list(args))


def _installed(manifest: Path, project: str, package_id: str = "Foo") -> str | None:
    found = load_solution(manifest).find_project(project)
    assert found is not None
    record = found.installed_packages.get_installed_package(package_id)
    return str(record.version) if record is not None else None


class TestShow:
    def test_solution_actions(self, manifest_file: Path) -> None:
        result = _run("show", str(manifest_file), "Foo")
        assert result.exit_code == 0, result.output
        assert "Foo in solution Contoso" in result.output
        assert "Actions: Install, Update, Uninstall, Consolidate" in result.output
        assert "* Latest stable 2.0" in result.output

    def test_project_actions(self, manifest_file: Path) -> None:
        result = _run("show", str(manifest_file), "Foo", "--project", "Web")
        assert result.exit_code == 0, result.output
        assert "Foo in project Web" in result.output
        assert "Actions: Update, Uninstall" in result.output

    def test_unknown_project(self, manifest_file: Path) -> None:
        result = _run("show", str(manifest_file), "Foo", "--project", "Nope")
        assert result.exit_code == 1
        assert "No project named 'Nope'" in result.output

    def test_malformed_manifest(self, tmp_path: Path) -> None:
        manifest = tmp_path / "bad.toml"
        manifest.write_text("[[project]\n")
        result = _run("show", str(manifest), "Foo")
        assert result.exit_code == 1
        assert "bad.toml" in result.output


class TestPlan:
    def test_update_lists_outdated_projects(self, manifest_file: Path) -> None:
        result = _run("plan", str(manifest_file), "Foo", "-a", "update")
        assert result.exit_code == 0, result.output
        assert "[x] Select all projects (1)" in result.output
        assert "Web" in result.output
        assert "Api" not in result.output
        assert "Nothing to do." not in result.output

    def test_explicit_version(self, manifest_file: Path) -> None:
        result = _run("plan", str(manifest_file), "Foo", "-a", "update", "--version", "1.0")
        assert result.exit_code == 0, result.output
        assert "Api" in result.output
        assert "Web " not in result.output

    def test_show_all(self, manifest_file: Path) -> None:
        result = _run("plan", str(manifest_file), "Foo", "-a", "uninstall", "--show-all")
        assert result.exit_code == 0, result.output
        for name in ("Api", "Deploy", "Web", "Worker"):
            assert name in result.output

    def test_unknown_version(self, manifest_file: Path) -> None:
        result = _run("plan", str(manifest_file), "Foo", "-a", "install", "--version", "9.9")
        assert result.exit_code == 1

    def test_nothing_to_do(self, manifest_file: Path) -> None:
        result = _run("plan", str(manifest_file), "Baz", "-a", "uninstall")
        assert result.exit_code == 0, result.output
        assert "Nothing to do." in result.output


class TestApply:
    def test_update_writes_manifest(self, manifest_file: Path) -> None:
        result = _run("apply", str(manifest_file), "Foo", "-a", "update")
        assert result.exit_code == 0, result.output
        assert "✓ Web" in result.output
        assert f"Updated {manifest_file}" in result.output
        assert _installed(manifest_file, "Web") == "2.0"
        assert manifest_file.read_text().startswith("# Contoso solution")

    def test_install_only_selected_project(self, manifest_file: Path) -> None:
        result = _run("apply", str(manifest_file), "Foo", "-a", "install", "--only", "worker")
        assert result.exit_code == 0, result.output
        assert _installed(manifest_file, "Worker") == "2.0"
        assert _installed(manifest_file, "Worker", "Bar") == "3.0"
        assert _installed(manifest_file, "Deploy") is None

    def test_consolidate(self, manifest_file: Path) -> None:
        result = _run("apply", str(manifest_file), "Foo", "-a", "consolidate", "--version", "2.0")
        assert result.exit_code == 0, result.output
        assert _installed(manifest_file, "Web") == "2.0"
        assert _installed(manifest_file, "Api") == "2.0"

    def test_unknown_only_project(self, manifest_file: Path) -> None:
        result = _run("apply", str(manifest_file), "Foo", "-a", "update", "--only", "Nope")
        assert result.exit_code == 1
        assert "Unknown project(s): nope" in result.output

    def test_only_disabled_project(self, manifest_file: Path) -> None:
        before = manifest_file.read_text()
        result = _run("apply", str(manifest_file), "Foo", "-a", "update", "--only", "Api")
        assert result.exit_code == 1
        assert "no applicable projects selected" in result.output
        assert manifest_file.read_text() == before


class TestBrowse:
    def test_lists_sources(self, manifest_file: Path) -> None:
        result = _run("browse", str(manifest_file), "--project", "Api")
        assert result.exit_code == 0, result.output
        assert "(source unavailable)" in result.output
        lines = {
            line.split()[0]: line for line in result.output.splitlines() if line.startswith("  ")
        }
        assert "(installed)" in lines["Foo"]
        assert "[Install]" in lines["Baz"]

    def test_unknown_project(self, manifest_file: Path) -> None:
        result = _run("browse", str(manifest_file), "--project", "Nope")
        assert result.exit_code == 1

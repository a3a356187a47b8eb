"""CLI entry point for nuget-dialog."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .detail import DetailControlModel
from .manifest import load_solution, save_solution
from .models import PackageAction, Solution
from .online import OnlineProvider, SimpleTreeNode
from .package_manager import PackageManager
from .project_detail import PackageDetailControlModel
from .repository import AggregateRepository, LocalRepositoryFactory, RepositoryError
from .shell import checkbox_glyph, fatal, step
from .solution_detail import PackageSolutionDetailControlModel
from .toml import ManifestError

logger = logging.getLogger(__name__)

ACTION_CHOICE = click.Choice([a.value for a in PackageAction], case_sensitive=False)
MANIFEST_ARG = click.argument(
    "manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


def _load(manifest: Path) -> Solution:
    try:
        return load_solution(manifest)
    except ManifestError as exc:
        raise click.ClickException(str(exc)) from exc


def _open_sources(solution: Solution, manifest: Path) -> AggregateRepository:
    """Open every package source; unavailable ones are skipped."""
    factory = LocalRepositoryFactory(manifest.parent)
    repositories = []
    for source in solution.sources:
        try:
            repositories.append(factory.create_repository(source.source))
        except RepositoryError as exc:
            logger.warning("Skipping package source %s: %s", source.name, exc)
    return AggregateRepository(repositories)


def _echo_versions(model: DetailControlModel) -> None:
    for entry in model.versions:
        if entry is None:
            click.echo("    ──────────")
            continue
        marker = "*" if entry is model.selected_version else " "
        click.echo(f"  {marker} {entry}")


def _solution_model(
    manifest: Path, package: str, action: str, version: str | None, show_all: bool
) -> tuple[Solution, AggregateRepository, PackageSolutionDetailControlModel]:
    solution = _load(manifest)
    repository = _open_sources(solution, manifest)
    model = PackageSolutionDetailControlModel(solution)
    model.load_package(repository, package)
    try:
        model.selected_action = action
        if version is not None:
            model.select_version(version)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    model.show_all = show_all
    return solution, repository, model


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def cli(verbose: bool) -> None:
    """Inspect and apply package actions across the projects of a solution."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@MANIFEST_ARG
@click.argument("package")
@click.option("--project", "project_name", default=None, help="Show for a single project.")
def show(manifest: Path, package: str, project_name: str | None) -> None:
    """Show the actions and versions available for PACKAGE."""
    solution = _load(manifest)
    repository = _open_sources(solution, manifest)

    model: DetailControlModel
    if project_name is not None:
        project = solution.find_project(project_name)
        if project is None:
            fatal(f"No project named {project_name!r} in {manifest}")
        model = PackageDetailControlModel(project)
        scope = f"project {project.name}"
    else:
        model = PackageSolutionDetailControlModel(solution)
        scope = f"solution {solution.name}"

    model.load_package(repository, package)
    step(f"{package} in {scope}")
    if not model.actions:
        click.echo("No actions available.")
        return
    click.echo("Actions: " + ", ".join(a.value for a in model.actions))
    click.echo(f"Versions for {model.selected_action.value}:")
    _echo_versions(model)


@cli.command()
@MANIFEST_ARG
@click.argument("package")
@click.option("-a", "--action", type=ACTION_CHOICE, required=True, help="Action to plan.")
@click.option("--version", "version", default=None, help="Version to use (default: first offered).")
@click.option("--show-all", is_flag=True, help="List projects the action does not apply to.")
def plan(
    manifest: Path, package: str, action: str, version: str | None, show_all: bool
) -> None:
    """Show which projects ACTION would touch for PACKAGE."""
    _, _, model = _solution_model(manifest, package, action, version, show_all)

    step(f"{model.selected_action.value} {package}")
    click.echo("Versions:")
    _echo_versions(model)
    click.echo()
    click.echo(f"{checkbox_glyph(model.checkbox_state)} {model.select_checkbox_text}")
    for entry in model.projects or []:
        installed = str(entry.version) if entry.version is not None else "-"
        state = checkbox_glyph(entry.selected) if entry.enabled else "   "
        click.echo(f"  {state} {entry.name:<30} {installed}")
    if not model.action_enabled:
        click.echo("\nNothing to do.")


@cli.command()
@MANIFEST_ARG
@click.argument("package")
@click.option("-a", "--action", type=ACTION_CHOICE, required=True, help="Action to run.")
@click.option("--version", "version", default=None, help="Version to use (default: first offered).")
@click.option(
    "--only",
    "only",
    multiple=True,
    help="Restrict to these projects (repeatable). Default: every applicable project.",
)
def apply(
    manifest: Path, package: str, action: str, version: str | None, only: tuple[str, ...]
) -> None:
    """Run ACTION for PACKAGE and write the result back to MANIFEST."""
    solution, repository, model = _solution_model(manifest, package, action, version, False)

    if only:
        wanted = {name.lower() for name in only}
        known = {entry.name.lower() for entry in model.all_projects}
        unknown = sorted(wanted - known)
        if unknown:
            fatal(f"Unknown project(s): {', '.join(unknown)}")
        model.uncheck_all_projects()
        for entry in model.all_projects:
            if entry.enabled and entry.name.lower() in wanted:
                entry.selected = True

    request = model.action_request()
    if request is None:
        fatal(f"{model.selected_action.value} {package}: no applicable projects selected")

    manager = PackageManager(solution, repository)
    try:
        touched = manager.execute(request)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    save_solution(manifest, solution)
    step(f"{request.action.value} {request.package_id} {request.version or ''}".rstrip())
    for project in touched:
        click.echo(f"  ✓ {project.name}")
    click.echo(f"Updated {manifest}")


@cli.command()
@MANIFEST_ARG
@click.option("--project", "project_name", required=True, help="Project to install into.")
def browse(manifest: Path, project_name: str) -> None:
    """List the packages of every source for a project."""
    solution = _load(manifest)
    project = solution.find_project(project_name)
    if project is None:
        fatal(f"No project named {project_name!r} in {manifest}")

    provider = OnlineProvider(
        PackageManager(solution),
        project,
        LocalRepositoryFactory(manifest.parent),
        solution.sources,
    )
    for node in provider.fill_root_nodes():
        step(node.name)
        if not isinstance(node, SimpleTreeNode):
            click.echo("  (source unavailable)")
            continue
        items = node.extensions
        if not items:
            click.echo("  (no packages)")
        for item in items:
            command = f"[{item.command_name}]" if item.is_enabled else "(installed)"
            click.echo(f"  {item.id:<30} {item.version:<12} {command}")

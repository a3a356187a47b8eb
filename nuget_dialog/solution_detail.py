"""Detail model for managing one package across every project of a solution.

For the selected package and action the model works out, per project, the
installed version, whether the action applies ("enabled") and whether the
project takes part in the next run ("selected"). On top of that it keeps the
state of the "select all" checkbox and whether the action button may be used.

Applicability per action, with v(X) the version installed in project X:

    Install      v(X) absent
    Update       v(X) present and v(X) != selected version
    Uninstall    v(X) present and v(X) == selected version
    Consolidate  v(X) present and v(X) != selected version

Every recompute resets ``selected`` to ``enabled``.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator

from .detail import DetailControlModel, build_version_list
from .models import (
    PackageAction,
    PackageActionRequest,
    PackageInstallationInfo,
    Solution,
    VersionForDisplay,
)
from .versions import PackageVersion, sort_descending

logger = logging.getLogger(__name__)

CHECKBOX_TEXT = "Select all projects ({0})"


def is_action_enabled(
    action: PackageAction | None,
    installed: PackageVersion | None,
    selected: PackageVersion | None,
) -> bool:
    """Whether ``action`` applies to a project with ``installed`` version."""
    if action is PackageAction.INSTALL:
        return installed is None
    if action in (PackageAction.UPDATE, PackageAction.CONSOLIDATE):
        return installed is not None and installed != selected
    if action is PackageAction.UNINSTALL:
        return installed is not None and installed == selected
    return False


class PackageSolutionDetailControlModel(DetailControlModel):
    """Per-solution detail model.

    ``all_projects`` holds one entry per solution project for the lifetime
    of the model; ``projects`` is the visible list, either ``all_projects``
    itself (show all) or the enabled entries of it.
    """

    def __init__(self, solution: Solution) -> None:
        super().__init__(solution)
        self._projects: list[PackageInstallationInfo] | None = None
        self._all_projects = sorted(
            PackageInstallationInfo(project, None, True) for project in solution.projects
        )
        # Set while the model updates the checkbox; check/uncheck all are no-ops then.
        self._updating_checkbox = False
        self._updating_projects = False
        self._action_enabled = False
        self._checkbox_state: bool | None = False
        self._select_checkbox_text = ""
        self._show_all = False
        for entry in self._all_projects:
            entry.selected_changed.append(self._on_entry_selected_changed)

    @property
    def solution(self) -> Solution:
        return self._target

    @property
    def projects(self) -> list[PackageInstallationInfo] | None:
        return self._projects

    @property
    def all_projects(self) -> list[PackageInstallationInfo]:
        return self._all_projects

    @property
    def action_enabled(self) -> bool:
        """Whether the action and preview buttons may be used."""
        return self._action_enabled

    @property
    def checkbox_state(self) -> bool | None:
        """Select-all checkbox: True, False, or None when indeterminate."""
        return self._checkbox_state

    @checkbox_state.setter
    def checkbox_state(self, value: bool | None) -> None:
        # What a bound checkbox does when the user clicks it
        if value is True:
            self.check_all_projects()
        elif value is False:
            self.uncheck_all_projects()

    @property
    def select_checkbox_text(self) -> str:
        return self._select_checkbox_text

    @property
    def show_all(self) -> bool:
        return self._show_all

    @show_all.setter
    def show_all(self, value: bool) -> None:
        with self.deferred_notifications():
            self._show_all = value
            self.on_property_changed("show_all")
            self._update_visible_projects()

    def on_property_changed(self, name: str) -> None:
        if name == "checkbox_state" and self._deferred is None:
            self._updating_checkbox = True
            try:
                super().on_property_changed(name)
            finally:
                self._updating_checkbox = False
        else:
            super().on_property_changed(name)

    def on_selected_version_changed(self) -> None:
        self._update_project_list()

    def create_versions(self) -> None:
        action = self.selected_action
        if action in (PackageAction.CONSOLIDATE, PackageAction.UNINSTALL):
            installed = [
                project.installed_packages.get_installed_package(self.id)
                for project in self.solution.projects
            ]
            installed.append(self.solution.installed_packages.get_installed_package(self.id))
            distinct = {record.version for record in installed if record is not None}
            self._set_versions([VersionForDisplay(v) for v in sort_descending(distinct)])
        elif action in (PackageAction.INSTALL, PackageAction.UPDATE):
            self._set_versions(build_version_list(self._all_packages))
        else:
            self._set_versions([])

    def can_install(self) -> bool:
        can_install_in_projects = any(
            not project.installed_packages.is_installed(self.id)
            for project in self.solution.projects
        )
        installed_in_solution = self.solution.installed_packages.is_installed(self.id)
        return not installed_in_solution and can_install_in_projects

    def can_update(self) -> bool:
        enough_versions = len(self._all_packages) >= 2
        can_update_in_projects = any(
            project.installed_packages.is_installed(self.id) and enough_versions
            for project in self.solution.projects
        )
        installed_in_solution = self.solution.installed_packages.is_installed(self.id)
        return can_update_in_projects or (installed_in_solution and enough_versions)

    def can_uninstall(self) -> bool:
        can_uninstall_from_projects = any(
            project.installed_packages.is_installed(self.id)
            for project in self.solution.projects
        )
        return self.solution.installed_packages.is_installed(self.id) or can_uninstall_from_projects

    def can_consolidate(self) -> bool:
        installed_versions = {
            record.version
            for record in (
                project.installed_packages.get_installed_package(self.id)
                for project in self.solution.projects
            )
            if record is not None
        }
        return len(installed_versions) >= 2

    def check_all_projects(self) -> None:
        if self._updating_checkbox:
            return
        with self._batch_selection():
            for entry in self._all_projects:
                if entry.enabled:
                    entry.selected = True
            self.on_property_changed("projects")

    def uncheck_all_projects(self) -> None:
        if self._updating_checkbox:
            return
        with self._batch_selection():
            for entry in self._all_projects:
                if entry.enabled:
                    entry.selected = False

    def action_request(self) -> PackageActionRequest | None:
        """The request to hand to the executor, or None while disabled."""
        if not self._action_enabled or self.id is None or self.selected_action is None:
            return None
        return PackageActionRequest(
            package_id=self.id,
            action=self.selected_action,
            version=self.selected_package_version,
            projects=[p.name for p in self._projects or [] if p.enabled and p.selected],
        )

    @contextlib.contextmanager
    def _batch_selection(self) -> Iterator[None]:
        """Change many entries, then recompute the aggregates once."""
        with self.deferred_notifications():
            previous, self._updating_projects = self._updating_projects, True
            try:
                yield
            finally:
                self._updating_projects = previous
            if not previous:
                self._update_action_enabled()
                self._update_select_checkbox()

    def _on_entry_selected_changed(self, entry: PackageInstallationInfo) -> None:
        if self._updating_projects:
            return
        with self.deferred_notifications():
            self._update_action_enabled()
            self._update_select_checkbox()

    def _update_project_list(self) -> None:
        action = self.selected_action
        selected = self.selected_package_version
        with self._batch_selection():
            for entry in self._all_projects:
                installed = entry.project.installed_packages.get_installed_package(self.id)
                entry.version = installed.version if installed is not None else None
                entry.enabled = is_action_enabled(action, entry.version, selected)
                entry.selected = entry.enabled
            self._update_visible_projects()
        logger.debug(
            "%s %s %s: %d of %d projects enabled",
            action.value if action else None,
            self.id,
            selected,
            sum(1 for p in self._all_projects if p.enabled),
            len(self._all_projects),
        )

    def _update_visible_projects(self) -> None:
        with self._batch_selection():
            if self._show_all:
                self._projects = self._all_projects
            else:
                self._projects = [p for p in self._all_projects if p.enabled]
            self.on_property_changed("projects")

    def _update_action_enabled(self) -> None:
        enabled = self._projects is not None and any(p.selected for p in self._projects)
        if enabled != self._action_enabled:
            self._action_enabled = enabled
            self.on_property_changed("action_enabled")

    def _update_select_checkbox(self) -> None:
        if self._projects is None:
            return
        self._updating_checkbox = True
        try:
            count_total = sum(1 for p in self._projects if p.enabled)
            text = CHECKBOX_TEXT.format(count_total)
            if text != self._select_checkbox_text:
                self._select_checkbox_text = text
                self.on_property_changed("select_checkbox_text")

            count_selected = sum(1 for p in self._projects if p.enabled and p.selected)
            if count_selected == 0:
                state: bool | None = False
            elif count_selected == count_total:
                state = True
            else:
                state = None
            if state is not self._checkbox_state:
                self._checkbox_state = state
                self.on_property_changed("checkbox_state")
        finally:
            self._updating_checkbox = False

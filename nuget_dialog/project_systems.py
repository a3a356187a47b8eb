"""Project systems: how package content lands in a project.

A project system maps the operations a package install needs (add a file,
delete a file or directory, add or remove a reference, read a project
property) onto a project directory. Project kinds that do not support some
of these operations override them.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .models import Project

logger = logging.getLogger(__name__)

BIN_DIR = "bin"


class ProjectSystem:
    """Project system over a project directory.

    Files are written under ``root``; the project's item list and its
    references are tracked in memory. ``properties`` are the project
    properties (looked up case-insensitively).
    """

    def __init__(self, root: Path, properties: dict[str, str] | None = None) -> None:
        self.root = root
        self._properties = {k.lower(): v for k, v in (properties or {}).items()}
        self._items: set[str] = set()
        self._references: dict[str, str] = {}

    @property
    def is_binding_redirect_supported(self) -> bool:
        return True

    @property
    def items(self) -> list[str]:
        """Project-relative paths of the files that belong to the project."""
        return sorted(self._items)

    @property
    def references(self) -> dict[str, str]:
        return dict(self._references)

    def get_full_path(self, path: str) -> Path:
        return self.root / path

    def add_file(self, path: str, content: bytes | str) -> None:
        """Write ``path`` and add it to the project unless it is excluded."""
        full_path = self.get_full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            full_path.write_text(content)
        else:
            full_path.write_bytes(content)
        if not self.exclude_file(path):
            self.add_file_to_container(path)
        logger.debug("Added file %s to %s", path, self.root)

    def add_file_to_container(self, path: str) -> None:
        self._items.add(Path(path).as_posix())

    def delete_file(self, path: str) -> None:
        full_path = self.get_full_path(path)
        if full_path.exists():
            full_path.unlink()
        self._items.discard(Path(path).as_posix())

    def delete_directory(self, path: str, recursive: bool = False) -> None:
        """Remove a directory; non-empty directories need ``recursive``.

        Raises:
            OSError: If the directory is not empty and ``recursive`` is False.
        """
        full_path = self.get_full_path(path)
        if not full_path.exists():
            return
        if recursive:
            shutil.rmtree(full_path)
        else:
            full_path.rmdir()
        prefix = Path(path).as_posix().rstrip("/") + "/"
        self._items = {item for item in self._items if not item.startswith(prefix)}

    def add_reference(self, reference_path: str) -> None:
        self._references[Path(reference_path).stem] = reference_path

    def add_gac_reference(self, name: str) -> None:
        self._references[name] = f"gac:{name}"

    def remove_reference(self, name: str) -> None:
        self._references.pop(name, None)

    def reference_exists(self, name: str) -> bool:
        return name in self._references

    def is_supported_file(self, path: str) -> bool:
        # web.config and web.*.config belong to web projects only
        file_name = Path(path).name.lower()
        return not (file_name.startswith("web.") and file_name.endswith(".config"))

    def exclude_file(self, path: str) -> bool:
        """Files under bin/ are written but not added to the project."""
        parts = Path(path).parts
        return len(parts) > 1 and parts[0].lower() == BIN_DIR

    def get_property_value(self, property_name: str) -> str:
        """Return a project property.

        Raises:
            KeyError: If the project has no such property.
        """
        return self._properties[property_name.lower()]


class CloudServiceProjectSystem(ProjectSystem):
    """Project system for cloud-service projects.

    A cloud-service project only describes a deployment: it takes no
    references, and its files are neither added nor removed. Package files
    still reach the disk.
    """

    ROOT_NAMESPACE = "RootNamespace"
    OUTPUT_NAME = "OutputName"
    DEFAULT_NAMESPACE = "Azure"

    @property
    def is_binding_redirect_supported(self) -> bool:
        return False

    def add_reference(self, reference_path: str) -> None:
        pass

    def add_gac_reference(self, name: str) -> None:
        pass

    def add_file_to_container(self, path: str) -> None:
        pass

    def delete_directory(self, path: str, recursive: bool = False) -> None:
        pass

    def delete_file(self, path: str) -> None:
        pass

    def remove_reference(self, name: str) -> None:
        pass

    def reference_exists(self, name: str) -> bool:
        return True

    def is_supported_file(self, path: str) -> bool:
        return True

    def exclude_file(self, path: str) -> bool:
        return False

    def get_property_value(self, property_name: str) -> str:
        if property_name.lower() == self.ROOT_NAMESPACE.lower():
            try:
                return super().get_property_value(self.OUTPUT_NAME)
            except KeyError:
                return self.DEFAULT_NAMESPACE
        return super().get_property_value(property_name)


PROJECT_SYSTEMS: dict[str, type[ProjectSystem]] = {
    "default": ProjectSystem,
    "cloudservice": CloudServiceProjectSystem,
}


def create_project_system(
    project: Project, base_dir: Path, properties: dict[str, str] | None = None
) -> ProjectSystem:
    """Create the project system for ``project``'s kind.

    The project directory is ``project.path`` (or the project name) under
    ``base_dir``.

    Raises:
        ValueError: If the project kind is unknown.
    """
    cls = PROJECT_SYSTEMS.get(project.kind.lower())
    if cls is None:
        raise ValueError(f"Unknown project kind {project.kind!r} for project {project.name!r}")
    return cls(base_dir / (project.path or project.name), properties)

"""Project lookup over a solution snapshot.

Solution folders may nest to any depth; every search below walks the whole
tree. The host graph is a tree, so no cycle tracking is done.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Iterable, Iterator, List, Optional

from .host_model import ProjectDescriptor, ProjectNode, SolutionSnapshot, is_buildable_kind

logger = logging.getLogger(__name__)


def _normalise_dir(path: str) -> str:
    cleaned = (path or "").strip()
    if not cleaned:
        return ""
    cleaned = os.path.normpath(cleaned)
    if len(cleaned) > 1:
        cleaned = cleaned.rstrip("\\/")
    return cleaned.casefold()


def same_directory(left: str, right: str) -> bool:
    """Case-insensitive directory comparison."""
    a, b = _normalise_dir(left), _normalise_dir(right)
    return bool(a) and a == b


def _find(nodes: Iterable[ProjectNode], match: Callable[[ProjectNode], bool]) -> Optional[ProjectNode]:
    for node in nodes:
        try:
            if match(node):
                return node
            if node.is_solution_folder and node.children:
                found = _find(node.children, match)
                if found is not None:
                    return found
        except Exception as exc:
            logger.warning("Error in recursive project search at %s: %s", getattr(node, "name", "?"), exc)
    return None


def find_project_by_directory(nodes: Iterable[ProjectNode], target_directory: str) -> Optional[ProjectNode]:
    if not target_directory or not target_directory.strip():
        return None
    return _find(nodes, lambda node: same_directory(node.directory, target_directory))


def find_project_by_full_name(nodes: Iterable[ProjectNode], full_name: str) -> Optional[ProjectNode]:
    if not full_name:
        return None
    wanted = full_name.casefold()
    return _find(nodes, lambda node: bool(node.full_name) and node.full_name.casefold() == wanted)


def find_project_by_name(nodes: Iterable[ProjectNode], name: str) -> Optional[ProjectNode]:
    if not name:
        return None
    return _find(nodes, lambda node: not node.is_solution_folder and node.name == name)


def iter_projects(nodes: Iterable[ProjectNode]) -> Iterator[ProjectNode]:
    """Yield every non-folder node, depth first, in host order."""
    for node in nodes:
        if node.is_solution_folder:
            logger.debug("Found solution folder: %s, scanning contents...", node.name)
            yield from iter_projects(node.children)
        else:
            yield node


def enumerate_projects(nodes: Iterable[ProjectNode]) -> List[ProjectDescriptor]:
    """Return descriptors for all projects whose directory exists on disk."""
    found: List[ProjectDescriptor] = []
    for node in iter_projects(nodes):
        directory = node.directory
        if directory and os.path.isdir(directory):
            found.append(node.to_descriptor())
            logger.info("Added project: %s at %s", node.name, directory)
        else:
            logger.info("Skipping project %s: Invalid or non-existent directory", node.name)
    logger.info("Project detection complete: Found %d projects", len(found))
    return found


def _from_selection(snapshot: SolutionSnapshot) -> Optional[ProjectNode]:
    project = find_project_by_full_name(snapshot.projects, snapshot.selected_project or "")
    if project is not None:
        logger.info("Found project from selection: %s", project.name)
    return project


def _from_active_document(snapshot: SolutionSnapshot) -> Optional[ProjectNode]:
    project = find_project_by_full_name(snapshot.projects, snapshot.active_document_project or "")
    if project is not None:
        logger.info("Found project from active document: %s", project.name)
    return project


def _from_startup(snapshot: SolutionSnapshot) -> Optional[ProjectNode]:
    logger.info("Startup projects count: %d", len(snapshot.startup_projects))
    if not snapshot.startup_projects:
        return None
    project_name = snapshot.startup_projects[0]
    logger.info("Looking for startup project: %s", project_name)
    project = find_project_by_name(snapshot.projects, project_name)
    if project is not None:
        logger.info("Found startup project: %s", project.name)
    return project


def _from_buildable_kind(snapshot: SolutionSnapshot) -> Optional[ProjectNode]:
    for descriptor in enumerate_projects(snapshot.projects):
        logger.info("Checking project: %s, Kind: %s", descriptor.name, descriptor.kind)
        if is_buildable_kind(descriptor.kind):
            project = find_project_by_full_name(snapshot.projects, descriptor.full_name)
            if project is not None:
                logger.info("Found suitable project: %s", project.name)
                return project
    return None


def _first_project(snapshot: SolutionSnapshot) -> Optional[ProjectNode]:
    if not snapshot.projects:
        return None
    first = snapshot.projects[0]
    logger.info("Using first project as fallback: %s", first.name)
    return first


_ACTIVE_PROJECT_STEPS = (
    ("selection", _from_selection),
    ("active document", _from_active_document),
    ("startup project", _from_startup),
    ("buildable project scan", _from_buildable_kind),
    ("first project", _first_project),
)


def find_active_project(snapshot: SolutionSnapshot) -> Optional[ProjectNode]:
    """Best guess at the project the user is working in.

    Tries, in order: the selected item's project, the active document's
    project, the startup project, the first buildable project anywhere in the
    tree, and finally the first top-level node. A failing step is logged and
    the next one is tried.
    """

    logger.info(
        "Attempting to get active project. Solution loaded: %s, top-level items: %d",
        snapshot.is_open,
        len(snapshot.projects),
    )
    for label, step in _ACTIVE_PROJECT_STEPS:
        try:
            project = step(snapshot)
        except Exception as exc:
            logger.warning("Error getting project from %s: %s", label, exc)
            continue
        if project is not None:
            return project
    logger.info("No active project could be determined")
    return None


def resolve_project(snapshot: SolutionSnapshot, project_directory: Optional[str]) -> Optional[ProjectNode]:
    """Exact lookup when a directory is given, best guess otherwise."""
    if project_directory and project_directory.strip():
        logger.info("Using specified project directory: %s", project_directory)
        project = find_project_by_directory(snapshot.projects, project_directory.strip())
        if project is None:
            logger.info("Could not find project with directory: %s", project_directory)
        else:
            logger.info("Found matching project: %s", project.name)
        return project
    logger.info("No project directory provided, using active project")
    return find_active_project(snapshot)


__all__ = [
    "enumerate_projects",
    "find_active_project",
    "find_project_by_directory",
    "find_project_by_full_name",
    "find_project_by_name",
    "iter_projects",
    "resolve_project",
    "same_directory",
]

"""Read-only snapshot of the host's solution tree."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

SOLUTION_FOLDER_KIND = "{66A26720-8FB5-11D2-AA7E-00C04F688DDE}"

BUILDABLE_KINDS: Tuple[str, ...] = (
    "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}",  # C#
    "{F184B08F-C81C-45F6-A57F-5ABD9991F28F}",  # VB.NET
    "{9A19103F-16F7-4668-BE54-9A1E7A4F7556}",  # SDK-style
    "{82b43b9b-a64c-4715-b499-d71e9ca2bd60}",  # VSIX
)


class HostError(RuntimeError):
    """Raised when a call into the host project model fails."""


def _same_kind(left: str, right: str) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


def is_buildable_kind(kind: str) -> bool:
    return any(_same_kind(kind, candidate) for candidate in BUILDABLE_KINDS)


@dataclass
class ProjectNode:
    """One node of the solution tree: a project or a solution folder."""

    name: str
    full_name: str
    kind: str
    children: List["ProjectNode"] = field(default_factory=list)

    @property
    def directory(self) -> str:
        if not self.full_name:
            return ""
        return os.path.dirname(self.full_name)

    @property
    def is_solution_folder(self) -> bool:
        return _same_kind(self.kind, SOLUTION_FOLDER_KIND)

    def to_descriptor(self) -> "ProjectDescriptor":
        return ProjectDescriptor(
            name=self.name,
            full_name=self.full_name,
            directory=self.directory,
            kind=self.kind,
        )


@dataclass(frozen=True)
class ProjectDescriptor:
    name: str
    full_name: str
    directory: str
    kind: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "directory": self.directory,
            "fullName": self.full_name,
        }


@dataclass(frozen=True)
class FolderDescriptor:
    name: str
    path: str
    full_path: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "path": self.path}


@dataclass
class SolutionSnapshot:
    """Solution state captured on the host context for a single request.

    ``selected_project`` and ``active_document_project`` hold the full names of
    the projects owning the current selection / active document, when the host
    can tell. ``startup_projects`` holds project names.
    """

    is_open: bool
    file_name: str = ""
    projects: List[ProjectNode] = field(default_factory=list)
    selected_project: Optional[str] = None
    active_document_project: Optional[str] = None
    startup_projects: List[str] = field(default_factory=list)

    @classmethod
    def closed(cls) -> "SolutionSnapshot":
        return cls(is_open=False)


class HostAdapter(ABC):
    """Bridge between the service and the host's project model.

    Implementations may only be called from the host dispatcher.
    """

    @abstractmethod
    def snapshot(self) -> SolutionSnapshot:
        ...

    @abstractmethod
    def add_file(self, project: ProjectNode, file_path: Path) -> None:
        """Register an already written file with ``project``."""


__all__ = [
    "BUILDABLE_KINDS",
    "FolderDescriptor",
    "HostAdapter",
    "HostError",
    "ProjectDescriptor",
    "ProjectNode",
    "SOLUTION_FOLDER_KIND",
    "SolutionSnapshot",
    "is_buildable_kind",
]

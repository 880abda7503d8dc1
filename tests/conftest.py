"""Shared fixtures: an in-memory host and a small solution tree on disk."""

import threading
from pathlib import Path
from typing import List, Tuple

import pytest

from file_receiver.core.host_model import (
    SOLUTION_FOLDER_KIND,
    HostAdapter,
    ProjectNode,
    SolutionSnapshot,
)

CSHARP_KIND = "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}"
WEBSITE_KIND = "{E24C65DC-7377-472B-9ABA-BC803B73C61A}"


class InMemoryHost(HostAdapter):
    """Host double that serves a fixed snapshot and records registrations."""

    def __init__(self, snapshot: SolutionSnapshot) -> None:
        self._snapshot = snapshot
        self.added: List[Tuple[str, Path]] = []
        self.thread_names: set = set()
        self._lock = threading.Lock()

    def snapshot(self) -> SolutionSnapshot:
        self.thread_names.add(threading.current_thread().name)
        return self._snapshot

    def add_file(self, project: ProjectNode, file_path: Path) -> None:
        self.thread_names.add(threading.current_thread().name)
        with self._lock:
            self.added.append((project.name, Path(file_path)))


def make_project(root: Path, name: str, kind: str = CSHARP_KIND, create: bool = True) -> ProjectNode:
    directory = root / name
    if create:
        directory.mkdir(parents=True, exist_ok=True)
    return ProjectNode(name=name, full_name=str(directory / f"{name}.csproj"), kind=kind)


def make_folder(name: str, *children: ProjectNode) -> ProjectNode:
    return ProjectNode(name=name, full_name="", kind=SOLUTION_FOLDER_KIND, children=list(children))


@pytest.fixture
def solution_tree(tmp_path):
    """App at the top, Tests under 'test', Integration under 'test/slow', Missing without a directory."""
    app = make_project(tmp_path, "App")
    tests = make_project(tmp_path, "Tests")
    integration = make_project(tmp_path, "Integration")
    missing = make_project(tmp_path, "Missing", create=False)
    nested = make_folder("test", tests, make_folder("slow", integration))
    return SolutionSnapshot(
        is_open=True,
        file_name=str(tmp_path / "Demo.sln"),
        projects=[app, nested, missing],
    )


@pytest.fixture
def memory_host(solution_tree):
    return InMemoryHost(solution_tree)

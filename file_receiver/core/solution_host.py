"""Host adapter backed by a Visual Studio solution file on disk."""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path, PureWindowsPath
from typing import Dict, List, Optional

from .host_model import SOLUTION_FOLDER_KIND, HostAdapter, HostError, ProjectNode, SolutionSnapshot

logger = logging.getLogger(__name__)

# Type GUID used for solution folders inside .sln files
SLN_FOLDER_TYPE = "{2150E333-8FDC-42A3-9474-1A3956D46DE8}"

_PROJECT_RE = re.compile(
    r'^\s*Project\("(?P<type>\{[^}]+\})"\)\s*=\s*"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"\s*,\s*"(?P<guid>\{[^}]+\})"'
)
_NESTED_RE = re.compile(r"^\s*(?P<child>\{[^}]+\})\s*=\s*(?P<parent>\{[^}]+\})\s*$")

_COMPILE_EXTENSIONS = {".cs", ".vb"}


def _local_path(solution_dir: Path, raw: str) -> str:
    parts = PureWindowsPath(raw).parts
    return str((solution_dir.joinpath(*parts)).resolve())


def parse_solution(solution_path: Path) -> List[ProjectNode]:
    """Parse a ``.sln`` file into top-level nodes with nested solution folders."""

    text = solution_path.read_text(encoding="utf-8-sig", errors="replace")
    solution_dir = solution_path.parent
    nodes: Dict[str, ProjectNode] = {}
    order: List[str] = []
    nesting: Dict[str, str] = {}
    in_nested_section = False

    for line in text.splitlines():
        match = _PROJECT_RE.match(line)
        if match:
            guid = match.group("guid").upper()
            type_guid = match.group("type").upper()
            if type_guid == SLN_FOLDER_TYPE:
                node = ProjectNode(name=match.group("name"), full_name="", kind=SOLUTION_FOLDER_KIND)
            else:
                node = ProjectNode(
                    name=match.group("name"),
                    full_name=_local_path(solution_dir, match.group("path")),
                    kind=match.group("type"),
                )
            nodes[guid] = node
            order.append(guid)
            continue

        stripped = line.strip()
        if stripped.startswith("GlobalSection(NestedProjects)"):
            in_nested_section = True
            continue
        if in_nested_section:
            if stripped.startswith("EndGlobalSection"):
                in_nested_section = False
                continue
            nested = _NESTED_RE.match(line)
            if nested:
                nesting[nested.group("child").upper()] = nested.group("parent").upper()

    top_level: List[ProjectNode] = []
    for guid in order:
        parent_guid = nesting.get(guid)
        parent = nodes.get(parent_guid) if parent_guid else None
        if parent is not None:
            parent.children.append(nodes[guid])
        else:
            top_level.append(nodes[guid])
    return top_level


def _msbuild_namespace(root: ET.Element) -> str:
    if root.tag.startswith("{"):
        return root.tag[1:].split("}", 1)[0]
    return ""


def register_in_project_file(project_file: Path, file_path: Path) -> bool:
    """Add ``file_path`` to an MSBuild project file.

    Returns False when nothing had to be written: SDK-style projects pick up
    files on their own, and files already listed are left alone.
    """

    try:
        tree = ET.parse(project_file, parser=ET.XMLParser(target=ET.TreeBuilder(insert_comments=True)))
    except (ET.ParseError, OSError) as exc:
        raise HostError(f"Cannot read project file {project_file}: {exc}") from exc

    root = tree.getroot()
    namespace = _msbuild_namespace(root)
    if root.tag.split("}")[-1] != "Project":
        raise HostError(f"{project_file} is not an MSBuild project file")
    if root.get("Sdk"):
        logger.info("SDK-style project %s includes %s implicitly", project_file.name, file_path.name)
        return False

    include = str(PureWindowsPath(os.path.relpath(file_path, project_file.parent)))
    qualify = (lambda tag: f"{{{namespace}}}{tag}") if namespace else (lambda tag: tag)

    for group in root.iter(qualify("ItemGroup")):
        for item in group:
            if (item.get("Include") or "").lower() == include.lower():
                logger.info("%s already listed in %s", include, project_file.name)
                return False

    item_type = "Compile" if file_path.suffix.lower() in _COMPILE_EXTENSIONS else "None"
    group = ET.SubElement(root, qualify("ItemGroup"))
    ET.SubElement(group, qualify(item_type), {"Include": include})

    if namespace:
        ET.register_namespace("", namespace)
    tree.write(project_file, encoding="utf-8", xml_declaration=True)
    logger.info("Registered %s as %s in %s", include, item_type, project_file.name)
    return True


class SolutionFileHost(HostAdapter):
    """Reads the solution tree from a ``.sln`` file on every snapshot."""

    def __init__(self, solution_path: Optional[Path] = None, startup_project: Optional[str] = None) -> None:
        self.solution_path = Path(solution_path).expanduser().resolve() if solution_path else None
        self.startup_project = startup_project

    def snapshot(self) -> SolutionSnapshot:
        if self.solution_path is None or not self.solution_path.is_file():
            return SolutionSnapshot.closed()
        try:
            projects = parse_solution(self.solution_path)
        except OSError as exc:
            raise HostError(f"Cannot read solution {self.solution_path}: {exc}") from exc
        return SolutionSnapshot(
            is_open=True,
            file_name=str(self.solution_path),
            projects=projects,
            startup_projects=[self.startup_project] if self.startup_project else [],
        )

    def add_file(self, project: ProjectNode, file_path: Path) -> None:
        if not project.full_name:
            raise HostError(f"Project '{project.name}' has no project file")
        register_in_project_file(Path(project.full_name), Path(file_path))

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..context import BridgeContext, get_bridge
from ...core.host_model import ProjectNode
from ...core.resolver import resolve_project
from ...services.folder_service import list_project_folders

logger = logging.getLogger(__name__)

router = APIRouter(tags=["folders"])

NO_ACTIVE_PROJECT = (
    "No active project found. Please select a project in Solution Explorer "
    "or open a file from your project."
)


@dataclass
class ProjectLookup:
    """Outcome of resolving the target project on the host context."""

    solution_open: bool
    project: Optional[ProjectNode] = None

    @property
    def directory(self) -> str:
        return self.project.directory if self.project is not None else ""


def lookup_project(bridge: BridgeContext, project_directory: Optional[str]) -> ProjectLookup:
    snapshot = bridge.host.snapshot()
    if not snapshot.is_open:
        return ProjectLookup(solution_open=False)
    logger.info("Solution is open: %s", snapshot.file_name)
    return ProjectLookup(solution_open=True, project=resolve_project(snapshot, project_directory))


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/folders")
async def list_folders(
    project: Optional[str] = Query(None, description="Directory of the project to list."),
    bridge: BridgeContext = Depends(get_bridge),
):
    logger.info("=== FOLDER REQUEST ===")
    try:
        lookup = await bridge.dispatcher.run(lookup_project, bridge, project)
        if not lookup.solution_open:
            logger.info("ERROR: No solution is currently open")
            return _error(404, "No solution is open")

        if lookup.project is None:
            if project and project.strip():
                return _error(404, "Project not found with specified directory")
            logger.info("ERROR: No active project found after exhaustive search")
            return _error(404, NO_ACTIVE_PROJECT)

        project_dir = lookup.directory
        if not project_dir:
            logger.info("ERROR: Could not determine project directory from: %s", lookup.project.full_name)
            return _error(500, "Could not determine project directory")
        logger.info("Project directory: %s", project_dir)
        if not os.path.isdir(project_dir):
            logger.info("ERROR: Project directory does not exist: %s", project_dir)
            return _error(500, "Project directory does not exist")

        folders = list_project_folders(Path(project_dir))
    except Exception as exc:
        logger.exception("ERROR in list_folders: %s", exc)
        return _error(500, "Internal server error")

    logger.info("SUCCESS: Sent folder structure with %d folders for project %s", len(folders), lookup.project.name)
    return JSONResponse(status_code=200, content={"folders": [f.to_dict() for f in folders]})

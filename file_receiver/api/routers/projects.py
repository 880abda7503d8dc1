from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..context import BridgeContext, get_bridge
from ...core.host_model import SolutionSnapshot
from ...core.resolver import enumerate_projects

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _collect_projects(bridge: BridgeContext) -> tuple[SolutionSnapshot, List[Dict[str, Any]]]:
    snapshot = bridge.host.snapshot()
    if not snapshot.is_open:
        return snapshot, []
    logger.info("Solution is open: %s", snapshot.file_name)
    logger.info("Solution has %d top-level items", len(snapshot.projects))
    return snapshot, [p.to_dict() for p in enumerate_projects(snapshot.projects)]


@router.get("/projects")
async def list_projects(bridge: BridgeContext = Depends(get_bridge)):
    logger.info("=== PROJECT LIST REQUEST ===")
    try:
        snapshot, projects = await bridge.dispatcher.run(_collect_projects, bridge)
    except Exception as exc:
        logger.exception("ERROR in list_projects: %s", exc)
        return _error(500, "Internal server error")

    if not snapshot.is_open:
        logger.info("ERROR: No solution is currently open")
        return _error(404, "No solution is open")
    if not projects:
        logger.info("ERROR: No projects found in solution")
        return _error(404, "No projects found in solution")

    logger.info("SUCCESS: Sent project list with %d projects", len(projects))
    return JSONResponse(status_code=200, content={"projects": projects})

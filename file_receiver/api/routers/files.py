from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ..context import BridgeContext, get_bridge
from .folders import lookup_project
from ...core.host_model import HostError
from ...services.delivery_service import (
    FolderPathError,
    PayloadError,
    parse_payload,
    resolve_target_path,
    write_file,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

ADD_FAILED = "Failed to add file to project"


@router.post("/")
async def add_file(request: Request, bridge: BridgeContext = Depends(get_bridge)):
    logger.info("Processing POST request for file upload")
    try:
        try:
            payload = parse_payload(await request.body())
        except PayloadError as exc:
            logger.info("Failed to parse file data from request: %s", exc)
            return PlainTextResponse(str(exc), status_code=400)

        lookup = await bridge.dispatcher.run(lookup_project, bridge, payload.projectDirectory)
        if lookup.project is None or not lookup.directory:
            logger.info("No target project for '%s'", payload.fileName)
            return PlainTextResponse(ADD_FAILED, status_code=500)

        try:
            target = resolve_target_path(Path(lookup.directory), payload.fileName, payload.folderPath)
        except FolderPathError as exc:
            logger.info("%s", exc)
            return PlainTextResponse("Invalid folder path", status_code=400)

        try:
            await asyncio.get_running_loop().run_in_executor(None, write_file, target, payload.decoded_content())
            await bridge.dispatcher.run(bridge.host.add_file, lookup.project, target)
        except (OSError, HostError) as exc:
            logger.info("Error adding file to project: %s", exc)
            return PlainTextResponse(ADD_FAILED, status_code=500)
    except Exception as exc:
        logger.exception("Error handling file upload: %s", exc)
        return PlainTextResponse("Internal server error", status_code=500)

    logger.info("File '%s' added to project %s successfully", payload.fileName, lookup.project.name)
    return PlainTextResponse("File added successfully", status_code=200)

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from .context import BridgeContext
from ..core.dispatcher import HostDispatcher
from ..core.host_model import HostAdapter
from ..core.output_pane import create_output_pane
from ..core.settings import BridgeSettings
from ..core.solution_host import SolutionFileHost

logger = logging.getLogger(__name__)

# The extension calls from a chrome-extension:// origin
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_OTHER_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]


def _describe_client(request: Request) -> str:
    client = request.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"


def create_app(
    host: Optional[HostAdapter] = None,
    settings: Optional[BridgeSettings] = None,
    dispatcher: Optional[HostDispatcher] = None,
) -> FastAPI:
    settings = settings or BridgeSettings.from_env()
    create_output_pane(settings.log_file, settings.log_level)
    if host is None:
        host = SolutionFileHost(settings.solution_path, startup_project=settings.startup_project)

    app = FastAPI(
        title="File Receiver Bridge",
        version="0.3.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.bridge = BridgeContext(host=host, settings=settings, dispatcher=dispatcher or HostDispatcher())

    @app.middleware("http")
    async def bridge_middleware(request: Request, call_next):
        logger.info("Received %s request from %s", request.method, _describe_client(request))
        if request.method == "OPTIONS":
            logger.info("Handling CORS preflight request")
            response: Response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception("Error processing request: %s", exc)
                response = PlainTextResponse("Internal server error", status_code=500)
        response.headers.update(CORS_HEADERS)
        return response

    from .routers import files as r_files
    from .routers import folders as r_folders
    from .routers import projects as r_projects

    app.include_router(r_projects.router)
    app.include_router(r_folders.router)
    app.include_router(r_files.router)

    # Registered last so it only sees what the routers above did not match
    @app.api_route("/{path:path}", methods=_OTHER_METHODS, include_in_schema=False)
    async def method_not_allowed(request: Request) -> PlainTextResponse:
        logger.info("Method %s not allowed for %s", request.method, request.url.path)
        return PlainTextResponse("Method Not Allowed", status_code=405)

    return app


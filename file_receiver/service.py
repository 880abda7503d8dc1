"""Lifecycle of the bridge's HTTP listener."""

from __future__ import annotations

import errno
import logging
import os
import socket
import threading
from typing import Optional

import uvicorn

from .api.main import create_app
from .core.dispatcher import HostDispatcher
from .core.host_model import HostAdapter
from .core.output_pane import create_output_pane
from .core.settings import BridgeSettings
from .core.solution_host import SolutionFileHost

logger = logging.getLogger(__name__)


def is_port_in_use(host: str, port: int) -> bool:
    """True when ``host:port`` cannot be bound right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        if os.name != "nt":
            probe.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            probe.bind((host, port))
        except OSError as exc:
            if exc.errno in (errno.EADDRINUSE, errno.EACCES):
                return True
            raise
    return False


class FileReceiverService:
    """Runs the bridge's HTTP listener on a background thread.

    Each accepted connection is handled as its own asyncio task by uvicorn;
    calls into the host model are funnelled through one ``HostDispatcher``.
    """

    def __init__(self, settings: Optional[BridgeSettings] = None, host: Optional[HostAdapter] = None) -> None:
        self.settings = settings or BridgeSettings.from_env()
        self.host = host or SolutionFileHost(self.settings.solution_path, startup_project=self.settings.startup_project)
        self.dispatcher = HostDispatcher()
        self.app = create_app(host=self.host, settings=self.settings, dispatcher=self.dispatcher)
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _build_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level.lower(),
            access_log=True,
        )
        return uvicorn.Server(config)

    def _can_start(self) -> bool:
        create_output_pane(self.settings.log_file, self.settings.log_level)
        port = self.settings.port
        try:
            in_use = is_port_in_use(self.settings.host, port)
        except OSError as exc:
            logger.error("Failed to start HTTP listener: %s", exc)
            return False
        if in_use:
            logger.error(
                "ERROR: Port %d is already in use. Please close other applications using this port.", port
            )
            return False
        return True

    def start(self) -> bool:
        """Start listening in the background; False when the service did not come up."""
        if self.is_running:
            return True
        if not self._can_start():
            return False
        try:
            self._server = self._build_server()
            self._thread = threading.Thread(target=self._server.run, name="file-receiver-listener", daemon=True)
            self._thread.start()
        except Exception as exc:
            logger.exception("Error starting File Receiver Service: %s", exc)
            return False
        logger.info("File Receiver Service started on %s", self.settings.base_url)
        logger.info("Service is ready to receive files from the browser extension")
        return True

    def serve_forever(self) -> bool:
        """Run the listener on the calling thread until interrupted."""
        if not self._can_start():
            return False
        self._server = self._build_server()
        logger.info("File Receiver Service listening on %s", self.settings.base_url)
        try:
            self._server.run()
        finally:
            self.dispatcher.shutdown()
        return True

    def stop(self, timeout: float = 5.0) -> None:
        try:
            if self._server is not None:
                self._server.should_exit = True
            if self._thread is not None:
                self._thread.join(timeout=timeout)
        except Exception as exc:
            logger.error("Error stopping File Receiver Service: %s", exc)
        finally:
            self._thread = None
            self._server = None
            self.dispatcher.shutdown()

from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Request

from ..core.dispatcher import HostDispatcher
from ..core.host_model import HostAdapter
from ..core.settings import BridgeSettings


@dataclass
class BridgeContext:
    """Per-application collaborators shared by all routers."""

    host: HostAdapter
    settings: BridgeSettings
    dispatcher: HostDispatcher = field(default_factory=HostDispatcher)


def get_bridge(request: Request) -> BridgeContext:
    return request.app.state.bridge

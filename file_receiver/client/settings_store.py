"""Persisted settings for the extension side of the bridge.

Settings live in one JSON document; listeners are told which keys changed
whenever an update is saved.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Set

from .bridge_client import DEFAULT_BRIDGE_URL

logger = logging.getLogger(__name__)

SettingsListener = Callable[["ClientSettings", Set[str]], None]

MANDATORY_FIELDS = (
    ("menu_name", "Menu Name"),
    ("action_name", "Action Name"),
    ("root_file_name", "Root File Name"),
)


@dataclass(frozen=True)
class ClientSettings:
    extension_enabled: bool = False
    action_name: str = ""
    menu_name: str = ""
    root_file_name: str = ""
    bridge_url: str = DEFAULT_BRIDGE_URL
    project_directory: str = ""
    folder_path: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})


def missing_mandatory_fields(settings: ClientSettings) -> List[str]:
    return [label for attr, label in MANDATORY_FIELDS if not str(getattr(settings, attr) or "").strip()]


class SettingsStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()
        self._listeners: List[SettingsListener] = []

    def load(self) -> ClientSettings:
        if not self.path.exists():
            return ClientSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return ClientSettings()
        if not isinstance(data, dict):
            return ClientSettings()
        return ClientSettings.from_dict(data)

    def save(self, settings: ClientSettings) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")

    def update(self, **changes: Any) -> ClientSettings:
        with self._lock:
            current = self.load()
            updated = replace(current, **changes)
            changed = {key for key in changes if getattr(current, key) != getattr(updated, key)}
            if changed:
                self.save(updated)
            listeners = list(self._listeners)
        if changed:
            for listener in listeners:
                try:
                    listener(updated, changed)
                except Exception as exc:
                    logger.warning("Settings listener failed: %s", exc)
        return updated

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

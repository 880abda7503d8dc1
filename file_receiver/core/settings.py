from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


def load_env_files() -> None:
    """Load ``.env`` from the working directory, then from the repository root."""
    load_dotenv()
    root_env = Path(__file__).resolve().parents[2] / ".env"
    if root_env.exists():
        load_dotenv(dotenv_path=root_env, override=False)


def _optional_path(raw: Optional[str]) -> Optional[Path]:
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip()).expanduser()


@dataclass(frozen=True)
class BridgeSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    solution_path: Optional[Path] = None
    startup_project: Optional[str] = None
    log_file: Optional[Path] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_files: bool = True, port: Optional[int] = None) -> "BridgeSettings":
        """Read ``BRIDGE_*`` variables; an explicit ``port`` wins over ``BRIDGE_PORT``."""
        if load_files:
            load_env_files()
        if port is None:
            port_raw = os.getenv("BRIDGE_PORT", str(DEFAULT_PORT)).strip()
            try:
                port = int(port_raw)
            except ValueError as exc:
                raise ValueError(f"BRIDGE_PORT must be an integer, got '{port_raw}'") from exc
        return cls(
            host=os.getenv("BRIDGE_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST,
            port=port,
            solution_path=_optional_path(os.getenv("BRIDGE_SOLUTION")),
            startup_project=(os.getenv("BRIDGE_STARTUP_PROJECT") or "").strip() or None,
            log_file=_optional_path(os.getenv("BRIDGE_LOG_FILE")),
            log_level=(os.getenv("BRIDGE_LOG_LEVEL") or "INFO").strip().upper(),
        )

    def with_overrides(self, **overrides: Any) -> "BridgeSettings":
        """Copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        for key in ("solution_path", "log_file"):
            if key in changes:
                changes[key] = _optional_path(str(changes[key]))
        return replace(self, **changes)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/"

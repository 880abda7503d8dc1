"""HTTP client for the bridge, mirroring the calls the browser extension makes."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BRIDGE_URL = "http://localhost:8080/"


class BridgeClientError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    text = (response.text or "").strip()
    return text or f"HTTP {response.status_code}: {response.reason}"


class BridgeClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BRIDGE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self.base_url + path.lstrip("/")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.ConnectionError as exc:
            raise BridgeClientError(
                f"Network error. Check if the bridge is running on {self.base_url}"
            ) from exc
        except requests.RequestException as exc:
            raise BridgeClientError(f"Request to {url} failed: {exc}") from exc
        if not response.ok:
            raise BridgeClientError(_error_message(response), status_code=response.status_code)
        return response

    def list_projects(self) -> List[Dict[str, str]]:
        data = self._request("GET", "projects").json()
        return list(data.get("projects") or [])

    def list_folders(self, project_directory: Optional[str] = None) -> List[Dict[str, str]]:
        params = {}
        if project_directory and project_directory.strip():
            params["project"] = project_directory.strip()
        data = self._request("GET", "folders", params=params or None).json()
        return list(data.get("folders") or [])

    def send_file(
        self,
        file_name: str,
        content: str | bytes,
        folder_path: Optional[str] = None,
        project_directory: Optional[str] = None,
        encode_base64: bool = False,
    ) -> str:
        """Deliver one file; returns the bridge's confirmation text.

        ``bytes`` content is always sent base64 encoded.
        """
        if isinstance(content, bytes):
            text = base64.b64encode(content).decode("ascii")
        elif encode_base64:
            text = base64.b64encode(content.encode("utf-8")).decode("ascii")
        else:
            text = content

        body: Dict[str, str] = {"fileName": file_name, "content": text}
        if folder_path and folder_path.strip():
            body["folderPath"] = folder_path.strip()
        if project_directory and project_directory.strip():
            body["projectDirectory"] = project_directory.strip()

        logger.info("Sending %s to %s", file_name, self.base_url)
        return self._request("POST", "", json=body).text
